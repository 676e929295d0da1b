"""
HTTP surface: public intake plus workflow and run management.
"""

from .dependencies import set_dependencies
from .forms import FormRelay
from .intake import router as intake_router
from .routes import router

__all__ = ["set_dependencies", "FormRelay", "intake_router", "router"]
