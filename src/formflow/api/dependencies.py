"""
Shared service dependencies for the API routers.
"""

from typing import Optional

from fastapi import Header, HTTPException

from ..orchestrator import RunOrchestrator
from ..persistence.repository import RunStore, WorkflowConfigRepository
from ..providers.catalog import ProviderCatalog
from .forms import FormRelay

# These will be set by the main app
_orchestrator: Optional[RunOrchestrator] = None
_form_relay: Optional[FormRelay] = None
_catalog: Optional[ProviderCatalog] = None
_default_tenant: str = "default"


def set_dependencies(
    orchestrator: RunOrchestrator,
    form_relay: Optional[FormRelay] = None,
    default_tenant: str = "default",
    catalog: Optional[ProviderCatalog] = None,
):
    """Set dependencies from main app."""
    global _orchestrator, _form_relay, _default_tenant, _catalog
    _orchestrator = orchestrator
    _form_relay = form_relay
    _catalog = catalog
    _default_tenant = default_tenant


def get_orchestrator() -> RunOrchestrator:
    if not _orchestrator:
        raise HTTPException(status_code=503, detail="Service not ready")
    return _orchestrator


def get_configs() -> WorkflowConfigRepository:
    return get_orchestrator().configs


def get_runs() -> RunStore:
    return get_orchestrator().runs


def get_form_relay() -> Optional[FormRelay]:
    return _form_relay


def get_catalog() -> ProviderCatalog:
    """Configured catalog, else the built-in list bounded by the gateway's adapters."""
    if _catalog is None:
        return ProviderCatalog(get_orchestrator().gateway.registry)
    return _catalog


def get_tenant(x_site_id: Optional[str] = Header(default=None)) -> str:
    """Tenant from the X-Site-Id header, else the configured site."""
    if x_site_id and x_site_id.strip():
        return x_site_id.strip()
    return _default_tenant
