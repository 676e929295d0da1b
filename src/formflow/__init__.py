"""
formflow

Turns form submissions into structured AI output:
- Prompt templates rendered against the submission
- Anthropic, OpenAI and Google adapters behind one gateway
- Conditional follow-on actions
- Queued/processing/success/error run lifecycle with retry-as-new-run
"""

from .core.errors import (
    WorkflowEngineError,
    ConfigNotFoundError,
    RunNotFoundError,
    ProviderError,
    UnparseableOutputError,
    ActionDispatchError,
)
from .models import WorkflowConfig, WorkflowRun, WorkflowAction, ActionResult, RunStatus
from .orchestrator import RunOrchestrator

__all__ = [
    "WorkflowEngineError",
    "ConfigNotFoundError",
    "RunNotFoundError",
    "ProviderError",
    "UnparseableOutputError",
    "ActionDispatchError",
    "WorkflowConfig",
    "WorkflowRun",
    "WorkflowAction",
    "ActionResult",
    "RunStatus",
    "RunOrchestrator",
]
