"""
Core workflow engine components.
"""

from .errors import (
    WorkflowEngineError,
    ConfigNotFoundError,
    RunNotFoundError,
    InvalidRunTransitionError,
    ProviderError,
    CredentialMissingError,
    UnsupportedProviderError,
    ProviderConnectionError,
    UnparseableOutputError,
    ActionDispatchError,
)
from .templates import interpolate, interpolate_action_prompt
from .conditions import evaluate_condition

__all__ = [
    "WorkflowEngineError",
    "ConfigNotFoundError",
    "RunNotFoundError",
    "InvalidRunTransitionError",
    "ProviderError",
    "CredentialMissingError",
    "UnsupportedProviderError",
    "ProviderConnectionError",
    "UnparseableOutputError",
    "ActionDispatchError",
    "interpolate",
    "interpolate_action_prompt",
    "evaluate_condition",
]
