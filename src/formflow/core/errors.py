"""
Workflow engine error types.
"""

from typing import Optional


class WorkflowEngineError(Exception):
    """Base exception for workflow engine errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigNotFoundError(WorkflowEngineError):
    """Raised when a workflow definition does not exist for the tenant."""

    def __init__(self, workflow_id: str):
        super().__init__(f"Workflow not found: {workflow_id}")
        self.workflow_id = workflow_id


class RunNotFoundError(WorkflowEngineError):
    """Raised when a run does not exist for the workflow and tenant."""

    def __init__(self, workflow_id: str, run_id: str):
        super().__init__(f"Run not found: {run_id}")
        self.workflow_id = workflow_id
        self.run_id = run_id


class InvalidRunTransitionError(WorkflowEngineError):
    """Raised when an update would move a run out of a terminal state."""

    def __init__(self, run_id: str, current: str, requested: str):
        super().__init__(
            f"Run {run_id} cannot move from {current} to {requested}"
        )
        self.run_id = run_id
        self.current = current
        self.requested = requested


class ProviderError(WorkflowEngineError):
    """Raised when an AI provider call fails or returns an unusable payload."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.detail = detail


class CredentialMissingError(ProviderError):
    """Raised before any network call when a provider API key is not configured."""
    pass


class UnsupportedProviderError(ProviderError):
    """Raised when a workflow names a provider with no adapter."""

    def __init__(self, provider: str):
        super().__init__(f"Unsupported provider: {provider}", provider=provider)


class ProviderConnectionError(ProviderError):
    """Raised when the provider endpoint cannot be reached."""
    pass


class UnparseableOutputError(ProviderError):
    """Raised when the model's text is not a JSON object after fence stripping."""

    def __init__(self, message: str, raw_text: str, provider: Optional[str] = None):
        super().__init__(message, provider=provider)
        self.raw_text = raw_text


class ActionDispatchError(WorkflowEngineError):
    """Raised when a side-effect trigger fails. Captured per action."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
