"""
Workflow run tracking models.
"""

from typing import Optional, List, Dict, Any, FrozenSet
from enum import Enum
from datetime import datetime
from pydantic import ConfigDict, Field

from ..core.errors import InvalidRunTransitionError
from .workflow import CamelModel, WorkflowConfig, utcnow


class RunStatus(str, Enum):
    """Workflow run status."""
    QUEUED = "queued"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


TERMINAL_STATUSES: FrozenSet[str] = frozenset({RunStatus.SUCCESS.value, RunStatus.ERROR.value})

# A duplicate background dispatch may pick up a run that is already processing.
ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    RunStatus.QUEUED.value: frozenset({
        RunStatus.PROCESSING.value,
        RunStatus.ERROR.value,
    }),
    RunStatus.PROCESSING.value: frozenset({
        RunStatus.PROCESSING.value,
        RunStatus.SUCCESS.value,
        RunStatus.ERROR.value,
    }),
    RunStatus.SUCCESS.value: frozenset(),
    RunStatus.ERROR.value: frozenset(),
}


class ActionResultStatus(str, Enum):
    """Outcome of one configured action."""
    TRIGGERED = "triggered"
    SKIPPED = "skipped"
    ERROR = "error"


class ActionResult(CamelModel):
    """Result of evaluating and possibly triggering one action."""
    action_id: str
    action_name: str
    status: ActionResultStatus
    agent_runner_id: Optional[str] = None
    error: Optional[str] = None


class RunUpdate(CamelModel):
    """
    Delta for the mutable part of a run.

    Only fields explicitly set are applied, so ``RunUpdate(error=None)``
    clears an error while ``RunUpdate()`` changes nothing.
    """
    status: Optional[RunStatus] = None
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    action_results: Optional[List[ActionResult]] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class WorkflowRun(CamelModel):
    """One execution attempt of a workflow against one captured input."""

    model_config = ConfigDict(frozen=True)

    id: str
    workflow_id: str
    status: RunStatus = RunStatus.QUEUED
    input: Dict[str, Any] = Field(default_factory=dict)
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    action_results: Optional[List[ActionResult]] = None
    provider: str
    model: str
    created_at: datetime = Field(default_factory=utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    retry_count: int = Field(default=0, ge=0)

    @classmethod
    def queued(
        cls,
        run_id: str,
        config: WorkflowConfig,
        input: Dict[str, Any],
    ) -> "WorkflowRun":
        """Create the initial record for a new submission."""
        return cls(
            id=run_id,
            workflow_id=config.id,
            status=RunStatus.QUEUED,
            input=dict(input),
            provider=config.provider,
            model=config.model,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def apply(self, update: RunUpdate) -> "WorkflowRun":
        """
        Return a copy of this run with ``update`` applied.

        Identity fields (id, workflow, input, provider, model, creation time,
        retry count) are never touched.

        Raises:
            InvalidRunTransitionError: If the status change is not allowed
        """
        changes = {name: getattr(update, name) for name in update.model_fields_set}

        new_status = changes.get("status")
        if new_status is not None and new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidRunTransitionError(self.id, self.status, new_status)
        if new_status is None and changes and self.is_terminal:
            raise InvalidRunTransitionError(self.id, self.status, self.status)

        return self.model_copy(update=changes)

    def duplicate(self, run_id: str) -> "WorkflowRun":
        """Create the queued retry of this run under a new id."""
        return WorkflowRun(
            id=run_id,
            workflow_id=self.workflow_id,
            status=RunStatus.QUEUED,
            input=dict(self.input),
            provider=self.provider,
            model=self.model,
            retry_count=self.retry_count + 1,
        )
