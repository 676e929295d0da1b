"""
Workflow engine data models.
"""

from .workflow import (
    ActionCondition,
    ActionType,
    ConditionOperator,
    OutputSchema,
    SchemaType,
    WorkflowAction,
    WorkflowConfig,
    WorkflowDefinitionInput,
    utcnow,
)
from .run import (
    ActionResult,
    ActionResultStatus,
    RunStatus,
    RunUpdate,
    WorkflowRun,
)

__all__ = [
    "ActionCondition",
    "ActionType",
    "ConditionOperator",
    "OutputSchema",
    "SchemaType",
    "WorkflowAction",
    "WorkflowConfig",
    "WorkflowDefinitionInput",
    "utcnow",
    "ActionResult",
    "ActionResultStatus",
    "RunStatus",
    "RunUpdate",
    "WorkflowRun",
]
