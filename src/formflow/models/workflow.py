"""
Workflow definition models.
"""

from typing import Optional, List, Dict, Any
from enum import Enum
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..core.templates import render_value


def utcnow() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model stored and served with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the JSON document shape used for storage and the API."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SchemaType(str, Enum):
    """Value types an output schema node may declare."""
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


class OutputSchema(CamelModel):
    """
    JSON-Schema-like description of the structured output a workflow expects.

    The schema is shown to the model verbatim. It is not enforced on the
    parsed result.
    """
    type: SchemaType
    properties: Optional[Dict[str, "OutputSchema"]] = None
    items: Optional["OutputSchema"] = None
    required: Optional[List[str]] = None
    enum: Optional[List[str]] = None
    description: Optional[str] = None


OutputSchema.model_rebuild()


class ConditionOperator(str, Enum):
    """Operators supported by action conditions."""
    ALWAYS = "always"
    EQUALS = "equals"
    CONTAINS = "contains"


class ActionType(str, Enum):
    """Kinds of follow-on action."""
    TRIGGER_SIDE_EFFECT = "trigger-side-effect"


# Earlier saved workflows used the agent runner name for the same action.
ACTION_TYPE_ALIASES = {
    "create-agent-runner": ActionType.TRIGGER_SIDE_EFFECT,
}


class ActionCondition(CamelModel):
    """Single-field trigger condition for an action."""
    field: str = ""
    # Kept as a plain string so unknown operators survive a round trip and
    # evaluate to False instead of failing validation.
    operator: str = ConditionOperator.ALWAYS.value
    value: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def _stringify_scalar(cls, value: Any) -> Any:
        if isinstance(value, (bool, int, float)):
            return render_value(value)
        return value


class WorkflowAction(CamelModel):
    """A conditionally triggered side effect run after a successful transformation."""
    id: str
    name: str
    type: ActionType = ActionType.TRIGGER_SIDE_EFFECT
    condition: ActionCondition = Field(default_factory=ActionCondition)
    prompt_template: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _resolve_type_alias(cls, value: Any) -> Any:
        if isinstance(value, str):
            return ACTION_TYPE_ALIASES.get(value, value)
        return value


class WorkflowDefinitionInput(CamelModel):
    """User-editable fields of a workflow definition."""
    name: str = Field(..., min_length=1)
    form_name: Optional[str] = None
    input_fields: List[str] = Field(default_factory=list)
    prompt: str = Field(..., min_length=1)
    output_schema: OutputSchema
    provider: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    redirect_url: Optional[str] = None
    actions: List[WorkflowAction] = Field(default_factory=list)

    @field_validator("form_name", "redirect_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("redirect_url")
    @classmethod
    def _check_redirect_url(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.startswith(("http://", "https://")):
            raise ValueError("redirectUrl must be an absolute http(s) URL")
        return value


class WorkflowConfig(WorkflowDefinitionInput):
    """A saved workflow definition. Replaced wholesale on update."""
    id: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def create(cls, workflow_id: str, definition: WorkflowDefinitionInput) -> "WorkflowConfig":
        """Build a new config from user input."""
        now = utcnow()
        return cls(
            id=workflow_id,
            created_at=now,
            updated_at=now,
            **definition.model_dump(),
        )

    def replace(self, definition: WorkflowDefinitionInput) -> "WorkflowConfig":
        """Return a new version with the editable fields replaced."""
        return WorkflowConfig(
            id=self.id,
            created_at=self.created_at,
            updated_at=utcnow(),
            **definition.model_dump(),
        )
