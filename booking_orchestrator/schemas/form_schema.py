"""Booking form field descriptors and fill instructions."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ActionKind(str, Enum):
    """How a value is applied to a form control."""

    TYPE = "type"
    SELECT = "select"
    CLICK = "click"


class FormField(BaseModel):
    """A field observed on a provider's booking page."""

    model_config = ConfigDict(frozen=True)

    label: str
    field_id: str
    field_type: str = "text"
    required: bool = False


class FieldAssignment(BaseModel):
    """A concrete instruction to place a value into one form field."""

    model_config = ConfigDict(frozen=True)

    field_id: str
    value: str = ""
    action: ActionKind = ActionKind.TYPE


class MappingResult(BaseModel):
    """Field mapper output: fill instructions plus required-but-unsatisfied labels."""

    assignments: list[FieldAssignment] = Field(default_factory=list)
    missing_fields: list[str] = Field(default_factory=list)
