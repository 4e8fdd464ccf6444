from __future__ import annotations
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, field_validator

# Zero-valued timestamps ("0001-01-01T00:00:00Z") mean "no date inferred".
_ZERO_YEAR = 1


class ExtractionCandidate(BaseModel):
    """A model-proposed task. Never persisted directly; carries no identity."""

    model_config = ConfigDict(extra="ignore")

    title: StrictStr = ""
    description: StrictStr = ""
    due_date: Optional[datetime] = None
    priority: StrictStr = "medium"
    subtasks: List[StrictStr] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def null_title(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("description", mode="before")
    @classmethod
    def null_description(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("priority", mode="before")
    @classmethod
    def null_priority(cls, v: Any) -> Any:
        return "medium" if v is None else v

    @field_validator("subtasks", mode="before")
    @classmethod
    def null_subtasks(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("due_date", mode="before")
    @classmethod
    def blank_due_date(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("due_date")
    @classmethod
    def zero_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.year == _ZERO_YEAR:
            return None
        return v


CandidateList = TypeAdapter(List[ExtractionCandidate])
