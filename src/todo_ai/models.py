from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


TaskPriority = Literal["low", "medium", "high"]
PRIORITIES = ("low", "medium", "high")
DEFAULT_PRIORITY: TaskPriority = "medium"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _strip_title(v: str) -> str:
    v2 = v.strip()
    if not v2:
        raise ValueError("title must not be blank")
    return v2


class Task(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    user_id: uuid.UUID
    title: str
    description: str = ""
    due_date: Optional[datetime] = None
    priority: TaskPriority = DEFAULT_PRIORITY
    raw_text: str = ""
    completed: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # rows written by older clients may carry NULLs in these columns
    @field_validator("description", "raw_text", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("priority", mode="before")
    @classmethod
    def none_to_default_priority(cls, v: Any) -> Any:
        return DEFAULT_PRIORITY if v is None else v


class User(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    email: str
    password_hash: str = Field(default="", exclude=True)
    created_at: datetime = Field(default_factory=utcnow)


class CreateTaskIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1)
    description: str = ""
    due_date: Optional[datetime] = None
    priority: TaskPriority = DEFAULT_PRIORITY
    raw_text: str = ""

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _strip_title(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def empty_due_date(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("priority", mode="before")
    @classmethod
    def empty_priority(cls, v: Any) -> Any:
        return _blank_to_none(v) or DEFAULT_PRIORITY


class UpdateTaskIn(BaseModel):
    """Partial update: only the fields present in the request body change."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    raw_text: Optional[str] = None
    completed: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _strip_title(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def empty_due_date(cls, v: Any) -> Any:
        return _blank_to_none(v)

    def changes(self) -> dict:
        data = self.model_dump(exclude_unset=True)
        # a JSON null only makes sense for the due date
        return {k: v for k, v in data.items() if v is not None or k == "due_date"}


class ExtractTasksIn(BaseModel):
    text: str = Field(..., min_length=1)


class CredentialsIn(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        v2 = v.strip().lower()
        if "@" not in v2:
            raise ValueError("email must contain '@'")
        return v2


class TokenOut(BaseModel):
    token: str


class DroppedCandidate(BaseModel):
    index: int
    title: str
    reason: str


class ExtractionOutcome(BaseModel):
    created: List[Task] = Field(default_factory=list)
    dropped: List[DroppedCandidate] = Field(default_factory=list)
