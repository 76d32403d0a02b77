"""Task domain models and enums."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from src.core.timeutils import parse_timestamp
from src.domain.category import Category


class TaskPriority(StrEnum):
    """How urgent a task is."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(StrEnum):
    """Task lifecycle status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Task(BaseModel):
    """Task data transfer object.

    Each read is a fresh snapshot of the stored row. ``category`` is only filled when the
    ``category_id`` relation was expanded in the query.
    """

    id: str = Field(..., description="Unique task ID from database")
    user_id: str = Field(..., description="Owning user ID")
    title: str = Field(..., description="Task title")
    description: str | None = Field(default=None, description="Detailed task description")
    due_date: datetime | None = Field(default=None, description="When the task is due")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="low, medium or high")
    category_id: str | None = Field(default=None, description="Category reference")
    workspace_id: str | None = Field(default=None, description="Workspace reference")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Current lifecycle status")
    created: datetime = Field(..., description="Creation timestamp")
    updated: datetime = Field(..., description="Last update timestamp")
    dependencies: list[str] = Field(default_factory=list, description="IDs of tasks this task waits on")
    assigned_to: list[str] = Field(default_factory=list, description="Assigned user IDs")
    category: Category | None = Field(default=None, description="Resolved category when expanded")

    @field_validator("description", "category_id", "workspace_id", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        # PocketBase returns "" for unset text and relation fields
        return None if v == "" else v

    @field_validator("due_date", "created", "updated", mode="before")
    @classmethod
    def _parse_dates(cls, v: object) -> datetime | None:
        return parse_timestamp(v)

    @field_validator("dependencies", "assigned_to", mode="before")
    @classmethod
    def _none_to_list(cls, v: object) -> object:
        if v is None or v == "":
            return []
        if isinstance(v, str):
            return [v]
        return v

    @classmethod
    def from_record(cls, record: dict) -> "Task":
        """Build a Task from a store record, resolving an expanded category if present."""
        data = dict(record)
        expanded = (data.pop("expand", None) or {}).get("category_id")
        if expanded:
            data["category"] = Category(**expanded)
        return cls(**data)
