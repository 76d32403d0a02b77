"""Update models for database operations.

Only fields that were explicitly set are written; use ``model_dump(exclude_unset=True)``.
"""

from datetime import datetime

from pydantic import BaseModel, ValidationInfo, field_validator

from src.domain.create_models import MAX_NAME_LENGTH, MAX_TITLE_LENGTH, _require_text, _validate_color
from src.domain.task import TaskPriority, TaskStatus


class TaskUpdate(BaseModel):
    """Partial update payload for a task."""

    title: str | None = None
    description: str | None = None
    due_date: datetime | None = None
    priority: TaskPriority | None = None
    category_id: str | None = None
    workspace_id: str | None = None
    status: TaskStatus | None = None
    dependencies: list[str] | None = None
    assigned_to: list[str] | None = None

    @field_validator("title", "priority", "status", "dependencies", "assigned_to")
    @classmethod
    def reject_null(cls, v: object, info: ValidationInfo) -> object:
        # Only description, due_date, category_id and workspace_id can be cleared with null
        if v is None:
            msg = f"{info.field_name} cannot be null"
            raise ValueError(msg)
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _require_text(v, field="Title", max_length=MAX_TITLE_LENGTH)


class TaskStatusUpdate(BaseModel):
    """Update payload for a task status change."""

    status: TaskStatus


class CategoryUpdate(BaseModel):
    """Partial update payload for a category."""

    name: str | None = None
    color: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return None if v is None else _require_text(v, field="Name", max_length=MAX_NAME_LENGTH)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str | None) -> str | None:
        return None if v is None else _validate_color(v)


class WorkspaceUpdate(BaseModel):
    """Partial update payload for a workspace."""

    name: str | None = None
    description: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return None if v is None else _require_text(v, field="Name", max_length=MAX_NAME_LENGTH)


class UsernameUpdate(BaseModel):
    """Update payload for a profile username."""

    username: str
