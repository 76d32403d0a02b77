"""Pydantic models for creating records in database."""

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.domain.task import TaskPriority, TaskStatus


_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")
MAX_TITLE_LENGTH = 200
MAX_NAME_LENGTH = 100


def _validate_color(v: str) -> str:
    if not _COLOR_PATTERN.match(v):
        msg = "Color must be a hex value like #4F46E5"
        raise ValueError(msg)
    return v.upper()


def _require_text(v: str, *, field: str, max_length: int) -> str:
    stripped = v.strip()
    if not stripped:
        msg = f"{field} must not be empty"
        raise ValueError(msg)
    if len(stripped) > max_length:
        msg = f"{field} must be at most {max_length} characters"
        raise ValueError(msg)
    return stripped


class TaskCreate(BaseModel):
    """Pydantic model for creating a task record."""

    title: str = Field(..., description="Task title")
    description: str | None = Field(default=None, description="Detailed task description")
    due_date: datetime | None = Field(default=None, description="When the task is due")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="low, medium or high")
    category_id: str | None = Field(default=None, description="Category reference")
    workspace_id: str | None = Field(default=None, description="Workspace reference")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Initial status")
    dependencies: list[str] = Field(default_factory=list, description="IDs of tasks this task waits on")
    assigned_to: list[str] = Field(default_factory=list, description="Assigned user IDs")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _require_text(v, field="Title", max_length=MAX_TITLE_LENGTH)


class CategoryCreate(BaseModel):
    """Pydantic model for creating a category record."""

    name: str = Field(..., description="Category name")
    color: str = Field(default="#6366F1", description="Display color as #RRGGBB")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _require_text(v, field="Name", max_length=MAX_NAME_LENGTH)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return _validate_color(v)


class WorkspaceCreate(BaseModel):
    """Pydantic model for creating a workspace record."""

    name: str = Field(..., description="Workspace name")
    description: str = Field(default="", description="Free-form description")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _require_text(v, field="Name", max_length=MAX_NAME_LENGTH)
