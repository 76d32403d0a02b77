"""Pydantic models for service layer return types.

These models provide type safety at service boundaries, converting database
dictionaries into typed objects with validation.
"""

import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.task import Task


class ProductivityDay(BaseModel):
    """Created/completed counts for one calendar day."""

    date: datetime.date
    created: int = 0
    completed: int = 0


class CompletionStats(BaseModel):
    """Completion rate and average cycle time across all of a user's tasks.

    Serialized with camelCase keys (``completedTasks``, ``completionRate``, ...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    completed_tasks: int
    total_tasks: int
    completion_rate: float = Field(..., description="Completed / total as a percentage, 0 when there are no tasks")
    average_completion_time_hours: float = Field(
        ..., description="Mean hours from create to complete over tasks having both events, 0 when none do"
    )


class CategoryCount(BaseModel):
    """Number of tasks filed under one category."""

    name: str
    count: int
    color: str


class DashboardSummary(BaseModel):
    """Overview counts shown on the dashboard."""

    username: str = ""
    total_tasks: int
    pending_tasks: int
    in_progress_tasks: int
    completed_tasks: int
    upcoming_due_tasks: int
    recent_tasks: list[Task]
    greeting: str


class WorkspaceMemberView(BaseModel):
    """Workspace member with a resolved username."""

    user_id: str
    role: str
    username: str
