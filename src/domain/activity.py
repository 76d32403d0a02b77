"""Activity log domain models for the task audit trail."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from src.core.timeutils import parse_timestamp


class ActivityType(StrEnum):
    """Task lifecycle transitions recorded in the activity log."""

    CREATE = "create"
    COMPLETE = "complete"
    UPDATE = "update"
    DELETE = "delete"


class TaskActivity(BaseModel):
    """Immutable activity log entry. Append-only; never updated or deleted."""

    id: str = Field(..., description="Unique activity ID from database")
    task_id: str = Field(..., description="ID of task this activity relates to")
    user_id: str = Field(..., description="ID of user who performed the action")
    activity_type: str = Field(..., description="Transition recorded (create, complete, ...)")
    created: datetime = Field(..., description="When the transition happened")

    @field_validator("created", mode="before")
    @classmethod
    def _parse_created(cls, v: object) -> datetime | None:
        return parse_timestamp(v)
