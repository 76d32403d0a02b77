"""Category domain model."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.core.timeutils import parse_timestamp


class Category(BaseModel):
    """Category data transfer object. Referenced (not owned) by tasks."""

    id: str = Field(..., description="Unique category ID from database")
    user_id: str = Field(..., description="Owning user ID")
    name: str = Field(..., description="Display name")
    color: str = Field(default="#6366F1", description="Display color as #RRGGBB")
    created: datetime | None = Field(default=None, description="Creation timestamp")

    @field_validator("created", mode="before")
    @classmethod
    def _parse_created(cls, v: object) -> datetime | None:
        return parse_timestamp(v)
