"""Workspace domain models and enums."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from src.core.timeutils import parse_timestamp


class WorkspaceRole(StrEnum):
    """Role of a member inside a workspace."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class Workspace(BaseModel):
    """Workspace data transfer object."""

    id: str = Field(..., description="Unique workspace ID from database")
    name: str = Field(..., description="Workspace name")
    description: str = Field(default="", description="Free-form description")
    created_by: str = Field(..., description="User ID of the creator")
    created: datetime | None = Field(default=None, description="Creation timestamp")

    @field_validator("created", mode="before")
    @classmethod
    def _parse_created(cls, v: object) -> datetime | None:
        return parse_timestamp(v)

    @field_validator("description", mode="before")
    @classmethod
    def _none_to_blank(cls, v: object) -> object:
        return "" if v is None else v


class WorkspaceMember(BaseModel):
    """Membership row linking a user to a workspace."""

    id: str
    workspace_id: str
    user_id: str
    role: WorkspaceRole = WorkspaceRole.MEMBER
