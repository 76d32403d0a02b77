"""Smart context models (derived groupings, never persisted)."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from src.domain.task import Task


class ContextPriority(StrEnum):
    """Display priority of a smart context."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SmartContext(BaseModel):
    """A named bucket of tasks produced by one classification pass."""

    id: str = Field(..., description="Stable bucket key, e.g. 'due-today' or 'category-<id>'")
    name: str = Field(..., description="Display name")
    tasks: list[Task] = Field(default_factory=list, description="Member tasks in input order")
    priority: ContextPriority


class SmartContextsView(BaseModel):
    """Classification result plus the hint telling clients when to re-fetch."""

    generated_at: datetime
    refresh_after_seconds: int
    contexts: list[SmartContext]
