"""Domain models and DTOs."""

from src.domain.activity import ActivityType, TaskActivity
from src.domain.category import Category
from src.domain.context import ContextPriority, SmartContext, SmartContextsView
from src.domain.create_models import CategoryCreate, TaskCreate, WorkspaceCreate
from src.domain.task import Task, TaskPriority, TaskStatus
from src.domain.update_models import CategoryUpdate, TaskStatusUpdate, TaskUpdate, UsernameUpdate, WorkspaceUpdate
from src.domain.user import ProductivitySettings, Profile
from src.domain.workspace import Workspace, WorkspaceMember, WorkspaceRole


__all__ = [
    "ActivityType",
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    "ContextPriority",
    "ProductivitySettings",
    "Profile",
    "SmartContext",
    "SmartContextsView",
    "Task",
    "TaskActivity",
    "TaskCreate",
    "TaskPriority",
    "TaskStatus",
    "TaskStatusUpdate",
    "TaskUpdate",
    "UsernameUpdate",
    "Workspace",
    "WorkspaceCreate",
    "WorkspaceMember",
    "WorkspaceRole",
    "WorkspaceUpdate",
]
