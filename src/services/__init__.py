from src.services import (
    activity_service,
    analytics_service,
    category_service,
    context_service,
    profile_service,
    task_service,
    workspace_service,
)


__all__ = [
    "activity_service",
    "analytics_service",
    "category_service",
    "context_service",
    "profile_service",
    "task_service",
    "workspace_service",
]
