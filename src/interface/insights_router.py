"""Smart context, analytics and dashboard endpoints.

These are read-only views recomputed from a fresh snapshot on every request. Clients
re-fetch after each mutation and on the interval given by ``refresh_after_seconds``.
"""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter

from src.domain.context import SmartContextsView
from src.interface.dependencies import CurrentUserId
from src.models.service_models import CategoryCount, CompletionStats, DashboardSummary, ProductivityDay
from src.services import analytics_service, context_service


router = APIRouter(prefix="/api", tags=["insights"])


@router.get("/contexts")
async def get_smart_contexts(user_id: CurrentUserId, at: datetime | None = None) -> SmartContextsView:
    """Open tasks grouped into smart contexts. ``at`` overrides the reference time."""
    return await context_service.get_smart_contexts(user_id=user_id, now=at)


@router.get("/analytics/productivity")
async def get_productivity(
    user_id: CurrentUserId,
    timeframe: Literal["week", "month"] = "week",
) -> list[ProductivityDay]:
    return await analytics_service.get_productivity(user_id=user_id, timeframe=timeframe)


@router.get("/analytics/completion")
async def get_completion_stats(user_id: CurrentUserId) -> CompletionStats:
    return await analytics_service.get_completion_stats(user_id=user_id)


@router.get("/analytics/categories")
async def get_category_breakdown(user_id: CurrentUserId) -> list[CategoryCount]:
    return await analytics_service.get_category_breakdown(user_id=user_id)


@router.get("/dashboard")
async def get_dashboard(user_id: CurrentUserId) -> DashboardSummary:
    return await analytics_service.get_dashboard_summary(user_id=user_id)
