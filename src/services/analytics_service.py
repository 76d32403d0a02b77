"""Analytics service for productivity and completion statistics.

This module provides functions for:
- Building the per-day created/completed series for the productivity chart
- Calculating completion rate and average completion time
- Counting tasks per category
- Summarizing a user's tasks for the dashboard

Key Concepts:
- Activity events: append-only ``create``/``complete`` records written by task_service.
  Day series and cycle times are computed from these, not from task rows.
- Calendar days: timestamps are bucketed by date in the zone of the reference instant
  (the configured timezone when called through the async helpers).
- Completion time: hours between a task's first ``create`` and last ``complete`` event.
  Tasks missing either event are left out of the average rather than counted as zero.

The pure functions take already-fetched snapshots and never raise for missing optional
fields; the async helpers fetch the snapshots and delegate to them.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta

from src.core.config import constants
from src.core.db_client import RecordNotFoundError
from src.core.logging import span
from src.core.timeutils import as_local, local_date, now_local
from src.domain.activity import ActivityType, TaskActivity
from src.domain.category import Category
from src.domain.task import Task, TaskStatus
from src.models.service_models import CategoryCount, CompletionStats, DashboardSummary, ProductivityDay
from src.services import activity_service, category_service, profile_service, task_service


logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600
UNCATEGORIZED = "Uncategorized"


def aggregate_productivity(
    created_events: Iterable[TaskActivity],
    completed_events: Iterable[TaskActivity],
    window_start: datetime,
    now: datetime,
) -> list[ProductivityDay]:
    """Count created and completed events per calendar day.

    Args:
        created_events: ``create`` events inside the window
        completed_events: ``complete`` events inside the window
        window_start: First instant of the window
        now: Last instant of the window; its timezone defines the calendar days

    Returns:
        One entry per day in [window_start, now] inclusive, ascending, zero-filled
    """
    zone = now.tzinfo
    first_day = local_date(window_start, zone)
    last_day = local_date(now, zone)

    days: dict[date, ProductivityDay] = {}
    for offset in range((last_day - first_day).days + 1):
        day = first_day + timedelta(days=offset)
        days[day] = ProductivityDay(date=day)

    for event in created_events:
        entry = days.get(local_date(event.created, zone))
        if entry is not None:
            entry.created += 1

    for event in completed_events:
        entry = days.get(local_date(event.created, zone))
        if entry is not None:
            entry.completed += 1

    return [days[day] for day in sorted(days)]


def calculate_completion_stats(tasks: Sequence[Task], activities: Iterable[TaskActivity]) -> CompletionStats:
    """Compute completion rate and mean completion time.

    Args:
        tasks: All of the user's tasks
        activities: All of the user's activity events

    Returns:
        CompletionStats with the rate as a percentage (0 for no tasks) and the mean hours
        between create and complete (0 when no task has both events)
    """
    total_tasks = len(tasks)
    completed_tasks = sum(1 for task in tasks if task.status == TaskStatus.COMPLETED)
    completion_rate = completed_tasks / total_tasks * 100 if total_tasks > 0 else 0.0

    created_at: dict[str, datetime] = {}
    completed_at: dict[str, datetime] = {}
    for activity in activities:
        task_id = activity.task_id
        if activity.activity_type == ActivityType.CREATE:
            if task_id not in created_at or activity.created < created_at[task_id]:
                created_at[task_id] = activity.created
        elif activity.activity_type == ActivityType.COMPLETE:
            if task_id not in completed_at or activity.created > completed_at[task_id]:
                completed_at[task_id] = activity.created

    durations = [
        (completed_at[task_id] - created).total_seconds() / SECONDS_PER_HOUR
        for task_id, created in created_at.items()
        if task_id in completed_at
    ]
    average_hours = sum(durations) / len(durations) if durations else 0.0

    return CompletionStats(
        completed_tasks=completed_tasks,
        total_tasks=total_tasks,
        completion_rate=round(completion_rate, 2),
        average_completion_time_hours=round(average_hours, 2),
    )


def count_tasks_by_category(categories: Sequence[Category], tasks: Iterable[Task]) -> list[CategoryCount]:
    """Count tasks per category, most populated first.

    Every category is listed, even with zero tasks. Tasks without a category are grouped
    under "Uncategorized", which only appears when non-empty.
    """
    counts: dict[str | None, int] = {}
    for task in tasks:
        counts[task.category_id] = counts.get(task.category_id, 0) + 1

    breakdown = [
        CategoryCount(name=category.name, count=counts.get(category.id, 0), color=category.color)
        for category in categories
    ]

    uncategorized = counts.get(None, 0)
    if uncategorized > 0:
        breakdown.append(CategoryCount(name=UNCATEGORIZED, count=uncategorized, color=constants.UNCATEGORIZED_COLOR))

    breakdown.sort(key=lambda entry: entry.count, reverse=True)
    return breakdown


def greeting_for(now: datetime) -> str:
    if now.hour < constants.MORNING_END_HOUR:
        return "Good morning"
    if now.hour < constants.GREETING_AFTERNOON_END_HOUR:
        return "Good afternoon"
    return "Good evening"


def summarize_dashboard(tasks: Sequence[Task], now: datetime, *, username: str = "") -> DashboardSummary:
    """Status counts, upcoming deadlines and the newest tasks for the dashboard."""
    upcoming_limit = now + timedelta(days=constants.UPCOMING_DUE_DAYS)

    def by_status(status: TaskStatus) -> int:
        return sum(1 for task in tasks if task.status == status)

    upcoming_due = sum(
        1
        for task in tasks
        if task.due_date is not None and now < task.due_date <= upcoming_limit and task.status != TaskStatus.COMPLETED
    )
    recent = sorted(tasks, key=lambda task: task.created, reverse=True)[: constants.RECENT_TASKS_LIMIT]

    return DashboardSummary(
        username=username,
        total_tasks=len(tasks),
        pending_tasks=by_status(TaskStatus.PENDING),
        in_progress_tasks=by_status(TaskStatus.IN_PROGRESS),
        completed_tasks=by_status(TaskStatus.COMPLETED),
        upcoming_due_tasks=upcoming_due,
        recent_tasks=recent,
        greeting=greeting_for(now),
    )


async def get_productivity(*, user_id: str, timeframe: str = "week", now: datetime | None = None) -> list[ProductivityDay]:
    """Per-day created/completed counts for the last week or month.

    Args:
        user_id: Owner of the activity log
        timeframe: "week" (7 days back) or "month" (30 days back)
        now: End of the window; defaults to the current time in the configured timezone

    Raises:
        ValueError: If the timeframe is unknown
    """
    if timeframe not in constants.PRODUCTIVITY_WINDOW_DAYS:
        msg = f"Unknown timeframe: {timeframe}. Use one of {sorted(constants.PRODUCTIVITY_WINDOW_DAYS)}"
        raise ValueError(msg)

    reference = as_local(now) if now is not None else now_local()
    window_start = reference - timedelta(days=constants.PRODUCTIVITY_WINDOW_DAYS[timeframe])

    with span("analytics_service.get_productivity"):
        created = await activity_service.list_activities(
            user_id=user_id, activity_type=ActivityType.CREATE, since=window_start, until=reference
        )
        completed = await activity_service.list_activities(
            user_id=user_id, activity_type=ActivityType.COMPLETE, since=window_start, until=reference
        )
        series = aggregate_productivity(created, completed, window_start, reference)

        logger.info(
            "Productivity for %s: %d created, %d completed over %d days",
            timeframe,
            len(created),
            len(completed),
            len(series),
            extra={"user_id": user_id},
        )
        return series


async def get_completion_stats(*, user_id: str) -> CompletionStats:
    """Completion statistics over all of the user's tasks and activity."""
    with span("analytics_service.get_completion_stats"):
        tasks = await task_service.list_tasks(user_id=user_id, expand_category=False)
        activities = await activity_service.list_activities(user_id=user_id)
        stats = calculate_completion_stats(tasks, activities)
        logger.info("Completion stats: %s", stats.model_dump(), extra={"user_id": user_id})
        return stats


async def get_category_breakdown(*, user_id: str) -> list[CategoryCount]:
    """Task counts per category for the user."""
    with span("analytics_service.get_category_breakdown"):
        categories = await category_service.list_categories(user_id=user_id)
        tasks = await task_service.list_tasks(user_id=user_id, expand_category=False)
        return count_tasks_by_category(categories, tasks)


async def get_dashboard_summary(*, user_id: str, now: datetime | None = None) -> DashboardSummary:
    """Dashboard overview for the user."""
    reference = as_local(now) if now is not None else now_local()

    with span("analytics_service.get_dashboard_summary"):
        try:
            username = (await profile_service.get_profile(user_id=user_id)).username
        except RecordNotFoundError:
            logger.warning("Profile %s not found for dashboard", user_id)
            username = ""

        tasks = await task_service.list_tasks(user_id=user_id)
        return summarize_dashboard(tasks, reference, username=username)
