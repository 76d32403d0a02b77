"""Smart context classification.

Buckets a user's open tasks into named, prioritized contexts. Rules run in a fixed
order and each task lands in the first bucket whose rule it matches:

1. Due Today       - due date falls on the reference day
2. High Priority   - priority is high
3. Time-based      - status is in_progress; named after the time of day
4. Focus: <name>   - tasks of the category with the most remaining tasks
5. Recently Added  - created within the last 7 days
6. Other Tasks     - everything else

Every input task appears in exactly one context. Empty contexts are omitted.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta

from src.core.config import constants
from src.core.logging import span
from src.core.timeutils import as_local, local_date, now_local
from src.domain.context import ContextPriority, SmartContext, SmartContextsView
from src.domain.task import Task, TaskPriority, TaskStatus
from src.services import task_service


logger = logging.getLogger(__name__)

DUE_TODAY = "due-today"
HIGH_PRIORITY = "high-priority"
TIME_BASED = "time-based"
RECENTLY_CREATED = "recently-created"
OTHER = "other"


def time_of_day_name(now: datetime) -> str:
    """Name of the in-progress bucket for the hour of ``now``."""
    if now.hour < constants.MORNING_END_HOUR:
        return "Morning Focus"
    if now.hour < constants.AFTERNOON_END_HOUR:
        return "Afternoon Tasks"
    return "Evening Wrap-up"


def _claim(
    tasks: Sequence[Task],
    claimed: dict[str, str],
    bucket: str,
    predicate: Callable[[Task], bool],
) -> None:
    """Tag every unclaimed task matching ``predicate`` with ``bucket``."""
    for task in tasks:
        if task.id not in claimed and predicate(task):
            claimed[task.id] = bucket


def _dominant_category(tasks: Sequence[Task], claimed: dict[str, str]) -> str | None:
    """Category id with the most unclaimed tasks.

    Ties go to the first category to reach the maximum in insertion order. The choice is
    arbitrary but deterministic.
    """
    counts: dict[str, int] = {}
    for task in tasks:
        if task.id in claimed or task.category is None:
            continue
        counts[task.category.id] = counts.get(task.category.id, 0) + 1

    best_id: str | None = None
    best_count = 0
    for category_id, count in counts.items():
        if count > best_count:
            best_id, best_count = category_id, count
    return best_id


def classify_tasks(tasks: Sequence[Task], now: datetime) -> list[SmartContext]:
    """Partition ``tasks`` into smart contexts as of ``now``.

    Args:
        tasks: Open (non-completed) tasks, each optionally carrying its resolved category.
        now: Reference instant. Its timezone defines "today" and the time-of-day bucket.

    Returns:
        Non-empty contexts in rule order.
    """
    zone = now.tzinfo
    today = local_date(now, zone)
    recent_cutoff = now - timedelta(hours=constants.RECENT_TASK_WINDOW_HOURS)

    claimed: dict[str, str] = {}

    _claim(tasks, claimed, DUE_TODAY, lambda t: t.due_date is not None and local_date(t.due_date, zone) == today)
    _claim(tasks, claimed, HIGH_PRIORITY, lambda t: t.priority == TaskPriority.HIGH)
    _claim(tasks, claimed, TIME_BASED, lambda t: t.status == TaskStatus.IN_PROGRESS)

    category_id = _dominant_category(tasks, claimed)
    category_bucket = f"category-{category_id}" if category_id else None
    if category_bucket:
        _claim(tasks, claimed, category_bucket, lambda t: t.category is not None and t.category.id == category_id)

    _claim(tasks, claimed, RECENTLY_CREATED, lambda t: t.created > recent_cutoff)
    _claim(tasks, claimed, OTHER, lambda _t: True)

    grouped: dict[str, list[Task]] = {}
    for task in tasks:
        grouped.setdefault(claimed[task.id], []).append(task)

    layout: list[tuple[str, str, ContextPriority]] = [
        (DUE_TODAY, "Due Today", ContextPriority.HIGH),
        (HIGH_PRIORITY, "High Priority", ContextPriority.HIGH),
        (TIME_BASED, time_of_day_name(now), ContextPriority.MEDIUM),
    ]
    if category_bucket:
        category_name = grouped[category_bucket][0].category.name  # type: ignore[union-attr]
        layout.append((category_bucket, f"Focus: {category_name}", ContextPriority.MEDIUM))
    layout += [
        (RECENTLY_CREATED, "Recently Added", ContextPriority.LOW),
        (OTHER, "Other Tasks", ContextPriority.LOW),
    ]

    return [
        SmartContext(id=bucket, name=name, tasks=grouped[bucket], priority=priority)
        for bucket, name, priority in layout
        if grouped.get(bucket)
    ]


async def get_smart_contexts(*, user_id: str, now: datetime | None = None) -> SmartContextsView:
    """Fetch a user's open tasks and classify them.

    Args:
        user_id: Owner of the tasks
        now: Reference instant; defaults to the current time in the configured timezone

    Returns:
        SmartContextsView with the contexts and the client refresh interval
    """
    reference = as_local(now) if now is not None else now_local()

    with span("context_service.get_smart_contexts"):
        tasks = await task_service.list_active_tasks(user_id=user_id)
        contexts = classify_tasks(tasks, reference)

        logger.info(
            "Classified %d tasks into %d contexts",
            len(tasks),
            len(contexts),
            extra={"user_id": user_id, "contexts": [c.id for c in contexts]},
        )

        return SmartContextsView(
            generated_at=reference,
            refresh_after_seconds=constants.CONTEXT_REFRESH_SECONDS,
            contexts=contexts,
        )
