"""Activity log service: append and query task lifecycle events."""

import logging
from datetime import datetime

from pydantic import ValidationError

from src.core import db_client
from src.core.logging import span
from src.domain.activity import ActivityType, TaskActivity


logger = logging.getLogger(__name__)

COLLECTION = "task_activities"


async def record_activity(*, task_id: str, user_id: str, activity_type: ActivityType) -> TaskActivity:
    """Append an activity event. Events are never updated or deleted afterwards."""
    with span("activity_service.record_activity"):
        record = await db_client.create_record(
            collection=COLLECTION,
            data={"task_id": task_id, "user_id": user_id, "activity_type": str(activity_type)},
        )
        logger.info(
            "Recorded task activity",
            extra={"task_id": task_id, "user_id": user_id, "activity_type": str(activity_type)},
        )
        return TaskActivity(**record)


async def list_activities(
    *,
    user_id: str,
    activity_type: ActivityType | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
) -> list[TaskActivity]:
    """List a user's activity events, oldest first.

    Args:
        user_id: Owner of the events
        activity_type: Only return events of this type
        since: Inclusive lower bound on the event timestamp
        until: Inclusive upper bound on the event timestamp

    Returns:
        Parsed TaskActivity models; malformed rows are logged and skipped
    """
    filters = [f'user_id = "{db_client.sanitize_param(user_id)}"']
    if activity_type is not None:
        filters.append(f'activity_type = "{activity_type}"')
    if since is not None:
        filters.append(f'created >= "{db_client.format_datetime(since)}"')
    if until is not None:
        filters.append(f'created <= "{db_client.format_datetime(until)}"')

    with span("activity_service.list_activities"):
        records = await db_client.list_all_records(
            collection=COLLECTION,
            filter_query=" && ".join(filters),
            sort="created",
        )

        activities = []
        for record in records:
            try:
                activities.append(TaskActivity(**record))
            except ValidationError as e:
                logger.error("Failed to parse activity %s: %s", record.get("id"), e)
        return activities
