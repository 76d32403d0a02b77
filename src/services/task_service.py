"""Task service for CRUD operations and status changes.

Every call is scoped to the requesting user: a task owned by someone else behaves exactly
like a missing one. Lifecycle transitions are appended to the activity log so analytics can
measure throughput and cycle time.
"""

import logging
from typing import Any

from pydantic import ValidationError

from src.core import db_client
from src.core.logging import log_with_user_context, span
from src.domain.activity import ActivityType
from src.domain.create_models import TaskCreate
from src.domain.task import Task, TaskStatus
from src.domain.update_models import TaskUpdate
from src.services import activity_service, category_service


logger = logging.getLogger(__name__)

COLLECTION = "tasks"
_EXPAND_CATEGORY = "category_id"

# Optional references PocketBase clears with an empty string rather than null
_CLEARABLE_FIELDS = ("description", "due_date", "category_id", "workspace_id")


def _to_payload(data: dict[str, Any]) -> dict[str, Any]:
    return {key: "" if value is None and key in _CLEARABLE_FIELDS else value for key, value in data.items()}


def _parse_tasks(records: list[dict[str, Any]]) -> list[Task]:
    tasks = []
    for record in records:
        try:
            tasks.append(Task.from_record(record))
        except ValidationError as e:
            logger.error("Failed to parse task %s: %s", record.get("id"), e)
    return tasks


async def _ensure_category(*, user_id: str, category_id: str | None) -> None:
    if category_id:
        # Raises RecordNotFoundError when the category is missing or belongs to someone else
        await category_service.get_category(user_id=user_id, category_id=category_id)


async def get_task(*, user_id: str, task_id: str) -> Task:
    """Fetch one of the user's tasks with its category resolved.

    Raises:
        RecordNotFoundError: If the task does not exist or is owned by another user
    """
    record = await db_client.get_record(collection=COLLECTION, record_id=task_id, expand=_EXPAND_CATEGORY)
    if record.get("user_id") != user_id:
        msg = f"Record not found in {COLLECTION}: {task_id}"
        raise db_client.RecordNotFoundError(msg)
    return Task.from_record(record)


async def create_task(*, user_id: str, task: TaskCreate) -> Task:
    """Create a task and log its creation.

    A task created directly in the completed state also gets a completion event.
    """
    with span("task_service.create_task"):
        await _ensure_category(user_id=user_id, category_id=task.category_id)

        data = _to_payload(task.model_dump())
        record = await db_client.create_record(collection=COLLECTION, data={**data, "user_id": user_id})
        created = Task.from_record(record)

        await activity_service.record_activity(
            task_id=created.id, user_id=user_id, activity_type=ActivityType.CREATE
        )
        if created.status == TaskStatus.COMPLETED:
            await activity_service.record_activity(
                task_id=created.id, user_id=user_id, activity_type=ActivityType.COMPLETE
            )

        log_with_user_context(logger, "info", "Task created", user_id=user_id, task_id=created.id)
        return await get_task(user_id=user_id, task_id=created.id)


async def list_tasks(
    *, user_id: str, status: TaskStatus | None = None, expand_category: bool = True
) -> list[Task]:
    """List the user's tasks newest first, optionally filtered by status.

    Pass ``expand_category=False`` when only ids and statuses are needed.
    """
    filters = [f'user_id = "{db_client.sanitize_param(user_id)}"']
    if status is not None:
        filters.append(f'status = "{status}"')

    with span("task_service.list_tasks"):
        records = await db_client.list_all_records(
            collection=COLLECTION,
            filter_query=" && ".join(filters),
            sort="-created",
            expand=_EXPAND_CATEGORY if expand_category else "",
        )
        return _parse_tasks(records)


async def list_active_tasks(*, user_id: str) -> list[Task]:
    """List the user's tasks that are not completed, with categories resolved."""
    with span("task_service.list_active_tasks"):
        records = await db_client.list_all_records(
            collection=COLLECTION,
            filter_query=(f'user_id = "{db_client.sanitize_param(user_id)}" && status != "{TaskStatus.COMPLETED}"'),
            sort="-created",
            expand=_EXPAND_CATEGORY,
        )
        return _parse_tasks(records)


async def update_task(*, user_id: str, task_id: str, update: TaskUpdate) -> Task:
    """Apply a partial update to a task.

    Moving the task into ``completed`` records a completion event; any other edit records
    an update event.

    Raises:
        RecordNotFoundError: If the task does not exist or is owned by another user
        ValueError: If the update is empty or references a foreign category
    """
    changes = update.model_dump(exclude_unset=True)
    if not changes:
        msg = "Empty update payload"
        raise ValueError(msg)

    with span("task_service.update_task"):
        current = await get_task(user_id=user_id, task_id=task_id)
        if "category_id" in changes:
            await _ensure_category(user_id=user_id, category_id=changes["category_id"])

        await db_client.update_record(collection=COLLECTION, record_id=task_id, data=_to_payload(changes))

        completed_now = (
            changes.get("status") == TaskStatus.COMPLETED and current.status != TaskStatus.COMPLETED
        )
        await activity_service.record_activity(
            task_id=task_id,
            user_id=user_id,
            activity_type=ActivityType.COMPLETE if completed_now else ActivityType.UPDATE,
        )

        log_with_user_context(
            logger, "info", "Task updated", user_id=user_id, task_id=task_id, fields=sorted(changes)
        )
        return await get_task(user_id=user_id, task_id=task_id)


async def update_task_status(*, user_id: str, task_id: str, status: TaskStatus) -> Task:
    """Change a task's status."""
    return await update_task(user_id=user_id, task_id=task_id, update=TaskUpdate(status=status))


async def delete_task(*, user_id: str, task_id: str) -> None:
    """Delete a task. Its activity history is kept.

    Raises:
        RecordNotFoundError: If the task does not exist or is owned by another user
    """
    with span("task_service.delete_task"):
        await get_task(user_id=user_id, task_id=task_id)
        await db_client.delete_record(collection=COLLECTION, record_id=task_id)
        await activity_service.record_activity(task_id=task_id, user_id=user_id, activity_type=ActivityType.DELETE)
        log_with_user_context(logger, "info", "Task deleted", user_id=user_id, task_id=task_id)
