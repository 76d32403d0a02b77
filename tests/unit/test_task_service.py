"""Unit tests for task_service module."""

from datetime import UTC, datetime

import pytest

from src.core.db_client import RecordNotFoundError
from src.domain.create_models import TaskCreate
from src.domain.task import TaskPriority, TaskStatus
from src.domain.update_models import TaskUpdate
from src.services import task_service


async def activity_types(db, task_id: str) -> list[str]:
    events = await db.list_records(collection="task_activities", filter_query=f'task_id = "{task_id}"', sort="created")
    return [event["activity_type"] for event in events]


@pytest.mark.unit
class TestCreateTask:
    """Tests for create_task."""

    async def test_creates_task_and_logs_create_event(self, patched_db, sample_user):
        task = await task_service.create_task(
            user_id=sample_user["id"],
            task=TaskCreate(title="  Write report  ", priority=TaskPriority.HIGH),
        )

        assert task.title == "Write report"
        assert task.priority == TaskPriority.HIGH
        assert task.status == TaskStatus.PENDING
        assert task.user_id == sample_user["id"]
        assert task.due_date is None
        assert task.category is None
        assert await activity_types(patched_db, task.id) == ["create"]

    async def test_resolves_category(self, patched_db, sample_user, sample_category):
        task = await task_service.create_task(
            user_id=sample_user["id"],
            task=TaskCreate(title="Plan sprint", category_id=sample_category["id"]),
        )

        assert task.category_id == sample_category["id"]
        assert task.category is not None
        assert task.category.name == "Work"

    async def test_rejects_foreign_category(self, patched_db, sample_user):
        other = await patched_db.create_record(
            collection="categories", data={"user_id": "someone_else", "name": "Theirs", "color": "#000000"}
        )

        with pytest.raises(RecordNotFoundError):
            await task_service.create_task(
                user_id=sample_user["id"], task=TaskCreate(title="Sneaky", category_id=other["id"])
            )

    async def test_created_completed_logs_both_events(self, patched_db, sample_user):
        task = await task_service.create_task(
            user_id=sample_user["id"], task=TaskCreate(title="Already done", status=TaskStatus.COMPLETED)
        )

        assert await activity_types(patched_db, task.id) == ["create", "complete"]

    async def test_due_date_round_trips_through_store(self, patched_db, sample_user):
        due = datetime(2024, 6, 1, 9, 30, tzinfo=UTC)

        task = await task_service.create_task(user_id=sample_user["id"], task=TaskCreate(title="Dated", due_date=due))

        assert task.due_date == due


@pytest.mark.unit
class TestReadTasks:
    """Tests for get_task and the list helpers."""

    async def test_get_task_of_another_user_is_not_found(self, patched_db, sample_user, make_task_record):
        record = await make_task_record("someone_else", title="Private")

        with pytest.raises(RecordNotFoundError):
            await task_service.get_task(user_id=sample_user["id"], task_id=record["id"])

    async def test_list_tasks_filters_by_owner_and_status(self, patched_db, sample_user, make_task_record):
        user_id = sample_user["id"]
        await make_task_record(user_id, title="Open")
        await make_task_record(user_id, title="Busy", status="in_progress")
        await make_task_record("someone_else", title="Foreign")

        all_tasks = await task_service.list_tasks(user_id=user_id)
        busy = await task_service.list_tasks(user_id=user_id, status=TaskStatus.IN_PROGRESS)

        assert sorted(task.title for task in all_tasks) == ["Busy", "Open"]
        assert [task.title for task in busy] == ["Busy"]

    async def test_list_tasks_category_expansion_is_optional(
        self, patched_db, sample_user, sample_category, make_task_record
    ):
        user_id = sample_user["id"]
        await make_task_record(user_id, title="Filed", category_id=sample_category["id"])

        [expanded] = await task_service.list_tasks(user_id=user_id)
        [bare] = await task_service.list_tasks(user_id=user_id, expand_category=False)

        assert expanded.category is not None
        assert expanded.category.name == "Work"
        assert bare.category is None
        assert bare.category_id == sample_category["id"]

    async def test_list_tasks_returns_more_than_one_page(self, patched_db, sample_user, make_task_record):
        user_id = sample_user["id"]
        for i in range(520):
            await make_task_record(user_id, title=f"t{i}")

        tasks = await task_service.list_tasks(user_id=user_id)

        assert len(tasks) == 520

    async def test_list_active_tasks_skips_completed(self, patched_db, sample_user, make_task_record):
        user_id = sample_user["id"]
        await make_task_record(user_id, title="Open")
        await make_task_record(user_id, title="Done", status="completed")

        active = await task_service.list_active_tasks(user_id=user_id)

        assert [task.title for task in active] == ["Open"]

    async def test_malformed_rows_are_skipped(self, patched_db, sample_user, make_task_record):
        user_id = sample_user["id"]
        await make_task_record(user_id, title="Good")
        await make_task_record(user_id, title="Bad", priority="urgent")

        tasks = await task_service.list_tasks(user_id=user_id)

        assert [task.title for task in tasks] == ["Good"]


@pytest.mark.unit
class TestUpdateTask:
    """Tests for update_task, update_task_status and delete_task."""

    async def test_completion_logs_complete_event(self, patched_db, sample_user):
        user_id = sample_user["id"]
        task = await task_service.create_task(user_id=user_id, task=TaskCreate(title="Finish me"))

        updated = await task_service.update_task_status(user_id=user_id, task_id=task.id, status=TaskStatus.COMPLETED)

        assert updated.status == TaskStatus.COMPLETED
        assert await activity_types(patched_db, task.id) == ["create", "complete"]

    async def test_completing_twice_logs_update_second_time(self, patched_db, sample_user):
        user_id = sample_user["id"]
        task = await task_service.create_task(user_id=user_id, task=TaskCreate(title="Finish me"))

        await task_service.update_task_status(user_id=user_id, task_id=task.id, status=TaskStatus.COMPLETED)
        await task_service.update_task_status(user_id=user_id, task_id=task.id, status=TaskStatus.COMPLETED)

        assert await activity_types(patched_db, task.id) == ["create", "complete", "update"]

    async def test_clearing_due_date_stores_empty_value(self, patched_db, sample_user):
        user_id = sample_user["id"]
        task = await task_service.create_task(
            user_id=user_id, task=TaskCreate(title="Dated", due_date=datetime(2024, 6, 1, tzinfo=UTC))
        )

        updated = await task_service.update_task(user_id=user_id, task_id=task.id, update=TaskUpdate(due_date=None))

        assert updated.due_date is None
        stored = await patched_db.get_record(collection="tasks", record_id=task.id)
        assert stored["due_date"] == ""

    @pytest.mark.parametrize("field", ["title", "priority", "status", "dependencies", "assigned_to"])
    def test_null_for_required_field_is_rejected(self, field):
        with pytest.raises(ValueError, match=f"{field} cannot be null"):
            TaskUpdate.model_validate({field: None})

    async def test_empty_update_is_rejected(self, patched_db, sample_user):
        with pytest.raises(ValueError, match="Empty update payload"):
            await task_service.update_task(user_id=sample_user["id"], task_id="any", update=TaskUpdate())

    async def test_delete_keeps_history(self, patched_db, sample_user):
        user_id = sample_user["id"]
        task = await task_service.create_task(user_id=user_id, task=TaskCreate(title="Temporary"))

        await task_service.delete_task(user_id=user_id, task_id=task.id)

        with pytest.raises(RecordNotFoundError):
            await task_service.get_task(user_id=user_id, task_id=task.id)
        assert await activity_types(patched_db, task.id) == ["create", "delete"]
