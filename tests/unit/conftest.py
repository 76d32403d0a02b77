"""Pytest configuration and fixtures for unit tests."""

from datetime import UTC, datetime

import pytest

from src.core import db_client
from tests.unit.mocks import InMemoryDBClient


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches src.core.db_client functions to use InMemoryDBClient."""
    monkeypatch.setattr("src.core.db_client.create_record", in_memory_db.create_record)
    monkeypatch.setattr("src.core.db_client.get_record", in_memory_db.get_record)
    monkeypatch.setattr("src.core.db_client.update_record", in_memory_db.update_record)
    monkeypatch.setattr("src.core.db_client.delete_record", in_memory_db.delete_record)
    monkeypatch.setattr("src.core.db_client.list_all_records", in_memory_db.list_all_records)
    monkeypatch.setattr("src.core.db_client.get_first_record", in_memory_db.get_first_record)

    return in_memory_db


@pytest.fixture
def fixed_now():
    """Reference instant used by the classification and analytics tests (a Wednesday, 10:00 UTC)."""
    return datetime(2024, 5, 15, 10, 0, tzinfo=UTC)


@pytest.fixture
async def sample_user(patched_db):
    """Create a user profile record."""
    return await patched_db.create_record(
        collection="users",
        data={"username": "alice", "email": "alice@example.com"},
    )


@pytest.fixture
async def sample_category(patched_db, sample_user):
    """Create a category owned by the sample user."""
    return await patched_db.create_record(
        collection="categories",
        data={"user_id": sample_user["id"], "name": "Work", "color": "#4F46E5"},
    )


@pytest.fixture
def make_task_record(patched_db):
    """Factory seeding task rows directly, bypassing the service and its activity log."""

    async def _make(user_id: str, *, created: datetime | None = None, **fields):
        data = {
            "user_id": user_id,
            "title": fields.pop("title", "Task"),
            "priority": "medium",
            "status": "pending",
            "due_date": "",
            "category_id": "",
            **fields,
        }
        if created is not None:
            data["created"] = db_client.format_datetime(created)
            data["updated"] = db_client.format_datetime(created)
        return await patched_db.create_record(collection="tasks", data=data)

    return _make


@pytest.fixture
def make_activity(patched_db):
    """Factory seeding activity events with an explicit timestamp."""

    async def _make(user_id: str, task_id: str, activity_type: str, at: datetime):
        return await patched_db.create_record(
            collection="task_activities",
            data={
                "task_id": task_id,
                "user_id": user_id,
                "activity_type": activity_type,
                "created": db_client.format_datetime(at),
            },
        )

    return _make

