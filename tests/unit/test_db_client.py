"""Unit tests for the PocketBase client wrapper."""

from datetime import UTC, datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from pocketbase.client import ClientResponseError

from src.core import db_client
from src.core.db_client import DatabaseError, RecordNotFoundError


@pytest.fixture
def fake_pocketbase(monkeypatch):
    """Install a MagicMock as the cached PocketBase client."""
    client = MagicMock()
    monkeypatch.setattr(db_client, "_client", client)
    return client


def sdk_record(**fields) -> SimpleNamespace:
    return SimpleNamespace(collection_id="pbc_1", collection_name="tasks", **{"expand": {}, **fields})


@pytest.mark.unit
class TestFormatting:
    """Tests for filter and date helpers."""

    def test_format_datetime_converts_to_utc_millis(self):
        moment = datetime(2024, 5, 15, 12, 30, 5, 123456, tzinfo=timezone(timedelta(hours=2)))

        assert db_client.format_datetime(moment) == "2024-05-15 10:30:05.123Z"

    def test_format_datetime_assumes_naive_is_utc(self):
        assert db_client.format_datetime(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02 03:04:05.000Z"

    def test_sanitize_param_escapes_quotes(self):
        assert db_client.sanitize_param('a" || user_id != "') == 'a\\" || user_id != \\"'


@pytest.mark.unit
class TestRecordConversion:
    """Tests for SDK record to dict conversion."""

    async def test_get_record_drops_collection_metadata_and_nests_expand(self, fake_pocketbase):
        category = sdk_record(id="cat1", name="Work")
        fake_pocketbase.collection.return_value.get_one.return_value = sdk_record(
            id="t1", title="Write", expand={"category_id": category}
        )

        record = await db_client.get_record(collection="tasks", record_id="t1", expand="category_id")

        assert record == {"id": "t1", "title": "Write", "expand": {"category_id": {"id": "cat1", "name": "Work"}}}
        fake_pocketbase.collection.return_value.get_one.assert_called_once_with("t1", {"expand": "category_id"})

    async def test_create_serializes_datetimes(self, fake_pocketbase):
        fake_pocketbase.collection.return_value.create.return_value = sdk_record(id="t1")

        await db_client.create_record(
            collection="tasks", data={"title": "Dated", "due_date": datetime(2024, 6, 1, tzinfo=UTC)}
        )

        fake_pocketbase.collection.return_value.create.assert_called_once_with(
            {"title": "Dated", "due_date": "2024-06-01 00:00:00.000Z"}
        )

    async def test_list_all_records_uses_full_list(self, fake_pocketbase):
        fake_pocketbase.collection.return_value.get_full_list.return_value = [sdk_record(id="t1"), sdk_record(id="t2")]

        records = await db_client.list_all_records(
            collection="tasks", filter_query='user_id = "u1"', sort="-created", expand="category_id"
        )

        assert [r["id"] for r in records] == ["t1", "t2"]
        fake_pocketbase.collection.return_value.get_full_list.assert_called_once_with(
            200, {"filter": 'user_id = "u1"', "sort": "-created", "expand": "category_id"}
        )
        fake_pocketbase.collection.return_value.get_list.assert_not_called()


@pytest.mark.unit
class TestErrorMapping:
    """Tests for translating SDK errors."""

    async def test_404_becomes_record_not_found(self, fake_pocketbase):
        fake_pocketbase.collection.return_value.get_one.side_effect = ClientResponseError("missing", status=404)

        with pytest.raises(RecordNotFoundError, match="Record not found in tasks: t1"):
            await db_client.get_record(collection="tasks", record_id="t1")

    async def test_other_status_becomes_database_error(self, fake_pocketbase):
        fake_pocketbase.collection.return_value.update.side_effect = ClientResponseError("boom", status=500)

        with pytest.raises(DatabaseError) as exc_info:
            await db_client.update_record(collection="tasks", record_id="t1", data={"title": "x"})

        assert isinstance(exc_info.value.__cause__, ClientResponseError)

    async def test_get_first_record_returns_none_when_missing(self, fake_pocketbase):
        fake_pocketbase.collection.return_value.get_first_list_item.side_effect = ClientResponseError(
            "missing", status=404
        )

        assert await db_client.get_first_record(collection="tasks", filter_query='title = "x"') is None

    async def test_empty_update_is_rejected_before_calling_store(self, fake_pocketbase):
        with pytest.raises(ValueError, match="Empty update payload"):
            await db_client.update_record(collection="tasks", record_id="t1", data={})

        fake_pocketbase.collection.assert_not_called()
