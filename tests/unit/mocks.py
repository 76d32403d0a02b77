"""Pure Python in-memory database for unit testing."""

import asyncio
import copy
import re
from datetime import UTC, datetime
from typing import Any

from src.core.db_client import DatabaseError, RecordNotFoundError, format_datetime


# Relation fields resolved by the ``expand`` parameter, mapped to their target collection
RELATIONS = {
    "category_id": "categories",
    "workspace_id": "workspaces",
    "user_id": "users",
}

_CONDITION = re.compile(r"^\s*(?P<field>[\w.]+)\s*(?P<op>!=|>=|<=|=|>|<|~)\s*(?P<value>.+?)\s*$")


def _store_value(value: Any) -> Any:
    # Dates are kept in PocketBase's string format so filters compare them lexically
    return format_datetime(value) if isinstance(value, datetime) else value


class InMemoryDBClient:
    """Pure Python in-memory database for unit testing.

    Provides a simple in-memory implementation of database operations
    without requiring PocketBase to be running. Supports basic CRUD
    operations, simple filtering/sorting and single-level relation expansion.
    """

    def __init__(self):
        """Initialize empty in-memory database."""
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._id_counter = 1000

    async def create_record(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create a new record in the specified collection.

        ``created``/``updated`` in ``data`` override the generated timestamps, which lets
        tests seed historical rows.

        Raises:
            DatabaseError: If data is not a dictionary
        """
        if not isinstance(data, dict):
            raise DatabaseError(f"Data must be a dictionary, got {type(data)}")

        records = self._collections.setdefault(collection, {})
        record_id = str(self._id_counter)
        self._id_counter += 1

        now = format_datetime(datetime.now(UTC))
        record = {
            "id": record_id,
            "created": now,
            "updated": now,
            **{key: _store_value(value) for key, value in data.items()},
        }
        records[record_id] = record
        return copy.deepcopy(record)

    async def get_record(self, collection: str, record_id: str, expand: str = "") -> dict[str, Any]:
        """Get a record by ID from the specified collection.

        Raises:
            RecordNotFoundError: If record not found
            DatabaseError: If record_id is not a string
        """
        if not isinstance(record_id, str):
            raise DatabaseError(f"Record ID must be a string, got {type(record_id)}")

        record = self._collections.get(collection, {}).get(record_id)
        if record is None:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")
        return self._expand(copy.deepcopy(record), expand)

    async def update_record(self, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Update an existing record.

        Raises:
            RecordNotFoundError: If record not found
            DatabaseError: If data is not a dictionary
        """
        if not isinstance(data, dict):
            raise DatabaseError(f"Data must be a dictionary, got {type(data)}")

        record = self._collections.get(collection, {}).get(record_id)
        if record is None:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")

        # Keep updated strictly after created
        await asyncio.sleep(0.001)
        record.update({key: _store_value(value) for key, value in data.items()})
        record["updated"] = format_datetime(datetime.now(UTC))
        return copy.deepcopy(record)

    async def delete_record(self, collection: str, record_id: str) -> bool:
        """Delete a record from the collection.

        Raises:
            RecordNotFoundError: If record not found
        """
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")
        del records[record_id]
        return True

    async def list_records(
        self,
        collection: str,
        page: int = 1,
        per_page: int = 500,
        filter_query: str = "",
        sort: str = "",
        expand: str = "",
    ) -> list[dict[str, Any]]:
        """List records from the collection with optional filtering, sorting and expansion.

        Raises:
            DatabaseError: For invalid filter syntax
        """
        records = list(self._collections.get(collection, {}).values())

        if filter_query:
            records = [r for r in records if self._parse_filter(filter_query, r)]

        if sort:
            records = self._apply_sort(records, sort)

        start_idx = (page - 1) * per_page
        return [self._expand(copy.deepcopy(r), expand) for r in records[start_idx : start_idx + per_page]]

    async def list_all_records(
        self,
        collection: str,
        filter_query: str = "",
        sort: str = "",
        expand: str = "",
        batch: int = 200,
    ) -> list[dict[str, Any]]:
        """List every matching record, fetching page after page like the SDK's full-list call."""
        records: list[dict[str, Any]] = []
        page = 1
        while True:
            items = await self.list_records(
                collection, page=page, per_page=batch, filter_query=filter_query, sort=sort, expand=expand
            )
            records.extend(items)
            if len(items) < batch:
                return records
            page += 1

    async def get_first_record(self, collection: str, filter_query: str, expand: str = "") -> dict[str, Any] | None:
        """Get the first matching record or None."""
        records = await self.list_records(collection, filter_query=filter_query, expand=expand)
        return records[0] if records else None

    def _expand(self, record: dict[str, Any], expand: str) -> dict[str, Any]:
        expanded = {}
        for field in filter(None, (name.strip() for name in expand.split(","))):
            target = self._collections.get(RELATIONS.get(field, ""), {}).get(record.get(field) or "")
            if target is not None:
                expanded[field] = copy.deepcopy(target)
        if expanded:
            record["expand"] = expanded
        return record

    def _parse_filter(self, filter_str: str, record: dict[str, Any]) -> bool:
        """Evaluate filter expression against a record.

        Supports ``=``, ``!=``, ``>``, ``>=``, ``<``, ``<=``, ``~`` (case-insensitive
        contains, matching PocketBase) joined with ``&&``. Comparisons are made on the
        string form of the stored value.

        Raises:
            DatabaseError: For invalid filter syntax
        """
        if not filter_str.strip():
            return True

        if "&&" in filter_str:
            return all(self._parse_filter(cond, record) for cond in filter_str.split("&&"))

        match = _CONDITION.match(filter_str)
        if match is None:
            raise DatabaseError(f"Invalid filter syntax: {filter_str}")

        field, op = match["field"], match["op"]
        value = match["value"].strip("'\"")
        stored = record.get(field)

        if value.lower() in ("true", "false") and isinstance(stored, bool):
            expected = value.lower() == "true"
            return stored == expected if op == "=" else stored != expected

        actual = "" if stored is None else str(stored)
        if op == "=":
            return actual == value
        if op == "!=":
            return actual != value
        if op == "~":
            return value.lower() in actual.lower()
        if op == ">":
            return actual > value
        if op == ">=":
            return actual >= value
        if op == "<":
            return actual < value
        return actual <= value

    def _apply_sort(self, records: list[dict], sort: str) -> list[dict]:
        """Sort records by field (prefix with - for descending)."""
        reverse = sort.startswith("-")
        field = sort.lstrip("-+")
        return sorted(records, key=lambda r: str(r.get(field, "")), reverse=reverse)
