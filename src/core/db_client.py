"""PocketBase client wrapper with CRUD operations.

PocketBase is the hosted store for every collection (see ``src.core.schema``). The SDK is
synchronous, so calls run in a worker thread to keep the event loop free. Records come back
as plain dictionaries; expanded relations are nested under ``"expand"``.
"""

import asyncio
import json
import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from pocketbase import PocketBase
from pocketbase.client import ClientResponseError

from src.core.config import constants, settings


logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404

T = TypeVar("T")


class DatabaseError(RuntimeError):
    """Raised when the store rejects or fails an operation."""


class RecordNotFoundError(KeyError):
    """Raised when a record does not exist (or is not visible to the caller)."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


_client: PocketBase | None = None
_client_lock = threading.Lock()


def get_client() -> PocketBase:
    """Return the shared PocketBase client, authenticating as admin on first use."""
    global _client  # noqa: PLW0603
    if _client is not None:
        return _client

    with _client_lock:
        if _client is None:
            client = PocketBase(settings.pocketbase_url)
            try:
                client.admins.auth_with_password(settings.pocketbase_admin_email, settings.pocketbase_admin_password)
            except ClientResponseError as e:
                logger.error("pocketbase_auth_failed", extra={"url": settings.pocketbase_url, "error": str(e)})
                raise DatabaseError(f"Failed to authenticate with PocketBase: {e}") from e
            logger.info("Created PocketBase client", extra={"url": settings.pocketbase_url})
            _client = client
    return _client


def reset_client() -> None:
    """Drop the cached client so the next call re-authenticates."""
    global _client  # noqa: PLW0603
    with _client_lock:
        _client = None


def sanitize_param(value: str | int | float | bool | None) -> str:
    """Escape a value for safe embedding in PocketBase filter expressions via json.dumps."""
    return json.dumps(str(value))[1:-1]


def format_datetime(value: datetime) -> str:
    """Format a datetime the way PocketBase stores and compares dates (UTC, millisecond precision)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    utc_value = value.astimezone(UTC)
    return utc_value.strftime("%Y-%m-%d %H:%M:%S.") + f"{utc_value.microsecond // 1000:03d}Z"


def _serialize(data: dict[str, Any]) -> dict[str, Any]:
    """Convert datetimes to PocketBase's date format before sending a payload."""
    return {key: format_datetime(val) if isinstance(val, datetime) else val for key, val in data.items()}


def _expand_value(value: Any) -> Any:
    if isinstance(value, list):
        return [_record_to_dict(item) for item in value]
    return _record_to_dict(value)


def _record_to_dict(record: Any) -> dict[str, Any]:
    """Convert an SDK Record (or an already-plain dict) into a dictionary."""
    data = dict(record) if isinstance(record, dict) else dict(vars(record))
    data.pop("collection_id", None)
    data.pop("collection_name", None)

    expand = data.pop("expand", None) or {}
    if expand:
        data["expand"] = {key: _expand_value(value) for key, value in expand.items()}
    return data


async def _call(func: Callable[[], T], *, operation: str, collection: str, record_id: str | None = None) -> T:
    """Run a blocking SDK call in a thread and translate its errors."""
    try:
        return await asyncio.to_thread(func)
    except ClientResponseError as e:
        if e.status == HTTP_NOT_FOUND:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg) from e
        logger.error(
            f"{operation}_failed",
            extra={"collection": collection, "record_id": record_id, "status": e.status, "error": str(e)},
        )
        msg = f"Failed to {operation.replace('_', ' ')} in {collection}: {e}"
        raise DatabaseError(msg) from e


async def create_record(*, collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Insert a new record and return it with its assigned id."""
    client = get_client()
    record = await _call(
        lambda: client.collection(collection).create(_serialize(data)),
        operation="create_record",
        collection=collection,
    )
    result = _record_to_dict(record)
    logger.info("Created record", extra={"collection": collection, "record_id": result.get("id")})
    return result


async def get_record(*, collection: str, record_id: str, expand: str = "") -> dict[str, Any]:
    """Fetch a single record by ID, raising RecordNotFoundError if not found."""
    client = get_client()
    query_params = {"expand": expand} if expand else {}
    record = await _call(
        lambda: client.collection(collection).get_one(record_id, query_params),
        operation="get_record",
        collection=collection,
        record_id=record_id,
    )
    logger.debug("Retrieved record", extra={"collection": collection, "record_id": record_id})
    return _record_to_dict(record)


async def update_record(*, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Update a record by ID and return the updated record."""
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    client = get_client()
    record = await _call(
        lambda: client.collection(collection).update(record_id, _serialize(data)),
        operation="update_record",
        collection=collection,
        record_id=record_id,
    )
    logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
    return _record_to_dict(record)


async def delete_record(*, collection: str, record_id: str) -> None:
    """Delete a record by ID, raising RecordNotFoundError if not found."""
    client = get_client()
    await _call(
        lambda: client.collection(collection).delete(record_id),
        operation="delete_record",
        collection=collection,
        record_id=record_id,
    )
    logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})


async def list_all_records(
    *,
    collection: str,
    filter_query: str = "",
    sort: str = "",
    expand: str = "",
    batch: int = constants.FULL_LIST_BATCH_SIZE,
) -> list[dict[str, Any]]:
    """List every record matching the filter, walking all pages of the collection."""
    client = get_client()

    query_params: dict[str, str] = {}
    if filter_query:
        query_params["filter"] = filter_query
    if sort:
        query_params["sort"] = sort
    if expand:
        query_params["expand"] = expand

    items = await _call(
        lambda: client.collection(collection).get_full_list(batch, query_params),
        operation="list_all_records",
        collection=collection,
    )
    records = [_record_to_dict(item) for item in items]
    logger.debug("Listed all records", extra={"collection": collection, "count": len(records)})
    return records


async def get_first_record(*, collection: str, filter_query: str, expand: str = "") -> dict[str, Any] | None:
    """Return the first record matching the filter, or None."""
    client = get_client()
    query_params = {"expand": expand} if expand else {}
    try:
        record = await _call(
            lambda: client.collection(collection).get_first_list_item(filter_query, query_params),
            operation="get_first_record",
            collection=collection,
        )
    except RecordNotFoundError:
        return None
    return _record_to_dict(record)
