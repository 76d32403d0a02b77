"""PocketBase schema management (code-first approach).

Ownership rules live on the collections themselves: a record is only listed, viewed or
changed by the user it belongs to, mirroring row-level security on the hosted store.
"""

import logging
from typing import Any

import httpx
from pocketbase import PocketBase
from pocketbase.client import ClientResponseError

from src.core.config import constants, settings


logger = logging.getLogger(__name__)


# Collections in dependency order: relations may only point at earlier entries
COLLECTIONS = [
    "users",
    "categories",
    "workspaces",
    "workspace_members",
    "tasks",
    "task_activities",
]

_OWNER_RULE = "user_id = @request.auth.id"

_AUTODATE_FIELDS = [
    {"name": "created", "type": "autodate", "onCreate": True, "onUpdate": False},
    {"name": "updated", "type": "autodate", "onCreate": True, "onUpdate": True},
]


def _relation(name: str, target: str, ids: dict[str, str], *, required: bool, max_select: int = 1) -> dict[str, Any]:
    return {
        "name": name,
        "type": "relation",
        "required": required,
        "collectionId": ids.get(target, target),
        "maxSelect": max_select,
    }


def _get_collection_schema(
    *,
    collection_name: str,
    collection_ids: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Get the expected schema for a collection.

    PocketBase v0.22+ uses 'fields' with options flattened onto each field, and relation
    fields need real collection IDs rather than names.

    Args:
        collection_name: The name of the collection to get the schema for.
        collection_ids: Optional mapping of collection names to their actual IDs.
    """
    ids = collection_ids or {}

    schemas = {
        "users": {
            "name": "users",
            "type": "auth",
            "system": False,
            # Profiles are readable by any signed-in user (member lists show usernames)
            "listRule": "@request.auth.id != ''",
            "viewRule": "@request.auth.id != ''",
            "createRule": "",
            "updateRule": "id = @request.auth.id",
            "deleteRule": None,
            "fields": [
                {"name": "username", "type": "text", "required": False, "max": 64},
                {"name": "avatar_url", "type": "url", "required": False},
                {"name": "productivity_settings", "type": "json", "required": False},
            ],
        },
        "categories": {
            "name": "categories",
            "type": "base",
            "system": False,
            "listRule": _OWNER_RULE,
            "viewRule": _OWNER_RULE,
            "createRule": "@request.auth.id != '' && @request.body.user_id = @request.auth.id",
            "updateRule": _OWNER_RULE,
            "deleteRule": _OWNER_RULE,
            "fields": [
                _relation("user_id", "users", ids, required=True),
                {"name": "name", "type": "text", "required": True, "max": 100},
                {"name": "color", "type": "text", "required": True, "pattern": r"^#[0-9A-Fa-f]{6}$"},
                *_AUTODATE_FIELDS,
            ],
            "indexes": ["CREATE UNIQUE INDEX idx_category_owner_name ON categories (user_id, name)"],
        },
        "workspaces": {
            "name": "workspaces",
            "type": "base",
            "system": False,
            # Membership is resolved by workspace_service; workspace_members does not exist yet here
            "listRule": "@request.auth.id != ''",
            "viewRule": "@request.auth.id != ''",
            "createRule": "@request.auth.id != ''",
            "updateRule": "created_by = @request.auth.id",
            "deleteRule": "created_by = @request.auth.id",
            "fields": [
                {"name": "name", "type": "text", "required": True, "max": 100},
                {"name": "description", "type": "text", "required": False},
                _relation("created_by", "users", ids, required=True),
                *_AUTODATE_FIELDS,
            ],
        },
        "workspace_members": {
            "name": "workspace_members",
            "type": "base",
            "system": False,
            "listRule": "user_id = @request.auth.id || workspace_id.created_by = @request.auth.id",
            "viewRule": "user_id = @request.auth.id || workspace_id.created_by = @request.auth.id",
            "createRule": "workspace_id.created_by = @request.auth.id",
            "updateRule": "workspace_id.created_by = @request.auth.id",
            "deleteRule": "workspace_id.created_by = @request.auth.id",
            "fields": [
                {**_relation("workspace_id", "workspaces", ids, required=True), "cascadeDelete": True},
                _relation("user_id", "users", ids, required=True),
                {
                    "name": "role",
                    "type": "select",
                    "required": True,
                    "values": ["owner", "admin", "member"],
                    "maxSelect": 1,
                },
                *_AUTODATE_FIELDS,
            ],
            "indexes": ["CREATE UNIQUE INDEX idx_member_unique ON workspace_members (workspace_id, user_id)"],
        },
        "tasks": {
            "name": "tasks",
            "type": "base",
            "system": False,
            "listRule": _OWNER_RULE,
            "viewRule": _OWNER_RULE,
            "createRule": "@request.auth.id != '' && @request.body.user_id = @request.auth.id",
            "updateRule": _OWNER_RULE,
            "deleteRule": _OWNER_RULE,
            "fields": [
                _relation("user_id", "users", ids, required=True),
                {"name": "title", "type": "text", "required": True, "max": 200},
                {"name": "description", "type": "text", "required": False},
                {"name": "due_date", "type": "date", "required": False},
                {
                    "name": "priority",
                    "type": "select",
                    "required": True,
                    "values": ["low", "medium", "high"],
                    "maxSelect": 1,
                },
                _relation("category_id", "categories", ids, required=False),
                _relation("workspace_id", "workspaces", ids, required=False),
                {
                    "name": "status",
                    "type": "select",
                    "required": True,
                    "values": ["pending", "in_progress", "completed"],
                    "maxSelect": 1,
                },
                # Task ids; stored as JSON because a self-relation needs this collection's own id
                {"name": "dependencies", "type": "json", "required": False},
                _relation("assigned_to", "users", ids, required=False, max_select=99),
                *_AUTODATE_FIELDS,
            ],
            "indexes": [
                "CREATE INDEX idx_tasks_owner_status ON tasks (user_id, status)",
                "CREATE INDEX idx_tasks_due_date ON tasks (due_date)",
            ],
        },
        "task_activities": {
            "name": "task_activities",
            "type": "base",
            "system": False,
            # Append-only audit trail: no updates, no deletes
            "listRule": _OWNER_RULE,
            "viewRule": _OWNER_RULE,
            "createRule": "@request.auth.id != '' && @request.body.user_id = @request.auth.id",
            "updateRule": None,
            "deleteRule": None,
            "fields": [
                # Plain text so history survives task deletion
                {"name": "task_id", "type": "text", "required": True},
                _relation("user_id", "users", ids, required=True),
                {
                    "name": "activity_type",
                    "type": "select",
                    "required": True,
                    "values": ["create", "complete", "update", "delete"],
                    "maxSelect": 1,
                },
                *_AUTODATE_FIELDS,
            ],
            "indexes": [
                "CREATE INDEX idx_activity_owner_type ON task_activities (user_id, activity_type)",
                "CREATE INDEX idx_activity_task ON task_activities (task_id)",
            ],
        },
    }
    return schemas[collection_name]


async def _collection_exists(*, client: httpx.AsyncClient, collection_name: str) -> bool:
    """Check if a collection exists in PocketBase."""
    try:
        response = await client.get(f"/api/collections/{collection_name}")
        return response.is_success
    except httpx.HTTPError:
        return False


async def _get_collection_id(*, client: httpx.AsyncClient, collection_name: str) -> str:
    """Fetch the actual collection ID (e.g. "pbc_1234567890") from PocketBase."""
    response = await client.get(f"/api/collections/{collection_name}")
    response.raise_for_status()
    return response.json()["id"]


async def _create_collection(*, client: httpx.AsyncClient, schema: dict[str, Any]) -> None:
    response = await client.post("/api/collections", json=schema)
    response.raise_for_status()
    logger.info("Created collection: %s", schema["name"])


_API_RULE_KEYS = ("listRule", "viewRule", "createRule", "updateRule", "deleteRule")


def merge_fields(
    schema: dict[str, Any],
    current: dict[str, Any],
) -> tuple[list[dict[str, Any]], list[str], list[str]]:
    """Merge desired fields into the existing ones.

    Existing fields the schema does not mention are kept untouched so built-in auth fields
    survive. Fields named in both are replaced by the desired definition, keeping the
    existing field id so PocketBase updates rather than recreates them.

    Returns:
        Tuple of (merged_fields, fields_updated, fields_added).
    """
    desired_fields = {f["name"]: f for f in schema.get("fields", [])}
    existing_fields = {f["name"]: f for f in current.get("fields", [])}

    merged_fields = []
    fields_updated = []
    fields_added = []

    for field_name, existing_field in existing_fields.items():
        desired = desired_fields.get(field_name)
        if desired is None:
            merged_fields.append(existing_field)
            continue
        if "id" in existing_field:
            desired = {**desired, "id": existing_field["id"]}
        merged_fields.append(desired)
        fields_updated.append(field_name)

    for field_name, desired_field in desired_fields.items():
        if field_name not in existing_fields:
            merged_fields.append(desired_field)
            fields_added.append(field_name)

    return merged_fields, fields_updated, fields_added


def rules_to_update(schema: dict[str, Any], current: dict[str, Any]) -> dict[str, str | None]:
    """Return the API rules whose desired value differs from the live collection."""
    return {
        rule_key: schema[rule_key]
        for rule_key in _API_RULE_KEYS
        if rule_key in schema and schema[rule_key] != current.get(rule_key)
    }


def build_update_payload(
    merged_fields: list[dict[str, Any]],
    changed_rules: dict[str, str | None],
    schema: dict[str, Any],
    current: dict[str, Any],
) -> dict[str, Any]:
    """Build the PATCH body for a collection, appending indexes that are not there yet."""
    update_payload: dict[str, Any] = {"fields": merged_fields, **changed_rules}

    if "indexes" in schema:
        existing_indexes = list(current.get("indexes", []))
        new_indexes = [idx for idx in schema["indexes"] if idx not in existing_indexes]
        if new_indexes:
            update_payload["indexes"] = existing_indexes + new_indexes

    return update_payload


async def _update_collection(
    *,
    client: httpx.AsyncClient,
    collection_name: str,
    schema: dict[str, Any],
) -> None:
    response = await client.get(f"/api/collections/{collection_name}")
    response.raise_for_status()
    current = response.json()

    merged_fields, fields_updated, fields_added = merge_fields(schema, current)
    changed_rules = rules_to_update(schema, current)
    update_payload = build_update_payload(merged_fields, changed_rules, schema, current)

    response = await client.patch(f"/api/collections/{collection_name}", json=update_payload)
    response.raise_for_status()

    logger.info(
        "Updated collection %s",
        collection_name,
        extra={"fields_added": fields_added, "fields_updated": fields_updated, "rules": list(changed_rules)},
    )


async def sync_schema(
    pocketbase_url: str | None = None,
    admin_email: str | None = None,
    admin_password: str | None = None,
) -> None:
    """Sync the PocketBase schema with the domain models (idempotent).

    Args:
        pocketbase_url: PocketBase URL. Defaults to settings.pocketbase_url.
        admin_email: Admin email. Defaults to settings.pocketbase_admin_email.
        admin_password: Admin password. Defaults to settings.pocketbase_admin_password.
    """
    logger.info("Starting PocketBase schema sync...")

    url = pocketbase_url or settings.pocketbase_url
    client = PocketBase(url)

    try:
        client.admins.auth_with_password(
            admin_email or settings.pocketbase_admin_email,
            admin_password or settings.pocketbase_admin_password,
        )
    except ClientResponseError as e:
        logger.error("Failed to authenticate as admin: %s", e)
        raise

    async with httpx.AsyncClient(base_url=url, timeout=constants.API_TIMEOUT_SECONDS) as http_client:
        http_client.headers["Authorization"] = f"Bearer {client.auth_store.token}"

        collection_ids: dict[str, str] = {}

        for collection_name in COLLECTIONS:
            schema = _get_collection_schema(collection_name=collection_name, collection_ids=collection_ids)

            if await _collection_exists(client=http_client, collection_name=collection_name):
                await _update_collection(client=http_client, collection_name=collection_name, schema=schema)
            else:
                await _create_collection(client=http_client, schema=schema)

            collection_ids[collection_name] = await _get_collection_id(
                client=http_client,
                collection_name=collection_name,
            )

    logger.info("PocketBase schema sync complete")
