"""Category service for CRUD operations."""

import logging

from src.core import db_client
from src.core.logging import log_with_user_context, span
from src.domain.category import Category
from src.domain.create_models import CategoryCreate
from src.domain.update_models import CategoryUpdate


logger = logging.getLogger(__name__)

COLLECTION = "categories"


async def get_category(*, user_id: str, category_id: str) -> Category:
    """Fetch one of the user's categories.

    Raises:
        RecordNotFoundError: If the category does not exist or is owned by another user
    """
    record = await db_client.get_record(collection=COLLECTION, record_id=category_id)
    if record.get("user_id") != user_id:
        msg = f"Record not found in {COLLECTION}: {category_id}"
        raise db_client.RecordNotFoundError(msg)
    return Category(**record)


async def list_categories(*, user_id: str) -> list[Category]:
    """List the user's categories ordered by name."""
    with span("category_service.list_categories"):
        records = await db_client.list_all_records(
            collection=COLLECTION,
            filter_query=f'user_id = "{db_client.sanitize_param(user_id)}"',
            sort="name",
        )
        return [Category(**record) for record in records]


async def create_category(*, user_id: str, category: CategoryCreate) -> Category:
    """Create a category.

    Raises:
        ValueError: If the user already has a category with that name
    """
    with span("category_service.create_category"):
        existing = await db_client.get_first_record(
            collection=COLLECTION,
            filter_query=(
                f'user_id = "{db_client.sanitize_param(user_id)}" && name = "{db_client.sanitize_param(category.name)}"'
            ),
        )
        if existing:
            msg = f"Category '{category.name}' already exists"
            raise ValueError(msg)

        record = await db_client.create_record(
            collection=COLLECTION,
            data={"user_id": user_id, "name": category.name, "color": category.color},
        )
        log_with_user_context(logger, "info", "Category created", user_id=user_id, category_id=record["id"])
        return Category(**record)


async def update_category(*, user_id: str, category_id: str, update: CategoryUpdate) -> Category:
    """Rename or recolor a category."""
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        msg = "Empty update payload"
        raise ValueError(msg)

    with span("category_service.update_category"):
        await get_category(user_id=user_id, category_id=category_id)
        record = await db_client.update_record(collection=COLLECTION, record_id=category_id, data=changes)
        log_with_user_context(logger, "info", "Category updated", user_id=user_id, category_id=category_id)
        return Category(**record)


async def delete_category(*, user_id: str, category_id: str) -> None:
    """Delete a category and detach it from the user's tasks."""
    with span("category_service.delete_category"):
        await get_category(user_id=user_id, category_id=category_id)

        tasks = await db_client.list_all_records(
            collection="tasks",
            filter_query=(
                f'user_id = "{db_client.sanitize_param(user_id)}" '
                f'&& category_id = "{db_client.sanitize_param(category_id)}"'
            ),
        )
        for task in tasks:
            await db_client.update_record(collection="tasks", record_id=task["id"], data={"category_id": ""})

        await db_client.delete_record(collection=COLLECTION, record_id=category_id)
        log_with_user_context(
            logger, "info", "Category deleted", user_id=user_id, category_id=category_id, detached_tasks=len(tasks)
        )
