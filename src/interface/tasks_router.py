"""Task and category endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from src.domain.category import Category
from src.domain.create_models import CategoryCreate, TaskCreate
from src.domain.task import Task, TaskStatus
from src.domain.update_models import CategoryUpdate, TaskStatusUpdate, TaskUpdate
from src.interface.dependencies import CurrentUserId
from src.services import category_service, task_service


router = APIRouter(prefix="/api", tags=["tasks"])


@router.get("/tasks")
async def list_tasks(
    user_id: CurrentUserId,
    status_filter: Annotated[TaskStatus | None, Query(alias="status")] = None,
) -> list[Task]:
    """List tasks newest first. The ``status`` query parameter narrows to one status."""
    return await task_service.list_tasks(user_id=user_id, status=status_filter)


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(payload: TaskCreate, user_id: CurrentUserId) -> Task:
    return await task_service.create_task(user_id=user_id, task=payload)


@router.get("/tasks/{task_id}")
async def get_task(task_id: str, user_id: CurrentUserId) -> Task:
    return await task_service.get_task(user_id=user_id, task_id=task_id)


@router.patch("/tasks/{task_id}")
async def update_task(task_id: str, payload: TaskUpdate, user_id: CurrentUserId) -> Task:
    return await task_service.update_task(user_id=user_id, task_id=task_id, update=payload)


@router.patch("/tasks/{task_id}/status")
async def update_task_status(task_id: str, payload: TaskStatusUpdate, user_id: CurrentUserId) -> Task:
    return await task_service.update_task_status(user_id=user_id, task_id=task_id, status=payload.status)


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, user_id: CurrentUserId) -> Response:
    await task_service.delete_task(user_id=user_id, task_id=task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/categories")
async def list_categories(user_id: CurrentUserId) -> list[Category]:
    return await category_service.list_categories(user_id=user_id)


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreate, user_id: CurrentUserId) -> Category:
    return await category_service.create_category(user_id=user_id, category=payload)


@router.patch("/categories/{category_id}")
async def update_category(category_id: str, payload: CategoryUpdate, user_id: CurrentUserId) -> Category:
    return await category_service.update_category(user_id=user_id, category_id=category_id, update=payload)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: str, user_id: CurrentUserId) -> Response:
    await category_service.delete_category(user_id=user_id, category_id=category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
