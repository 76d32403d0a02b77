"""Workspace and profile endpoints."""

from fastapi import APIRouter, Response, status

from src.domain.create_models import WorkspaceCreate
from src.domain.update_models import UsernameUpdate, WorkspaceUpdate
from src.domain.user import ProductivitySettings, Profile
from src.domain.workspace import Workspace
from src.interface.dependencies import CurrentUserId
from src.models.service_models import WorkspaceMemberView
from src.services import profile_service, workspace_service


router = APIRouter(prefix="/api", tags=["workspaces"])


@router.get("/workspaces")
async def list_workspaces(user_id: CurrentUserId) -> list[Workspace]:
    """Workspaces the user created or belongs to."""
    return await workspace_service.list_workspaces(user_id=user_id)


@router.post("/workspaces", status_code=status.HTTP_201_CREATED)
async def create_workspace(payload: WorkspaceCreate, user_id: CurrentUserId) -> Workspace:
    return await workspace_service.create_workspace(user_id=user_id, workspace=payload)


@router.patch("/workspaces/{workspace_id}")
async def update_workspace(workspace_id: str, payload: WorkspaceUpdate, user_id: CurrentUserId) -> Workspace:
    return await workspace_service.update_workspace(user_id=user_id, workspace_id=workspace_id, update=payload)


@router.delete("/workspaces/{workspace_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workspace(workspace_id: str, user_id: CurrentUserId) -> Response:
    await workspace_service.delete_workspace(user_id=user_id, workspace_id=workspace_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/workspaces/{workspace_id}/members")
async def list_workspace_members(workspace_id: str, user_id: CurrentUserId) -> list[WorkspaceMemberView]:
    return await workspace_service.list_members(user_id=user_id, workspace_id=workspace_id)


@router.get("/profile")
async def get_profile(user_id: CurrentUserId) -> Profile:
    return await profile_service.get_profile(user_id=user_id)


@router.put("/profile/username")
async def update_username(payload: UsernameUpdate, user_id: CurrentUserId) -> Profile:
    return await profile_service.update_username(user_id=user_id, username=payload.username)


@router.get("/profile/productivity-settings")
async def get_productivity_settings(user_id: CurrentUserId) -> ProductivitySettings:
    return await profile_service.get_productivity_settings(user_id=user_id)


@router.put("/profile/productivity-settings")
async def update_productivity_settings(payload: ProductivitySettings, user_id: CurrentUserId) -> ProductivitySettings:
    return await profile_service.update_productivity_settings(user_id=user_id, productivity=payload)
