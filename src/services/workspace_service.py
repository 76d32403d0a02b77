"""Workspace service: shared spaces a user owns or belongs to."""

import logging

from src.core import db_client
from src.core.logging import log_with_user_context, span
from src.domain.create_models import WorkspaceCreate
from src.domain.update_models import WorkspaceUpdate
from src.domain.workspace import Workspace, WorkspaceMember, WorkspaceRole
from src.models.service_models import WorkspaceMemberView


logger = logging.getLogger(__name__)

COLLECTION = "workspaces"
MEMBERS_COLLECTION = "workspace_members"
UNKNOWN_USERNAME = "Unknown User"


async def _get_owned_workspace(*, user_id: str, workspace_id: str) -> Workspace:
    workspace = Workspace(**await db_client.get_record(collection=COLLECTION, record_id=workspace_id))
    if workspace.created_by != user_id:
        msg = f"Workspace {workspace_id} does not belong to user {user_id}"
        raise PermissionError(msg)
    return workspace


async def create_workspace(*, user_id: str, workspace: WorkspaceCreate) -> Workspace:
    """Create a workspace and enrol its creator as owner."""
    with span("workspace_service.create_workspace"):
        record = await db_client.create_record(
            collection=COLLECTION,
            data={"name": workspace.name, "description": workspace.description, "created_by": user_id},
        )
        await db_client.create_record(
            collection=MEMBERS_COLLECTION,
            data={"workspace_id": record["id"], "user_id": user_id, "role": str(WorkspaceRole.OWNER)},
        )
        log_with_user_context(logger, "info", "Workspace created", user_id=user_id, workspace_id=record["id"])
        return Workspace(**record)


async def list_workspaces(*, user_id: str) -> list[Workspace]:
    """List workspaces the user created or is a member of, newest first, without duplicates."""
    with span("workspace_service.list_workspaces"):
        safe_user_id = db_client.sanitize_param(user_id)
        owned = await db_client.list_all_records(
            collection=COLLECTION,
            filter_query=f'created_by = "{safe_user_id}"',
            sort="-created",
        )
        memberships = await db_client.list_all_records(
            collection=MEMBERS_COLLECTION,
            filter_query=f'user_id = "{safe_user_id}"',
            expand="workspace_id",
        )
        member_of = [
            expanded
            for membership in memberships
            if (expanded := (membership.get("expand") or {}).get("workspace_id"))
        ]

        unique: dict[str, Workspace] = {}
        for record in [*owned, *member_of]:
            unique.setdefault(record["id"], Workspace(**record))

        return sorted(
            unique.values(),
            key=lambda w: w.created.timestamp() if w.created else 0.0,
            reverse=True,
        )


async def update_workspace(*, user_id: str, workspace_id: str, update: WorkspaceUpdate) -> Workspace:
    """Rename or re-describe a workspace. Only the creator may do this."""
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        msg = "Empty update payload"
        raise ValueError(msg)

    with span("workspace_service.update_workspace"):
        await _get_owned_workspace(user_id=user_id, workspace_id=workspace_id)
        record = await db_client.update_record(collection=COLLECTION, record_id=workspace_id, data=changes)
        return Workspace(**record)


async def delete_workspace(*, user_id: str, workspace_id: str) -> None:
    """Delete a workspace and its memberships. Only the creator may do this."""
    with span("workspace_service.delete_workspace"):
        await _get_owned_workspace(user_id=user_id, workspace_id=workspace_id)

        memberships = await db_client.list_all_records(
            collection=MEMBERS_COLLECTION,
            filter_query=f'workspace_id = "{db_client.sanitize_param(workspace_id)}"',
        )
        for membership in memberships:
            await db_client.delete_record(collection=MEMBERS_COLLECTION, record_id=membership["id"])

        await db_client.delete_record(collection=COLLECTION, record_id=workspace_id)
        log_with_user_context(logger, "info", "Workspace deleted", user_id=user_id, workspace_id=workspace_id)


async def list_members(*, user_id: str, workspace_id: str) -> list[WorkspaceMemberView]:
    """List a workspace's members with usernames resolved.

    Raises:
        PermissionError: If the requesting user neither owns nor belongs to the workspace
    """
    with span("workspace_service.list_members"):
        workspace = Workspace(**await db_client.get_record(collection=COLLECTION, record_id=workspace_id))
        memberships = await db_client.list_all_records(
            collection=MEMBERS_COLLECTION,
            filter_query=f'workspace_id = "{db_client.sanitize_param(workspace_id)}"',
            expand="user_id",
        )

        if workspace.created_by != user_id and all(m.get("user_id") != user_id for m in memberships):
            msg = f"User {user_id} is not a member of workspace {workspace_id}"
            raise PermissionError(msg)

        members = []
        for membership in memberships:
            profile = (membership.get("expand") or {}).get("user_id") or {}
            member = WorkspaceMember(**{**membership, "role": membership.get("role") or WorkspaceRole.MEMBER})
            members.append(
                WorkspaceMemberView(
                    user_id=member.user_id,
                    role=str(member.role),
                    username=profile.get("username") or UNKNOWN_USERNAME,
                )
            )
        return members
