"""Groups router: create and join."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from church_social.auth.dependencies import get_current_user, require_roles
from church_social.database import get_db
from church_social.errors import bad_request, not_found
from church_social.models.group import Group, GroupMember, GroupMembershipRequest
from church_social.models.user import APIKey, User
from church_social.realtime.dependencies import get_gateway
from church_social.realtime.gateway import Gateway
from church_social.schemas.groups import (
    CreateGroupRequest,
    GroupResponse,
    JoinGroupRequest,
    JoinGroupResponse,
)
from church_social.services.fanout import NotificationDraft, SingleRecipient, fan_out

router = APIRouter(prefix="/api/v1/groups", tags=["Groups"])

require_group_creator = require_roles(
    {"admin", "pastor"}, "Only admins and pastors can create groups"
)


@router.post(
    "",
    response_model=GroupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_group(
    data: CreateGroupRequest,
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(require_group_creator),
) -> GroupResponse:
    """Create a group led by the caller."""
    user, _ = auth

    group = Group(
        name=data.name,
        description=data.description,
        leader_id=user.id,
        requires_approval=data.requires_approval,
    )
    db.add(group)
    await db.flush()
    db.add(GroupMember(group_id=group.id, user_id=user.id, role="leader"))
    await db.commit()

    return GroupResponse.from_model(group)


@router.post(
    "/{group_id}/join",
    response_model=JoinGroupResponse,
    status_code=status.HTTP_200_OK,
)
async def join_group(
    group_id: UUID,
    data: JoinGroupRequest | None = None,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> JoinGroupResponse:
    """
    Join a group.

    Groups that require approval store a membership request and notify the
    leader instead of adding the caller directly.
    """
    user, _ = auth
    actor_id, actor_name = user.id, user.full_name

    group = await db.get(Group, group_id)
    if not group:
        raise not_found(f"Group '{group_id}' not found")
    leader_id, group_name = group.leader_id, group.name

    if await db.get(GroupMember, (group_id, actor_id)):
        raise bad_request("Already a member of this group")

    if not group.requires_approval:
        db.add(GroupMember(group_id=group_id, user_id=actor_id, role="member"))
        await db.commit()
        return JoinGroupResponse(group_id=str(group_id), status="joined")

    result = await db.execute(
        select(GroupMembershipRequest).where(
            GroupMembershipRequest.group_id == group_id,
            GroupMembershipRequest.user_id == actor_id,
        )
    )
    if result.scalar_one_or_none() is None:
        db.add(
            GroupMembershipRequest(
                group_id=group_id,
                user_id=actor_id,
                message=data.message if data else None,
            )
        )
        await db.commit()

    await fan_out(
        db,
        gateway,
        actor_id=actor_id,
        rule=SingleRecipient(leader_id),
        draft=NotificationDraft(
            type="group-request",
            title="New Group Join Request",
            message=f"{actor_name} requested to join {group_name}",
            link="/groups",
            related_group_id=group_id,
        ),
    )

    return JoinGroupResponse(group_id=str(group_id), status="pending")
