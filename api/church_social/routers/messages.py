"""Direct messaging router."""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from church_social.auth.dependencies import get_current_user
from church_social.config import settings
from church_social.database import get_db, utcnow
from church_social.errors import bad_request, forbidden, not_found
from church_social.middleware.rate_limit import limiter
from church_social.models.message import Conversation, ConversationParticipant, Message
from church_social.models.user import APIKey, User
from church_social.realtime.dependencies import get_gateway
from church_social.realtime.gateway import ConnectionState, Gateway
from church_social.schemas.messages import (
    ConversationResponse,
    CreateConversationRequest,
    ListConversationsResponse,
    ListMessagesResponse,
    MarkMessagesReadResponse,
    MessageResponse,
    RoomMembershipRequest,
    RoomMembershipResponse,
    SendMessageRequest,
)
from church_social.services.messaging import deliver_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/messages", tags=["Messages"])


async def _get_conversation_for_participant(
    db: AsyncSession, conversation_id: UUID, user: User
) -> Conversation:
    """Load a conversation, raising 404 if missing and 403 for non-participants."""
    result = await db.execute(
        select(Conversation)
        .options(selectinload(Conversation.participants))
        .where(Conversation.id == conversation_id)
    )
    conversation = result.scalar_one_or_none()
    if not conversation:
        raise not_found(f"Conversation '{conversation_id}' not found")
    if user.id not in conversation.participant_ids:
        raise forbidden("Not a participant in this conversation")
    return conversation


async def _find_direct_conversation(
    db: AsyncSession, user_id: UUID, other_id: UUID
) -> Conversation | None:
    result = await db.execute(
        select(Conversation)
        .options(selectinload(Conversation.participants))
        .join(ConversationParticipant)
        .where(
            ConversationParticipant.user_id == user_id,
            Conversation.is_group.is_(False),
        )
    )
    for conversation in result.scalars().unique():
        if set(conversation.participant_ids) == {user_id, other_id}:
            return conversation
    return None


def _socket_is_live(gateway: Gateway, sid: str, user: User) -> bool:
    """
    Check that a socket may be moved between rooms by this user.

    Returns False for sockets that are not connected and raises 403 for a
    socket registered to someone else or not registered at all.
    """
    if gateway.state_of(sid) == ConnectionState.DISCONNECTED:
        return False
    if gateway.user_for(sid) != str(user.id):
        raise forbidden(f"Socket '{sid}' does not belong to the current user")
    return True


# --- Conversations ---


@router.get(
    "/conversations",
    response_model=ListConversationsResponse,
    status_code=status.HTTP_200_OK,
)
async def list_conversations(
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> ListConversationsResponse:
    """List the caller's conversations, most recently active first."""
    user, _ = auth

    result = await db.execute(
        select(Conversation)
        .options(selectinload(Conversation.participants))
        .join(ConversationParticipant)
        .where(ConversationParticipant.user_id == user.id)
        .order_by(Conversation.updated_at.desc())
    )

    return ListConversationsResponse(
        items=[ConversationResponse.from_model(c) for c in result.scalars().unique()]
    )


@router.post(
    "/conversations",
    response_model=ConversationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_conversation(
    data: CreateConversationRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> ConversationResponse:
    """
    Start a conversation with the given users.

    An existing one-to-one conversation between the same two users is
    returned with 200 instead of creating a duplicate.
    """
    user, _ = auth

    others = [uid for uid in data.participant_ids if uid != user.id]
    if not others:
        raise bad_request("Cannot start a conversation with yourself")

    result = await db.execute(select(User.id).where(User.id.in_(others)))
    found = set(result.scalars().all())
    missing = [str(uid) for uid in others if uid not in found]
    if missing:
        raise not_found(f"User '{missing[0]}' not found")

    if not data.is_group and len(others) == 1:
        existing = await _find_direct_conversation(db, user.id, others[0])
        if existing:
            response.status_code = status.HTTP_200_OK
            return ConversationResponse.from_model(existing)

    conversation = Conversation(
        is_group=data.is_group,
        group_name=data.group_name,
        admin_id=user.id if data.is_group else None,
        participants=[
            ConversationParticipant(user_id=uid) for uid in [user.id, *others]
        ],
    )
    db.add(conversation)
    await db.commit()

    return ConversationResponse.from_model(conversation)


@router.get(
    "/conversations/{conversation_id}",
    response_model=ConversationResponse,
    status_code=status.HTTP_200_OK,
)
async def get_conversation(
    conversation_id: UUID,
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> ConversationResponse:
    user, _ = auth
    conversation = await _get_conversation_for_participant(db, conversation_id, user)
    return ConversationResponse.from_model(conversation)


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=ListMessagesResponse,
    status_code=status.HTTP_200_OK,
)
async def list_messages(
    conversation_id: UUID,
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(get_current_user),
    cursor: str | None = Query(default=None, description="Pagination cursor"),
    limit: int = Query(default=50, ge=1, le=100, description="Items per page"),
) -> ListMessagesResponse:
    """
    Page through a conversation's messages.

    Each page is returned oldest first; ``next_cursor`` fetches the page of
    older messages before it.
    """
    user, _ = auth
    await _get_conversation_for_participant(db, conversation_id, user)

    query = (
        select(Message)
        .options(selectinload(Message.sender))
        .where(Message.conversation_id == conversation_id)
    )

    if cursor:
        try:
            query = query.where(Message.created_at < datetime.fromisoformat(cursor))
        except ValueError:
            pass  # Invalid cursor, ignore

    query = query.order_by(Message.created_at.desc()).limit(limit + 1)

    result = await db.execute(query)
    messages = list(result.scalars().all())

    has_more = len(messages) > limit
    if has_more:
        messages = messages[:limit]

    next_cursor = messages[-1].created_at.isoformat() if messages and has_more else None
    messages.reverse()

    return ListMessagesResponse(
        items=[MessageResponse.from_model(m, m.sender) for m in messages],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.put(
    "/conversations/{conversation_id}/read",
    response_model=MarkMessagesReadResponse,
    status_code=status.HTTP_200_OK,
)
async def mark_conversation_read(
    conversation_id: UUID,
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> MarkMessagesReadResponse:
    """Mark every message from the other participants as read."""
    user, _ = auth
    await _get_conversation_for_participant(db, conversation_id, user)

    result = await db.execute(
        update(Message)
        .where(
            Message.conversation_id == conversation_id,
            Message.sender_id != user.id,
            Message.is_read.is_(False),
        )
        .values(is_read=True)
    )
    await db.commit()

    return MarkMessagesReadResponse(marked_count=result.rowcount or 0)


# --- Room membership ---


@router.post(
    "/conversations/{conversation_id}/join",
    response_model=RoomMembershipResponse,
    status_code=status.HTTP_200_OK,
)
async def join_conversation_room(
    conversation_id: UUID,
    data: RoomMembershipRequest,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> RoomMembershipResponse:
    """Add a socket to the conversation room after checking participation."""
    user, _ = auth
    await _get_conversation_for_participant(db, conversation_id, user)

    joined = _socket_is_live(gateway, data.sid, user) and gateway.join_group(
        data.sid, conversation_id
    )
    if not joined:
        logger.info("Socket %s is not connected; room join skipped", data.sid)

    return RoomMembershipResponse(
        conversation_id=str(conversation_id), sid=data.sid, joined=joined
    )


@router.post(
    "/conversations/{conversation_id}/leave",
    response_model=RoomMembershipResponse,
    status_code=status.HTTP_200_OK,
)
async def leave_conversation_room(
    conversation_id: UUID,
    data: RoomMembershipRequest,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> RoomMembershipResponse:
    user, _ = auth
    await _get_conversation_for_participant(db, conversation_id, user)

    if _socket_is_live(gateway, data.sid, user):
        gateway.leave_group(data.sid, conversation_id)

    return RoomMembershipResponse(
        conversation_id=str(conversation_id), sid=data.sid, joined=False
    )


# --- Send ---


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.message_send_rate_limit)
async def send_message(
    request: Request,
    data: SendMessageRequest,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> MessageResponse:
    """
    Send a message to a conversation.

    The message is committed first, then delivered to the conversation room
    as ``new-message`` and to the other participants as a ``message``
    notification.
    """
    user, _ = auth
    sender_id, sender_name = user.id, user.full_name

    conversation = await _get_conversation_for_participant(db, data.conversation_id, user)

    message = Message(
        conversation_id=conversation.id,
        sender_id=sender_id,
        content=data.content,
        message_type=data.message_type,
    )
    db.add(message)
    await db.flush()

    conversation.last_message_id = message.id
    conversation.updated_at = utcnow()
    await db.commit()

    response = MessageResponse.from_model(message, user)

    await deliver_message(
        db,
        gateway,
        sender_id=sender_id,
        sender_name=sender_name,
        conversation_id=data.conversation_id,
        content=data.content,
        message_payload=response.model_dump(mode="json"),
    )

    return response
