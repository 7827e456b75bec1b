"""Direct messaging Pydantic schemas."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, field_validator

from church_social.models.message import Conversation, Message
from church_social.models.user import User
from church_social.schemas.posts import AuthorSummary


class CreateConversationRequest(BaseModel):
    """Start a conversation. The caller is added automatically."""

    participant_ids: list[UUID]
    is_group: bool = False
    group_name: str | None = None

    @field_validator("participant_ids")
    @classmethod
    def validate_participants(cls, v: list[UUID]) -> list[UUID]:
        if not v:
            raise ValueError("At least one participant is required")
        # Preserve order, drop duplicates
        return list(dict.fromkeys(v))


class ConversationResponse(BaseModel):
    id: str
    is_group: bool
    group_name: str | None
    participant_ids: list[str]
    last_message_id: str | None
    created_at: str
    updated_at: str

    @classmethod
    def from_model(cls, conversation: Conversation) -> "ConversationResponse":
        return cls(
            id=str(conversation.id),
            is_group=conversation.is_group,
            group_name=conversation.group_name,
            participant_ids=[str(uid) for uid in conversation.participant_ids],
            last_message_id=(
                str(conversation.last_message_id) if conversation.last_message_id else None
            ),
            created_at=conversation.created_at.isoformat(),
            updated_at=conversation.updated_at.isoformat(),
        )


class ListConversationsResponse(BaseModel):
    items: list[ConversationResponse]


class SendMessageRequest(BaseModel):
    """Request to send a message."""

    conversation_id: UUID
    content: str
    message_type: Literal["text", "image", "video", "file"] = "text"

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Validate content length."""
        if not v.strip():
            raise ValueError("Message content is required")
        if len(v) > 5000:
            raise ValueError("Message must be 5000 characters or less")
        return v


class MessageResponse(BaseModel):
    """Message as returned by the API and the ``new-message`` event."""

    id: str
    conversation_id: str
    sender: AuthorSummary
    content: str
    message_type: str
    is_read: bool
    created_at: str

    @classmethod
    def from_model(cls, message: Message, sender: User) -> "MessageResponse":
        return cls(
            id=str(message.id),
            conversation_id=str(message.conversation_id),
            sender=AuthorSummary.from_user(sender),
            content=message.content,
            message_type=message.message_type,
            is_read=bool(message.is_read),
            created_at=message.created_at.isoformat(),
        )


class ListMessagesResponse(BaseModel):
    """A page of messages, oldest first."""

    items: list[MessageResponse]
    next_cursor: str | None
    has_more: bool


class MarkMessagesReadResponse(BaseModel):
    marked_count: int


class RoomMembershipRequest(BaseModel):
    """Socket id to add to or remove from a conversation room."""

    sid: str


class RoomMembershipResponse(BaseModel):
    conversation_id: str
    sid: str
    joined: bool
