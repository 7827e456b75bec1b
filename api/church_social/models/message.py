"""Direct messaging models."""

import uuid

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    Column,
    Enum,
    ForeignKey,
    Index,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from church_social.database import Base, utcnow

MESSAGE_TYPES = ("text", "image", "video", "file")


class Conversation(Base):
    """One-to-one or group conversation."""

    __tablename__ = "conversations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    is_group = Column(Boolean, nullable=False, default=False)
    group_name = Column(Text)
    admin_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"))
    # Not a foreign key: messages already reference conversations
    last_message_id = Column(Uuid)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    participants = relationship(
        "ConversationParticipant",
        back_populates="conversation",
        cascade="all, delete-orphan",
    )

    @property
    def participant_ids(self) -> list[uuid.UUID]:
        return [p.user_id for p in self.participants]


class ConversationParticipant(Base):
    """Persisted membership of a user in a conversation."""

    __tablename__ = "conversation_participants"

    conversation_id = Column(
        Uuid,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    joined_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    __table_args__ = (Index("idx_conversation_participants_user", user_id),)

    conversation = relationship("Conversation", back_populates="participants")


class Message(Base):
    """Message sent in a conversation."""

    __tablename__ = "messages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    conversation_id = Column(
        Uuid,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    message_type = Column(
        Enum(*MESSAGE_TYPES, name="message_type", native_enum=False),
        nullable=False,
        default="text",
    )
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    __table_args__ = (Index("idx_messages_conversation", conversation_id, created_at),)

    sender = relationship("User", foreign_keys=[sender_id])
