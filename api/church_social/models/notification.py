"""Notification model for the per-user inbox."""

import uuid
from typing import Literal, get_args

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

from church_social.database import Base, utcnow

NotificationType = Literal[
    "like",
    "comment",
    "share",
    "event-invite",
    "event-reminder",
    "group-invite",
    "group-request",
    "prayer-response",
    "message",
    "announcement",
    "mention",
]
NOTIFICATION_TYPES: tuple[str, ...] = get_args(NotificationType)


class Notification(Base):
    """
    Durable notification record, one row per recipient.

    Rows are only ever updated to flip the read flag. The related_* columns
    are plain references so that deleting the related entity leaves the
    inbox intact.
    """

    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    recipient_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"))
    type = Column(
        Enum(*NOTIFICATION_TYPES, name="notification_type", native_enum=False),
        nullable=False,
    )
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    link = Column(Text)
    related_post_id = Column(Uuid)
    related_event_id = Column(Uuid)
    related_group_id = Column(Uuid)
    related_prayer_id = Column(Uuid)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    __table_args__ = (
        Index("idx_notifications_recipient", recipient_id, created_at.desc()),
        Index("idx_notifications_unread", recipient_id, is_read),
    )
