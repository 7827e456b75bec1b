"""Notification inbox Pydantic schemas."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from church_social.models.notification import Notification


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def _str(value) -> str | None:
    return str(value) if value else None


class NotificationItem(BaseModel):
    """Single notification as exposed to the web client (camelCase keys)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    recipient: str
    sender: str | None
    type: str
    title: str
    message: str
    link: str | None
    related_post: str | None
    related_event: str | None
    related_group: str | None
    related_prayer: str | None
    is_read: bool
    read_at: str | None
    created_at: str

    @classmethod
    def from_model(cls, n: Notification) -> "NotificationItem":
        return cls(
            id=str(n.id),
            recipient=str(n.recipient_id),
            sender=_str(n.sender_id),
            type=n.type,
            title=n.title,
            message=n.message,
            link=n.link,
            related_post=_str(n.related_post_id),
            related_event=_str(n.related_event_id),
            related_group=_str(n.related_group_id),
            related_prayer=_str(n.related_prayer_id),
            is_read=bool(n.is_read),
            read_at=_iso(n.read_at),
            created_at=_iso(n.created_at),
        )


class ListNotificationsResponse(BaseModel):
    """Response for listing notifications."""

    items: list[NotificationItem]
    unread_count: int
    next_cursor: str | None
    has_more: bool


class InboxSummaryResponse(BaseModel):
    """Unread and total notification counts."""

    unread_count: int
    total_count: int


class MarkAllReadResponse(BaseModel):
    """Response for marking all notifications as read."""

    marked_count: int
