"""Pydantic schemas for request/response validation."""

from church_social.schemas.messages import MessageResponse, SendMessageRequest
from church_social.schemas.notifications import (
    InboxSummaryResponse,
    ListNotificationsResponse,
    NotificationItem,
)
from church_social.schemas.posts import (
    AuthorSummary,
    CommentRequest,
    CommentResponse,
    CreatePostRequest,
    PostResponse,
)

__all__ = [
    "AuthorSummary",
    "CreatePostRequest",
    "PostResponse",
    "CommentRequest",
    "CommentResponse",
    "SendMessageRequest",
    "MessageResponse",
    "NotificationItem",
    "ListNotificationsResponse",
    "InboxSummaryResponse",
]
