"""Database models for the Church Social API."""

from church_social.models.event import Event, EventAttendee
from church_social.models.group import Group, GroupMember, GroupMembershipRequest
from church_social.models.message import Conversation, ConversationParticipant, Message
from church_social.models.notification import NOTIFICATION_TYPES, Notification
from church_social.models.post import Comment, Post, PostLike, PostShare
from church_social.models.sermon import Sermon
from church_social.models.user import APIKey, User

__all__ = [
    "User",
    "APIKey",
    "Post",
    "PostLike",
    "PostShare",
    "Comment",
    "Event",
    "EventAttendee",
    "Group",
    "GroupMember",
    "GroupMembershipRequest",
    "Sermon",
    "Conversation",
    "ConversationParticipant",
    "Message",
    "Notification",
    "NOTIFICATION_TYPES",
]
