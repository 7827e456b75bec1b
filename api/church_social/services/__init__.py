"""Services for the Church Social API."""

from church_social.services.fanout import (
    AllOtherUsers,
    ConversationParticipants,
    FanoutResult,
    NotificationDraft,
    SingleRecipient,
    fan_out,
)
from church_social.services.messaging import MessageDelivery, deliver_message

__all__ = [
    "AllOtherUsers",
    "ConversationParticipants",
    "SingleRecipient",
    "NotificationDraft",
    "FanoutResult",
    "fan_out",
    "MessageDelivery",
    "deliver_message",
]
