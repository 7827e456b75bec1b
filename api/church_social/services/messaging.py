"""
Message delivery.

A sent message reaches people over two independent channels:

- the conversation room (``new-message``), for sockets that joined it;
- the personal notification channel (``new-notification``), via a fan-out
  to every other participant, with a durable inbox row each.

A client that is missing either subscription silently misses that half.
``deliver_message`` is the one place both channels are triggered from.
"""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from church_social.config import settings
from church_social.realtime import events
from church_social.realtime.gateway import Gateway
from church_social.services.fanout import (
    ConversationParticipants,
    FanoutResult,
    NotificationDraft,
    fan_out,
    preview,
)

logger = logging.getLogger(__name__)


@dataclass
class MessageDelivery:
    room_deliveries: int
    notifications: FanoutResult


async def emit_room_message(
    gateway: Gateway, conversation_id: UUID, message_payload: dict[str, Any]
) -> int:
    """Send ``new-message`` to every socket joined to the conversation room."""
    return await gateway.emit_to_group(conversation_id, events.NEW_MESSAGE, message_payload)


async def notify_message_recipients(
    db: AsyncSession,
    gateway: Gateway,
    *,
    sender_id: UUID,
    sender_name: str,
    conversation_id: UUID,
    content: str,
) -> FanoutResult:
    """Fan out a ``message`` notification to the other participants."""
    draft = NotificationDraft(
        type="message",
        title="New Message",
        message=f"{sender_name}: {preview(content, settings.notification_preview_length)}",
        live_message=f"{sender_name} sent you a message",
        link="/messages",
    )
    return await fan_out(
        db,
        gateway,
        actor_id=sender_id,
        rule=ConversationParticipants(conversation_id),
        draft=draft,
    )


async def deliver_message(
    db: AsyncSession,
    gateway: Gateway,
    *,
    sender_id: UUID,
    sender_name: str,
    conversation_id: UUID,
    content: str,
    message_payload: dict[str, Any],
) -> MessageDelivery:
    """Deliver a persisted message over the room and notification channels."""
    room_deliveries = await emit_room_message(gateway, conversation_id, message_payload)
    notifications = await notify_message_recipients(
        db,
        gateway,
        sender_id=sender_id,
        sender_name=sender_name,
        conversation_id=conversation_id,
        content=content,
    )
    logger.debug(
        "Message in %s delivered to %d room socket(s)", conversation_id, room_deliveries
    )
    return MessageDelivery(room_deliveries=room_deliveries, notifications=notifications)
