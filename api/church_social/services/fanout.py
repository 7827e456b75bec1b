"""
Notification fan-out.

Called by routers after a triggering write has been committed. A fan-out:

1. resolves the recipient set from a recipient rule,
2. writes one Notification row per recipient in a single bulk insert,
3. pushes a ``new-notification`` live event to each recipient.

The fan-out is not transactional with the triggering write and never fails
the request that caused it: a failed insert is rolled back, logged and
reported in the returned ``FanoutResult``. The live push is attempted
whether or not the insert succeeded.
"""

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from church_social.models.message import ConversationParticipant
from church_social.models.notification import Notification, NotificationType
from church_social.models.user import User
from church_social.realtime import events
from church_social.realtime.gateway import Gateway

logger = logging.getLogger(__name__)


# --- Recipient rules ---


@dataclass(frozen=True)
class SingleRecipient:
    """Notify one user, unless that user is the actor."""

    user_id: UUID


@dataclass(frozen=True)
class AllOtherUsers:
    """Notify every user except the actor.

    ``active_only`` restricts the set to accounts that have not been
    deactivated. Call sites choose the policy.
    """

    active_only: bool = False


@dataclass(frozen=True)
class ConversationParticipants:
    """Notify every participant of a conversation except the actor."""

    conversation_id: UUID


RecipientRule = SingleRecipient | AllOtherUsers | ConversationParticipants


@dataclass(frozen=True)
class NotificationDraft:
    """Content shared by every notification of one fan-out."""

    type: NotificationType
    title: str
    message: str
    link: str | None = None
    # Shorter text for the live toast; falls back to ``message``
    live_message: str | None = None
    related_post_id: UUID | None = None
    related_event_id: UUID | None = None
    related_group_id: UUID | None = None
    related_prayer_id: UUID | None = None

    def row_for(self, recipient_id: UUID, sender_id: UUID | None) -> dict[str, Any]:
        return {
            "recipient_id": recipient_id,
            "sender_id": sender_id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "link": self.link,
            "related_post_id": self.related_post_id,
            "related_event_id": self.related_event_id,
            "related_group_id": self.related_group_id,
            "related_prayer_id": self.related_prayer_id,
        }

    def live_payload(self, sender_id: UUID | None) -> dict[str, Any]:
        def _str(value: UUID | None) -> str | None:
            return str(value) if value else None

        return {
            "type": self.type,
            "title": self.title,
            "message": self.live_message or self.message,
            "link": self.link,
            "senderId": _str(sender_id),
            "relatedPost": _str(self.related_post_id),
            "relatedEvent": _str(self.related_event_id),
            "relatedGroup": _str(self.related_group_id),
            "relatedPrayer": _str(self.related_prayer_id),
        }


@dataclass
class FanoutResult:
    """Outcome of one fan-out. Logged by the service, never raised."""

    recipients: list[UUID] = field(default_factory=list)
    persisted: int = 0
    delivered: int = 0
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def preview(text: str, length: int = 50) -> str:
    """Truncate text for quoting inside a notification message."""
    if len(text) <= length:
        return text
    return f"{text[:length]}..."


# --- Steps ---


async def resolve_recipients(
    db: AsyncSession, actor_id: UUID, rule: RecipientRule
) -> list[UUID]:
    """Compute the recipient set for a rule. The actor is always excluded."""
    if isinstance(rule, SingleRecipient):
        return [] if rule.user_id == actor_id else [rule.user_id]

    if isinstance(rule, AllOtherUsers):
        query = select(User.id).where(User.id != actor_id)
        if rule.active_only:
            query = query.where(User.is_active.is_(True))
        result = await db.execute(query.order_by(User.created_at))
        return list(result.scalars().all())

    if isinstance(rule, ConversationParticipants):
        result = await db.execute(
            select(ConversationParticipant.user_id)
            .where(
                ConversationParticipant.conversation_id == rule.conversation_id,
                ConversationParticipant.user_id != actor_id,
            )
            .order_by(ConversationParticipant.joined_at)
        )
        return list(result.scalars().all())

    raise TypeError(f"Unknown recipient rule: {rule!r}")


async def persist_notifications_best_effort(
    db: AsyncSession,
    sender_id: UUID | None,
    recipients: list[UUID],
    draft: NotificationDraft,
) -> tuple[int, SQLAlchemyError | None]:
    """
    Bulk insert one notification per recipient and commit.

    Database errors are rolled back and returned instead of raised: the
    triggering write has already been committed and must still succeed.
    """
    if not recipients:
        return 0, None

    rows = [draft.row_for(recipient_id, sender_id) for recipient_id in recipients]
    try:
        await db.execute(insert(Notification), rows)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception(
            "Failed to persist %d %s notification(s); continuing without them",
            len(rows),
            draft.type,
        )
        return 0, exc
    return len(rows), None


async def push_live_notifications(
    gateway: Gateway,
    sender_id: UUID | None,
    recipients: list[UUID],
    draft: NotificationDraft,
) -> int:
    """Emit ``new-notification`` to each recipient. Returns deliveries made."""
    payload = draft.live_payload(sender_id)
    delivered = 0
    for recipient_id in recipients:
        if await gateway.emit_to_user(recipient_id, events.NEW_NOTIFICATION, payload):
            delivered += 1
    return delivered


async def fan_out(
    db: AsyncSession,
    gateway: Gateway,
    *,
    actor_id: UUID,
    rule: RecipientRule,
    draft: NotificationDraft,
) -> FanoutResult:
    """Resolve, persist and push one notification fan-out."""
    result = FanoutResult()
    try:
        result.recipients = await resolve_recipients(db, actor_id, rule)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Failed to resolve recipients for %s notification", draft.type)
        result.error = exc
        return result

    result.persisted, result.error = await persist_notifications_best_effort(
        db, actor_id, result.recipients, draft
    )
    result.delivered = await push_live_notifications(
        gateway, actor_id, result.recipients, draft
    )

    logger.info(
        "Fan-out %s by %s: %d recipient(s), %d persisted, %d delivered live",
        draft.type,
        actor_id,
        len(result.recipients),
        result.persisted,
        result.delivered,
    )
    return result
