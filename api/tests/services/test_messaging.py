"""Tests for two-channel message delivery."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from church_social.models.message import Conversation, ConversationParticipant
from church_social.models.notification import Notification
from church_social.realtime import events
from church_social.services.messaging import deliver_message


async def _conversation(db: AsyncSession, *users: dict) -> Conversation:
    conversation = Conversation(
        participants=[ConversationParticipant(user_id=UUID(u["user_id"])) for u in users]
    )
    db.add(conversation)
    await db.commit()
    return conversation


class TestDeliverMessage:
    async def test_room_and_notification_channels(
        self, db_session: AsyncSession, gateway, socket_server, test_user, second_user, go_online
    ):
        conversation = await _conversation(db_session, test_user, second_user)
        await go_online(test_user, "s1")
        await go_online(second_user, "s2")
        gateway.join_group("s1", conversation.id)
        gateway.join_group("s2", conversation.id)

        delivery = await deliver_message(
            db_session,
            gateway,
            sender_id=UUID(test_user["user_id"]),
            sender_name="Mary Member",
            conversation_id=conversation.id,
            content="See you Sunday",
            message_payload={"id": "m1", "content": "See you Sunday"},
        )

        assert delivery.room_deliveries == 2
        assert {e.to for e in socket_server.sent(events.NEW_MESSAGE)} == {"s1", "s2"}

        [note] = socket_server.sent(events.NEW_NOTIFICATION)
        assert note.to == "s2"
        assert note.data["type"] == "message"
        assert note.data["message"] == "Mary Member sent you a message"
        assert note.data["link"] == "/messages"

        result = await db_session.execute(select(Notification))
        [row] = result.scalars().all()
        assert str(row.recipient_id) == second_user["user_id"]
        assert row.title == "New Message"
        assert row.message == "Mary Member: See you Sunday"

    async def test_recipient_outside_room_still_notified(
        self, db_session: AsyncSession, gateway, socket_server, test_user, second_user, go_online
    ):
        """A recipient who has not joined the room only gets the notification."""
        conversation = await _conversation(db_session, test_user, second_user)
        await go_online(second_user, "s2")

        delivery = await deliver_message(
            db_session,
            gateway,
            sender_id=UUID(test_user["user_id"]),
            sender_name="Mary Member",
            conversation_id=conversation.id,
            content="Hello",
            message_payload={"id": "m1"},
        )

        assert delivery.room_deliveries == 0
        assert socket_server.sent(events.NEW_MESSAGE) == []
        assert len(socket_server.sent(events.NEW_NOTIFICATION, to="s2")) == 1
        assert delivery.notifications.persisted == 1

    async def test_long_message_preview_is_truncated(
        self, db_session: AsyncSession, gateway, test_user, second_user
    ):
        conversation = await _conversation(db_session, test_user, second_user)

        await deliver_message(
            db_session,
            gateway,
            sender_id=UUID(test_user["user_id"]),
            sender_name="Mary Member",
            conversation_id=conversation.id,
            content="a" * 80,
            message_payload={},
        )

        result = await db_session.execute(select(Notification.message))
        assert result.scalar_one() == "Mary Member: " + "a" * 50 + "..."
