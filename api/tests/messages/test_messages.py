"""
Tests for messaging endpoints:
- GET/POST /api/v1/messages/conversations
- GET /api/v1/messages/conversations/{id}
- GET /api/v1/messages/conversations/{id}/messages
- POST /api/v1/messages
- PUT /api/v1/messages/conversations/{id}/read
- POST /api/v1/messages/conversations/{id}/join and /leave
"""

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from church_social.models.message import Conversation, Message
from church_social.models.notification import Notification
from church_social.realtime import events


async def _start(client: AsyncClient, user: dict, other: dict, auth_headers):
    return await client.post(
        "/api/v1/messages/conversations",
        json={"participant_ids": [other["user_id"]]},
        headers=auth_headers(user["api_key"]),
    )


async def _send(client: AsyncClient, user: dict, conversation_id: str, auth_headers, content="Hi!"):
    return await client.post(
        "/api/v1/messages",
        json={"conversation_id": conversation_id, "content": content},
        headers=auth_headers(user["api_key"]),
    )


class TestConversations:
    async def test_create_conversation_returns_201(
        self, async_client: AsyncClient, test_user: dict, second_user: dict, auth_headers
    ):
        response = await _start(async_client, test_user, second_user, auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert set(data["participant_ids"]) == {test_user["user_id"], second_user["user_id"]}
        assert data["is_group"] is False

    async def test_existing_direct_conversation_is_reused(
        self, async_client: AsyncClient, db_session: AsyncSession, test_user: dict, second_user: dict, auth_headers
    ):
        first = await _start(async_client, test_user, second_user, auth_headers)
        again = await _start(async_client, second_user, test_user, auth_headers)

        assert again.status_code == 200
        assert again.json()["id"] == first.json()["id"]
        result = await db_session.execute(select(Conversation))
        assert len(result.scalars().all()) == 1

    async def test_conversation_with_self_rejected(
        self, async_client: AsyncClient, test_user: dict, auth_headers
    ):
        response = await _start(async_client, test_user, test_user, auth_headers)
        assert response.status_code == 400

    async def test_unknown_participant_returns_404(
        self, async_client: AsyncClient, test_user: dict, auth_headers
    ):
        response = await _start(
            async_client,
            test_user,
            {"user_id": "00000000-0000-0000-0000-000000000000"},
            auth_headers,
        )
        assert response.status_code == 404

    async def test_list_only_own_conversations(
        self, async_client: AsyncClient, test_user: dict, second_user: dict, make_user, auth_headers
    ):
        outsider = await make_user("Olive")
        await _start(async_client, test_user, second_user, auth_headers)

        mine = await async_client.get(
            "/api/v1/messages/conversations", headers=auth_headers(test_user["api_key"])
        )
        theirs = await async_client.get(
            "/api/v1/messages/conversations", headers=auth_headers(outsider["api_key"])
        )

        assert len(mine.json()["items"]) == 1
        assert theirs.json()["items"] == []

    async def test_non_participant_gets_403(
        self, async_client: AsyncClient, test_user: dict, second_user: dict, make_user, auth_headers
    ):
        outsider = await make_user("Olive")
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()

        response = await async_client.get(
            f"/api/v1/messages/conversations/{conversation['id']}",
            headers=auth_headers(outsider["api_key"]),
        )

        assert response.status_code == 403


class TestSendMessage:
    async def test_send_returns_201_and_updates_conversation(
        self, async_client: AsyncClient, test_user: dict, second_user: dict, auth_headers
    ):
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()

        response = await _send(async_client, test_user, conversation["id"], auth_headers)

        assert response.status_code == 201
        message = response.json()
        assert message["content"] == "Hi!"
        assert message["sender"]["id"] == test_user["user_id"]

        detail = await async_client.get(
            f"/api/v1/messages/conversations/{conversation['id']}",
            headers=auth_headers(test_user["api_key"]),
        )
        assert detail.json()["last_message_id"] == message["id"]

    async def test_exchange_in_shared_room(
        self,
        async_client: AsyncClient,
        db_session: AsyncSession,
        test_user: dict,
        second_user: dict,
        auth_headers,
        socket_server,
        go_online,
    ):
        """Both sockets in the room get new-message; only the recipient is notified."""
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()
        await go_online(test_user, "s1")
        await go_online(second_user, "s2")
        for user, sid in ((test_user, "s1"), (second_user, "s2")):
            joined = await async_client.post(
                f"/api/v1/messages/conversations/{conversation['id']}/join",
                json={"sid": sid},
                headers=auth_headers(user["api_key"]),
            )
            assert joined.json()["joined"] is True

        message = (await _send(async_client, test_user, conversation["id"], auth_headers)).json()

        room = socket_server.sent(events.NEW_MESSAGE)
        assert {e.to for e in room} == {"s1", "s2"}
        assert room[0].data["id"] == message["id"]

        [note] = socket_server.sent(events.NEW_NOTIFICATION)
        assert note.to == "s2"
        assert note.data["type"] == "message"

        [row] = (await db_session.execute(select(Notification))).scalars().all()
        assert str(row.recipient_id) == second_user["user_id"]
        assert row.type == "message"

    async def test_send_survives_failed_notification_write(
        self,
        async_client: AsyncClient,
        db_session: AsyncSession,
        test_user: dict,
        second_user: dict,
        auth_headers,
        socket_server,
        go_online,
        failing_notification_insert,
    ):
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()
        await go_online(second_user, "s2")
        joined = await async_client.post(
            f"/api/v1/messages/conversations/{conversation['id']}/join",
            json={"sid": "s2"},
            headers=auth_headers(second_user["api_key"]),
        )
        assert joined.json()["joined"] is True

        response = await _send(async_client, test_user, conversation["id"], auth_headers)

        assert response.status_code == 201
        [stored] = (await db_session.execute(select(Message))).scalars().all()
        assert str(stored.id) == response.json()["id"]
        [room] = socket_server.sent(events.NEW_MESSAGE)
        assert room.to == "s2"
        assert (await db_session.execute(select(Notification))).scalars().all() == []

    async def test_non_participant_cannot_send(
        self, async_client: AsyncClient, test_user: dict, second_user: dict, make_user, auth_headers
    ):
        outsider = await make_user("Olive")
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()

        response = await _send(async_client, outsider, conversation["id"], auth_headers)

        assert response.status_code == 403

    async def test_empty_message_rejected(
        self, async_client: AsyncClient, test_user: dict, second_user: dict, auth_headers
    ):
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()
        response = await _send(async_client, test_user, conversation["id"], auth_headers, content=" ")
        assert response.status_code == 422


class TestRoomMembership:
    async def test_non_participant_cannot_join_room(
        self, async_client: AsyncClient, gateway, test_user: dict, second_user: dict, make_user, auth_headers
    ):
        outsider = await make_user("Olive")
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()
        gateway.connect("s-out")

        response = await async_client.post(
            f"/api/v1/messages/conversations/{conversation['id']}/join",
            json={"sid": "s-out"},
            headers=auth_headers(outsider["api_key"]),
        )

        assert response.status_code == 403
        assert gateway.members_of(conversation["id"]) == set()

    async def test_unknown_socket_is_not_joined(
        self, async_client: AsyncClient, test_user: dict, second_user: dict, auth_headers
    ):
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()

        response = await async_client.post(
            f"/api/v1/messages/conversations/{conversation['id']}/join",
            json={"sid": "not-connected"},
            headers=auth_headers(test_user["api_key"]),
        )

        assert response.status_code == 200
        assert response.json()["joined"] is False

    async def test_cannot_join_someone_elses_socket(
        self,
        async_client: AsyncClient,
        gateway,
        socket_server,
        test_user: dict,
        second_user: dict,
        make_user,
        auth_headers,
        go_online,
    ):
        """A participant cannot pull an outsider's socket into the room."""
        outsider = await make_user("Eve")
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()
        await go_online(outsider, "eve-sock")

        response = await async_client.post(
            f"/api/v1/messages/conversations/{conversation['id']}/join",
            json={"sid": "eve-sock"},
            headers=auth_headers(test_user["api_key"]),
        )

        assert response.status_code == 403
        assert gateway.members_of(conversation["id"]) == set()

        await _send(async_client, second_user, conversation["id"], auth_headers, content="secret")
        assert [e for e in socket_server.emitted if e.to == "eve-sock"] == []

    async def test_anonymous_socket_cannot_join(
        self, async_client: AsyncClient, gateway, test_user: dict, second_user: dict, auth_headers
    ):
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()
        gateway.connect("s-anon")

        response = await async_client.post(
            f"/api/v1/messages/conversations/{conversation['id']}/join",
            json={"sid": "s-anon"},
            headers=auth_headers(test_user["api_key"]),
        )

        assert response.status_code == 403

    async def test_leave_room(
        self, async_client: AsyncClient, gateway, test_user: dict, second_user: dict, auth_headers, go_online
    ):
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()
        await go_online(test_user, "s1")
        gateway.join_group("s1", conversation["id"])

        response = await async_client.post(
            f"/api/v1/messages/conversations/{conversation['id']}/leave",
            json={"sid": "s1"},
            headers=auth_headers(test_user["api_key"]),
        )

        assert response.status_code == 200
        assert gateway.members_of(conversation["id"]) == set()

    async def test_cannot_remove_someone_elses_socket(
        self, async_client: AsyncClient, gateway, test_user: dict, second_user: dict, auth_headers, go_online
    ):
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()
        await go_online(second_user, "s2")
        gateway.join_group("s2", conversation["id"])

        response = await async_client.post(
            f"/api/v1/messages/conversations/{conversation['id']}/leave",
            json={"sid": "s2"},
            headers=auth_headers(test_user["api_key"]),
        )

        assert response.status_code == 403
        assert gateway.members_of(conversation["id"]) == {"s2"}


class TestReadingMessages:
    async def test_list_messages_oldest_first_with_cursor(
        self, async_client: AsyncClient, test_user: dict, second_user: dict, auth_headers
    ):
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()
        for i in range(3):
            await _send(async_client, test_user, conversation["id"], auth_headers, content=f"m{i}")

        url = f"/api/v1/messages/conversations/{conversation['id']}/messages"
        headers = auth_headers(second_user["api_key"])
        page = (await async_client.get(url, params={"limit": 2}, headers=headers)).json()

        assert [m["content"] for m in page["items"]] == ["m1", "m2"]
        assert page["has_more"] is True

        older = (
            await async_client.get(
                url, params={"limit": 2, "cursor": page["next_cursor"]}, headers=headers
            )
        ).json()
        assert [m["content"] for m in older["items"]] == ["m0"]
        assert older["has_more"] is False

    async def test_mark_read_only_marks_others_messages(
        self, async_client: AsyncClient, test_user: dict, second_user: dict, auth_headers
    ):
        conversation = (await _start(async_client, test_user, second_user, auth_headers)).json()
        await _send(async_client, test_user, conversation["id"], auth_headers)
        await _send(async_client, second_user, conversation["id"], auth_headers)

        response = await async_client.put(
            f"/api/v1/messages/conversations/{conversation['id']}/read",
            headers=auth_headers(second_user["api_key"]),
        )

        assert response.json() == {"marked_count": 1}
