"""
Tests for notification inbox endpoints:
- GET /api/v1/notifications/summary
- GET /api/v1/notifications
- POST /api/v1/notifications/{id}/read
- POST /api/v1/notifications/read-all
- DELETE /api/v1/notifications/{id}
"""

from uuid import UUID

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from church_social.services.fanout import NotificationDraft, SingleRecipient, fan_out


@pytest_asyncio.fixture
async def inbox(db_session: AsyncSession, gateway, test_user: dict, second_user: dict) -> dict:
    """Three notifications for test_user, sent by second_user."""
    for i in range(3):
        await fan_out(
            db_session,
            gateway,
            actor_id=UUID(second_user["user_id"]),
            rule=SingleRecipient(UUID(test_user["user_id"])),
            draft=NotificationDraft(
                type="like", title="New Like", message=f"John Second liked your post {i}"
            ),
        )
    return test_user


async def _list(client: AsyncClient, user: dict, auth_headers, **params) -> dict:
    response = await client.get(
        "/api/v1/notifications", params=params, headers=auth_headers(user["api_key"])
    )
    assert response.status_code == 200
    return response.json()


class TestInboxSummary:
    """GET /api/v1/notifications/summary tests."""

    async def test_summary_counts(self, async_client: AsyncClient, inbox: dict, auth_headers):
        response = await async_client.get(
            "/api/v1/notifications/summary", headers=auth_headers(inbox["api_key"])
        )
        assert response.json() == {"unread_count": 3, "total_count": 3}

    async def test_summary_requires_auth(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/notifications/summary")
        assert response.status_code == 401


class TestListNotifications:
    """GET /api/v1/notifications tests."""

    async def test_items_use_camel_case_shape(
        self, async_client: AsyncClient, inbox: dict, second_user: dict, auth_headers
    ):
        data = await _list(async_client, inbox, auth_headers)

        item = data["items"][0]
        assert item["recipient"] == inbox["user_id"]
        assert item["sender"] == second_user["user_id"]
        assert item["type"] == "like"
        assert item["isRead"] is False
        assert item["readAt"] is None
        assert "relatedPost" in item
        assert "createdAt" in item
        assert data["unread_count"] == 3

    async def test_newest_first_with_pagination(
        self, async_client: AsyncClient, inbox: dict, auth_headers
    ):
        page = await _list(async_client, inbox, auth_headers, limit=2)

        assert [i["message"][-1] for i in page["items"]] == ["2", "1"]
        assert page["has_more"] is True

        rest = await _list(async_client, inbox, auth_headers, limit=2, cursor=page["next_cursor"])
        assert [i["message"][-1] for i in rest["items"]] == ["0"]
        assert rest["has_more"] is False

    async def test_other_users_see_nothing(
        self, async_client: AsyncClient, inbox: dict, second_user: dict, auth_headers
    ):
        data = await _list(async_client, second_user, auth_headers)
        assert data["items"] == []


class TestMarkRead:
    async def test_mark_one_read(self, async_client: AsyncClient, inbox: dict, auth_headers):
        item = (await _list(async_client, inbox, auth_headers))["items"][0]

        response = await async_client.post(
            f"/api/v1/notifications/{item['id']}/read", headers=auth_headers(inbox["api_key"])
        )

        assert response.status_code == 200
        assert response.json()["isRead"] is True
        assert response.json()["readAt"] is not None
        unread = await _list(async_client, inbox, auth_headers, unread_only=True)
        assert len(unread["items"]) == 2

    async def test_mark_all_read(self, async_client: AsyncClient, inbox: dict, auth_headers):
        response = await async_client.post(
            "/api/v1/notifications/read-all", headers=auth_headers(inbox["api_key"])
        )

        assert response.json()["marked_count"] == 3
        assert (await _list(async_client, inbox, auth_headers))["unread_count"] == 0

    async def test_cannot_mark_someone_elses(
        self, async_client: AsyncClient, inbox: dict, second_user: dict, auth_headers
    ):
        item = (await _list(async_client, inbox, auth_headers))["items"][0]

        response = await async_client.post(
            f"/api/v1/notifications/{item['id']}/read",
            headers=auth_headers(second_user["api_key"]),
        )

        assert response.status_code == 404


class TestDeleteNotification:
    async def test_delete_own(self, async_client: AsyncClient, inbox: dict, auth_headers):
        item = (await _list(async_client, inbox, auth_headers))["items"][0]

        response = await async_client.delete(
            f"/api/v1/notifications/{item['id']}", headers=auth_headers(inbox["api_key"])
        )

        assert response.status_code == 204
        assert len((await _list(async_client, inbox, auth_headers))["items"]) == 2

    async def test_cannot_delete_someone_elses(
        self, async_client: AsyncClient, inbox: dict, second_user: dict, auth_headers
    ):
        item = (await _list(async_client, inbox, auth_headers))["items"][0]

        response = await async_client.delete(
            f"/api/v1/notifications/{item['id']}",
            headers=auth_headers(second_user["api_key"]),
        )

        assert response.status_code == 404
