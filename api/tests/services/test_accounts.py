"""Tests for account provisioning used by scripts/manage_users.py."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from church_social.auth.api_key import API_KEY_PREFIX, hash_api_key
from church_social.models.user import APIKey
from church_social.services.accounts import (
    AccountError,
    create_user,
    get_user_by_email,
    issue_api_key,
    set_role,
)


class TestAccounts:
    async def test_create_user_lowercases_email(self, db_session: AsyncSession):
        user = await create_user(db_session, email=" Grace@Example.com ", first_name="Grace")
        assert user.email == "grace@example.com"
        assert user.role == "member"
        assert user.is_active is True

    async def test_duplicate_email_rejected(self, db_session: AsyncSession):
        await create_user(db_session, email="grace@example.com", first_name="Grace")
        with pytest.raises(AccountError):
            await create_user(db_session, email="GRACE@example.com", first_name="Other")

    async def test_unknown_role_rejected(self, db_session: AsyncSession):
        with pytest.raises(AccountError):
            await create_user(db_session, email="x@example.com", first_name="X", role="bishop")

    async def test_issue_api_key_stores_hash_only(self, db_session: AsyncSession):
        user = await create_user(db_session, email="k@example.com", first_name="Kim")
        key = await issue_api_key(db_session, user.id, name="laptop")

        assert key.startswith(API_KEY_PREFIX)
        result = await db_session.execute(select(APIKey).where(APIKey.user_id == user.id))
        stored = result.scalar_one()
        assert stored.key_hash == hash_api_key(key)
        assert stored.key_prefix == key[:12]

    async def test_set_role(self, db_session: AsyncSession):
        await create_user(db_session, email="s@example.com", first_name="Sam")
        user = await get_user_by_email(db_session, "s@example.com")
        await set_role(db_session, user, "sound_engineer")
        assert user.is_staff
