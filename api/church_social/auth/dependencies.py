"""Authentication dependencies for FastAPI endpoints."""

import hmac
from collections.abc import Iterable
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from church_social.auth.api_key import API_KEY_PREFIX, hash_api_key
from church_social.config import STAFF_ROLES
from church_social.database import get_db, utcnow
from church_social.errors import forbidden, unauthorized
from church_social.models.user import APIKey, User


async def get_current_user(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    db: AsyncSession = Depends(get_db),
) -> tuple[User, APIKey]:
    """
    Validate API key and return the authenticated user and API key.

    Raises:
        HTTPException: 401 if the key is missing, invalid or revoked, or the
            account has been deactivated
    """
    if not x_api_key:
        raise unauthorized("API key required")

    if not x_api_key.startswith(API_KEY_PREFIX):
        raise unauthorized("Invalid API key format")

    key_hash = hash_api_key(x_api_key)

    result = await db.execute(
        select(APIKey)
        .options(selectinload(APIKey.user))
        .where(APIKey.key_hash == key_hash)
        .where(APIKey.revoked_at.is_(None))
    )
    api_key = result.scalar_one_or_none()

    if not api_key:
        # Keep response time independent of whether the key exists
        hmac.compare_digest(key_hash, "0" * 64)
        raise unauthorized("Invalid or revoked API key")

    if not api_key.user.is_active:
        raise unauthorized("Account has been deactivated")

    now = utcnow()
    api_key.last_used_at = now
    api_key.user.last_seen_at = now

    return api_key.user, api_key


def require_roles(roles: Iterable[str], message: str):
    """Dependency factory to require one of the given user roles."""
    allowed = frozenset(roles)

    async def check_role(
        auth: tuple[User, APIKey] = Depends(get_current_user),
    ) -> tuple[User, APIKey]:
        user, _ = auth
        if user.role not in allowed:
            raise forbidden(message)
        return auth

    return check_role


require_staff = require_roles(STAFF_ROLES, "Staff role required")


def is_owner_or_role(user: User, owner_id: UUID, roles: Iterable[str]) -> bool:
    """Owner-or-role authorization check used by mutating endpoints."""
    return user.id == owner_id or user.role in set(roles)
