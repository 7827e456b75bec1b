"""Account provisioning used by operator tooling."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from church_social.auth.api_key import generate_api_key, get_key_prefix
from church_social.config import USER_ROLES
from church_social.models.user import APIKey, User

logger = logging.getLogger(__name__)


class AccountError(Exception):
    """Raised when an account operation cannot be applied."""


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    *,
    email: str,
    first_name: str,
    last_name: str = "",
    role: str = "member",
) -> User:
    """Create an active user. Emails are stored lower-cased and must be unique."""
    if role not in USER_ROLES:
        raise AccountError(f"Unknown role '{role}'")
    if await get_user_by_email(db, email):
        raise AccountError(f"User '{email}' already exists")

    user = User(
        email=email.strip().lower(),
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    logger.info("Created %s account %s", role, user.email)
    return user


async def issue_api_key(db: AsyncSession, user_id: UUID, name: str | None = None) -> str:
    """
    Issue a new API key for a user.

    Returns the plaintext key, which is not stored and cannot be recovered.
    """
    plaintext_key, key_hash = generate_api_key()
    db.add(
        APIKey(
            user_id=user_id,
            key_hash=key_hash,
            key_prefix=get_key_prefix(plaintext_key),
            name=name,
        )
    )
    await db.commit()
    logger.info("Issued API key %s for user %s", get_key_prefix(plaintext_key), user_id)
    return plaintext_key


async def set_role(db: AsyncSession, user: User, role: str) -> User:
    if role not in USER_ROLES:
        raise AccountError(f"Unknown role '{role}'")
    user.role = role
    await db.commit()
    logger.info("Set role of %s to %s", user.email, role)
    return user
