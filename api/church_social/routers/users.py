"""Users router for account endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from church_social.auth.dependencies import get_current_user, is_owner_or_role
from church_social.database import get_db
from church_social.errors import forbidden, not_found
from church_social.models.user import APIKey, User
from church_social.schemas.users import UserMeResponse

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get(
    "/me",
    response_model=UserMeResponse,
    status_code=status.HTTP_200_OK,
)
async def get_current_user_profile(
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> UserMeResponse:
    """Get the authenticated user's account."""
    user, api_key = auth
    return UserMeResponse.from_model(user, api_key.name)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def deactivate_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> None:
    """
    Deactivate an account.

    Users may deactivate themselves; admins may deactivate anyone. The row
    is kept so authored content survives, but its API keys stop working.
    """
    user, _ = auth

    if not is_owner_or_role(user, user_id, {"admin"}):
        raise forbidden("Not authorized to delete this user")

    target = await db.get(User, user_id)
    if not target:
        raise not_found(f"User '{user_id}' not found")

    target.is_active = False
    await db.commit()
