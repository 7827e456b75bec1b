"""Sermons router."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from church_social.auth.dependencies import get_current_user, require_staff
from church_social.database import get_db
from church_social.errors import forbidden, not_found
from church_social.models.sermon import Sermon
from church_social.models.user import APIKey, User
from church_social.realtime import events
from church_social.realtime.dependencies import get_gateway
from church_social.realtime.gateway import Gateway
from church_social.schemas.sermons import CreateSermonRequest, SermonResponse

router = APIRouter(prefix="/api/v1/sermons", tags=["Sermons"])


@router.post(
    "",
    response_model=SermonResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_sermon(
    data: CreateSermonRequest,
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(require_staff),
) -> SermonResponse:
    """Publish a sermon. Staff only."""
    user, _ = auth

    sermon = Sermon(pastor_id=user.id, **data.model_dump())
    db.add(sermon)
    await db.commit()

    return SermonResponse.from_model(sermon)


@router.delete(
    "/{sermon_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_sermon(
    sermon_id: UUID,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> None:
    """
    Delete a sermon.

    Allowed for admins, and for the pastor who preached it.
    """
    user, _ = auth

    sermon = await db.get(Sermon, sermon_id)
    if not sermon:
        raise not_found(f"Sermon '{sermon_id}' not found")

    is_preacher = user.role == "pastor" and sermon.pastor_id == user.id
    if not (is_preacher or user.role == "admin"):
        raise forbidden("Not authorized to delete this sermon")

    await db.delete(sermon)
    await db.commit()

    await gateway.broadcast(events.SERMON_DELETED, {"sermonId": str(sermon_id)})
