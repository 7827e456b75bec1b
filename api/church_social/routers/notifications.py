"""Notification inbox router."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from church_social.auth.dependencies import get_current_user
from church_social.database import get_db, utcnow
from church_social.errors import not_found
from church_social.models.notification import Notification
from church_social.models.user import APIKey, User
from church_social.schemas.notifications import (
    InboxSummaryResponse,
    ListNotificationsResponse,
    MarkAllReadResponse,
    NotificationItem,
)

router = APIRouter(prefix="/api/v1/notifications", tags=["Notifications"])


async def _count(db: AsyncSession, *criteria) -> int:
    result = await db.execute(select(func.count(Notification.id)).where(*criteria))
    return result.scalar() or 0


async def _get_own_notification(
    db: AsyncSession, notification_id: UUID, user: User
) -> Notification:
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.recipient_id == user.id,
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise not_found(f"Notification '{notification_id}' not found")
    return notification


# --- Summary ---


@router.get(
    "/summary",
    response_model=InboxSummaryResponse,
    status_code=status.HTTP_200_OK,
)
async def get_inbox_summary(
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> InboxSummaryResponse:
    """Counts of unread and total notifications for the badge."""
    user, _ = auth

    return InboxSummaryResponse(
        unread_count=await _count(
            db, Notification.recipient_id == user.id, Notification.is_read.is_(False)
        ),
        total_count=await _count(db, Notification.recipient_id == user.id),
    )


# --- List ---


@router.get(
    "",
    response_model=ListNotificationsResponse,
    status_code=status.HTTP_200_OK,
)
async def list_notifications(
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(get_current_user),
    cursor: str | None = Query(default=None, description="Pagination cursor"),
    limit: int = Query(default=20, ge=1, le=100, description="Items per page"),
    unread_only: bool = Query(default=False, description="Show only unread notifications"),
) -> ListNotificationsResponse:
    """
    List the caller's notifications, newest first.

    Cursor pagination: pass ``next_cursor`` from the previous page.
    """
    user, _ = auth

    query = select(Notification).where(Notification.recipient_id == user.id)

    if unread_only:
        query = query.where(Notification.is_read.is_(False))

    # Cursor is the created_at of the last item on the previous page
    if cursor:
        try:
            cursor_dt = datetime.fromisoformat(cursor)
            query = query.where(Notification.created_at < cursor_dt)
        except ValueError:
            pass  # Invalid cursor, ignore

    query = query.order_by(Notification.created_at.desc()).limit(limit + 1)

    result = await db.execute(query)
    notifications = list(result.scalars().all())

    has_more = len(notifications) > limit
    if has_more:
        notifications = notifications[:limit]

    next_cursor = notifications[-1].created_at.isoformat() if notifications and has_more else None

    return ListNotificationsResponse(
        items=[NotificationItem.from_model(n) for n in notifications],
        unread_count=await _count(
            db, Notification.recipient_id == user.id, Notification.is_read.is_(False)
        ),
        next_cursor=next_cursor,
        has_more=has_more,
    )


# --- Mark as read ---


@router.post(
    "/read-all",
    response_model=MarkAllReadResponse,
    status_code=status.HTTP_200_OK,
)
async def mark_all_notifications_read(
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> MarkAllReadResponse:
    """Mark every unread notification as read."""
    user, _ = auth

    result = await db.execute(
        update(Notification)
        .where(
            Notification.recipient_id == user.id,
            Notification.is_read.is_(False),
        )
        .values(is_read=True, read_at=utcnow())
    )
    await db.commit()

    return MarkAllReadResponse(marked_count=result.rowcount or 0)


@router.post(
    "/{notification_id}/read",
    response_model=NotificationItem,
    status_code=status.HTTP_200_OK,
)
async def mark_notification_read(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> NotificationItem:
    """Mark a single notification as read."""
    user, _ = auth

    notification = await _get_own_notification(db, notification_id, user)

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()
        await db.commit()

    return NotificationItem.from_model(notification)


# --- Delete ---


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_notification(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> None:
    """Delete one of the caller's notifications."""
    user, _ = auth

    notification = await _get_own_notification(db, notification_id, user)

    await db.delete(notification)
    await db.commit()
