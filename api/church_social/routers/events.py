"""Events router: create, delete and RSVP."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from church_social.auth.dependencies import (
    get_current_user,
    is_owner_or_role,
    require_staff,
)
from church_social.config import settings
from church_social.database import get_db
from church_social.errors import forbidden, not_found
from church_social.models.event import Event, EventAttendee
from church_social.models.user import APIKey, User
from church_social.realtime import events
from church_social.realtime.dependencies import get_gateway
from church_social.realtime.gateway import Gateway
from church_social.schemas.events import (
    CreateEventRequest,
    EventResponse,
    RsvpRequest,
    RsvpResponse,
)
from church_social.services.fanout import (
    AllOtherUsers,
    NotificationDraft,
    SingleRecipient,
    fan_out,
)

router = APIRouter(prefix="/api/v1/events", tags=["Events"])


async def _get_event_or_404(db: AsyncSession, event_id: UUID) -> Event:
    event = await db.get(Event, event_id)
    if not event:
        raise not_found(f"Event '{event_id}' not found")
    return event


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_event(
    data: CreateEventRequest,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(require_staff),
) -> EventResponse:
    """
    Schedule an event and announce it to every other member.

    Only staff can create events.
    """
    user, _ = auth

    event = Event(organizer_id=user.id, **data.model_dump())
    db.add(event)
    await db.commit()

    response = EventResponse.from_model(event)

    await fan_out(
        db,
        gateway,
        actor_id=user.id,
        rule=AllOtherUsers(active_only=settings.event_fanout_active_only),
        draft=NotificationDraft(
            type="announcement",
            title="New Event Posted",
            message=(
                f'New event "{data.title}" has been scheduled for '
                f"{data.start_date.date().isoformat()}"
            ),
            live_message=f'New event "{data.title}" has been scheduled',
            link="/events",
            related_event_id=UUID(response.id),
        ),
    )

    return response


@router.delete(
    "/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_event(
    event_id: UUID,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> None:
    """Delete an event. Only its organizer or an admin can delete it."""
    user, _ = auth

    event = await _get_event_or_404(db, event_id)

    if not is_owner_or_role(user, event.organizer_id, {"admin"}):
        raise forbidden("Not authorized to delete this event")

    await db.delete(event)
    await db.commit()

    await gateway.broadcast(events.EVENT_DELETED, {"eventId": str(event_id)})


@router.post(
    "/{event_id}/rsvp",
    response_model=RsvpResponse,
    status_code=status.HTTP_200_OK,
)
async def rsvp_event(
    event_id: UUID,
    data: RsvpRequest,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> RsvpResponse:
    """Record or change the caller's RSVP. Organizers hear about "going" RSVPs."""
    user, _ = auth
    actor_id, actor_name = user.id, user.full_name

    event = await _get_event_or_404(db, event_id)
    organizer_id = event.organizer_id

    attendee = await db.get(EventAttendee, (event_id, actor_id))
    if attendee:
        attendee.status = data.status
    else:
        db.add(EventAttendee(event_id=event_id, user_id=actor_id, status=data.status))
    await db.commit()

    count_result = await db.execute(
        select(func.count())
        .select_from(EventAttendee)
        .where(EventAttendee.event_id == event_id, EventAttendee.status == "going")
    )
    response = RsvpResponse(
        event_id=str(event_id),
        status=data.status,
        going_count=count_result.scalar() or 0,
    )

    if data.status == "going":
        await fan_out(
            db,
            gateway,
            actor_id=actor_id,
            rule=SingleRecipient(organizer_id),
            draft=NotificationDraft(
                type="event-invite",
                title="New Event RSVP",
                message=f"{actor_name} is attending your event",
                related_event_id=event_id,
            ),
        )

    return response
