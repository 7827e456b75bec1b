"""Event-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, field_validator, model_validator

from church_social.models.event import Event


class CreateEventRequest(BaseModel):
    """Request to schedule an event."""

    title: str
    description: str
    event_type: Literal[
        "service",
        "bible-study",
        "prayer-meeting",
        "fellowship",
        "conference",
        "outreach",
        "other",
    ] = "other"
    start_date: datetime
    end_date: datetime
    location_name: str
    location_address: str | None = None
    is_online: bool = False
    online_link: str | None = None

    @field_validator("title", "location_name")
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        """Validate description length."""
        if not v.strip():
            raise ValueError("Event description is required")
        if len(v) > 2000:
            raise ValueError("Description must be 2000 characters or less")
        return v

    @model_validator(mode="after")
    def validate_dates(self) -> "CreateEventRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class EventResponse(BaseModel):
    """Event as returned by the API."""

    id: str
    title: str
    description: str
    event_type: str
    start_date: str
    end_date: str
    location_name: str
    location_address: str | None
    is_online: bool
    online_link: str | None
    organizer_id: str
    created_at: str

    @classmethod
    def from_model(cls, event: Event) -> "EventResponse":
        return cls(
            id=str(event.id),
            title=event.title,
            description=event.description,
            event_type=event.event_type,
            start_date=event.start_date.isoformat(),
            end_date=event.end_date.isoformat(),
            location_name=event.location_name,
            location_address=event.location_address,
            is_online=event.is_online,
            online_link=event.online_link,
            organizer_id=str(event.organizer_id),
            created_at=event.created_at.isoformat(),
        )


class RsvpRequest(BaseModel):
    """RSVP to an event."""

    status: Literal["going", "maybe", "not-going"]


class RsvpResponse(BaseModel):
    """RSVP state after update."""

    event_id: str
    status: str
    going_count: int
