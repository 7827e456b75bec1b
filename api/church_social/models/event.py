"""Event and attendance models."""

import uuid

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    Column,
    Enum,
    ForeignKey,
    Index,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from church_social.database import Base, utcnow

EVENT_TYPES = (
    "service",
    "bible-study",
    "prayer-meeting",
    "fellowship",
    "conference",
    "outreach",
    "other",
)
RSVP_STATUSES = ("going", "maybe", "not-going")


class Event(Base):
    """Scheduled church event."""

    __tablename__ = "events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    event_type = Column(
        Enum(*EVENT_TYPES, name="event_type", native_enum=False),
        nullable=False,
        default="other",
    )
    start_date = Column(TIMESTAMP(timezone=True), nullable=False)
    end_date = Column(TIMESTAMP(timezone=True), nullable=False)
    location_name = Column(Text, nullable=False)
    location_address = Column(Text)
    is_online = Column(Boolean, nullable=False, default=False)
    online_link = Column(Text)
    organizer_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    __table_args__ = (Index("idx_events_start", start_date),)

    organizer = relationship("User", foreign_keys=[organizer_id])


class EventAttendee(Base):
    """RSVP of a user to an event."""

    __tablename__ = "event_attendees"

    event_id = Column(Uuid, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    status = Column(
        Enum(*RSVP_STATUSES, name="rsvp_status", native_enum=False),
        nullable=False,
        default="going",
    )
    registered_at = Column(TIMESTAMP(timezone=True), default=utcnow)
