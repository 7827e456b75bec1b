"""Sermon-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, field_validator

from church_social.models.sermon import Sermon


class CreateSermonRequest(BaseModel):
    """Request to publish a sermon."""

    title: str
    scripture: str | None = None
    video_url: str | None = None
    preached_at: datetime | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Sermon title is required")
        return v


class SermonResponse(BaseModel):
    id: str
    title: str
    pastor_id: str
    scripture: str | None
    video_url: str | None
    preached_at: str | None
    created_at: str

    @classmethod
    def from_model(cls, sermon: Sermon) -> "SermonResponse":
        return cls(
            id=str(sermon.id),
            title=sermon.title,
            pastor_id=str(sermon.pastor_id),
            scripture=sermon.scripture,
            video_url=sermon.video_url,
            preached_at=sermon.preached_at.isoformat() if sermon.preached_at else None,
            created_at=sermon.created_at.isoformat(),
        )
