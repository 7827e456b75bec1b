"""Sermon model."""

import uuid

from sqlalchemy import TIMESTAMP, Column, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import relationship

from church_social.database import Base, utcnow


class Sermon(Base):
    """Recorded or published sermon."""

    __tablename__ = "sermons"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False)
    pastor_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    scripture = Column(Text)
    video_url = Column(Text)
    preached_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    __table_args__ = (Index("idx_sermons_created", created_at.desc()),)

    pastor = relationship("User", foreign_keys=[pastor_id])
