"""User and APIKey models."""

import uuid

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    Column,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from church_social.config import STAFF_ROLES, USER_ROLES
from church_social.database import Base, utcnow


class User(Base):
    """Church member account."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String, nullable=False)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False, default="")
    role = Column(
        Enum(*USER_ROLES, name="user_role", native_enum=False),
        nullable=False,
        default="member",
    )
    # Soft delete: deactivated accounts keep their content
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)
    last_seen_at = Column(TIMESTAMP(timezone=True))

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("idx_users_active", is_active),
    )

    api_keys = relationship("APIKey", back_populates="user", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


class APIKey(Base):
    """API key used by the web client and operator tooling."""

    __tablename__ = "api_keys"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    key_hash = Column(Text, nullable=False)
    key_prefix = Column(String(12), nullable=False)
    name = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)
    last_used_at = Column(TIMESTAMP(timezone=True))
    revoked_at = Column(TIMESTAMP(timezone=True))

    __table_args__ = (Index("idx_api_keys_hash", key_hash),)

    user = relationship("User", back_populates="api_keys")
