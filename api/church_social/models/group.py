"""Small-group models."""

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

from church_social.database import Base, utcnow


class Group(Base):
    """Small group led by one member."""

    __tablename__ = "groups"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    leader_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    requires_approval = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)


class GroupMember(Base):
    """Membership of a user in a group."""

    __tablename__ = "group_members"

    group_id = Column(Uuid, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role = Column(
        Enum("leader", "member", name="group_member_role", native_enum=False),
        nullable=False,
        default="member",
    )
    joined_at = Column(TIMESTAMP(timezone=True), default=utcnow)


class GroupMembershipRequest(Base):
    """Pending request to join a group that requires approval."""

    __tablename__ = "group_membership_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    group_id = Column(Uuid, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    __table_args__ = (Index("idx_group_requests_group", group_id),)
