"""Feed models for posts, likes, shares and comments."""

import uuid

from sqlalchemy import (
    TIMESTAMP,
    CheckConstraint,
    Column,
    Enum,
    ForeignKey,
    Index,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from church_social.database import Base, utcnow

POST_TYPES = ("general", "announcement", "testimony", "event", "prayer")
POST_VISIBILITIES = ("public", "members", "group")


class Post(Base):
    """Feed post."""

    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    author_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    post_type = Column(
        Enum(*POST_TYPES, name="post_type", native_enum=False),
        nullable=False,
        default="general",
    )
    visibility = Column(
        Enum(*POST_VISIBILITIES, name="post_visibility", native_enum=False),
        nullable=False,
        default="public",
    )
    group_id = Column(Uuid, ForeignKey("groups.id", ondelete="SET NULL"))
    youtube_url = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("length(content) <= 5000", name="ck_post_content_length"),
        Index("idx_posts_author", author_id, created_at.desc()),
        Index("idx_posts_created", created_at.desc()),
    )

    author = relationship("User", foreign_keys=[author_id])


class PostLike(Base):
    """A user's like on a post. At most one per user and post."""

    __tablename__ = "post_likes"

    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)


class PostShare(Base):
    """A share of a post. Users may share the same post repeatedly."""

    __tablename__ = "post_shares"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    shared_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    __table_args__ = (Index("idx_post_shares_post", post_id),)


class Comment(Base):
    """Comment on a post, optionally replying to another comment."""

    __tablename__ = "comments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id = Column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    parent_comment_id = Column(Uuid, ForeignKey("comments.id", ondelete="CASCADE"))
    content = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    __table_args__ = (
        CheckConstraint("length(content) <= 1000", name="ck_comment_content_length"),
        Index("idx_comments_post", post_id, created_at),
    )

    author = relationship("User", foreign_keys=[author_id])
