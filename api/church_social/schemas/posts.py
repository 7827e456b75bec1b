"""Feed-related Pydantic schemas."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, field_validator

from church_social.models.post import Comment, Post
from church_social.models.user import User


class AuthorSummary(BaseModel):
    """Author fields embedded in feed payloads."""

    id: str
    first_name: str
    last_name: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "AuthorSummary":
        return cls(
            id=str(user.id),
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
        )


class CreatePostRequest(BaseModel):
    """Request to create a post."""

    content: str
    post_type: Literal["general", "announcement", "testimony", "event", "prayer"] = "general"
    visibility: Literal["public", "members", "group"] = "public"
    group_id: UUID | None = None
    youtube_url: str | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Validate content length."""
        if not v.strip():
            raise ValueError("Post content is required")
        if len(v) > 5000:
            raise ValueError("Post content must be 5000 characters or less")
        return v


class PostResponse(BaseModel):
    """Post as returned by the API and the ``new-post`` event."""

    id: str
    author: AuthorSummary
    content: str
    post_type: str
    visibility: str
    group_id: str | None
    youtube_url: str | None
    created_at: str

    @classmethod
    def from_model(cls, post: Post, author: User) -> "PostResponse":
        return cls(
            id=str(post.id),
            author=AuthorSummary.from_user(author),
            content=post.content,
            post_type=post.post_type,
            visibility=post.visibility,
            group_id=str(post.group_id) if post.group_id else None,
            youtube_url=post.youtube_url,
            created_at=post.created_at.isoformat(),
        )


class LikeResponse(BaseModel):
    """Like state after a toggle."""

    post_id: str
    liked: bool
    like_count: int


class ShareResponse(BaseModel):
    """Share count after sharing."""

    post_id: str
    share_count: int


class CommentRequest(BaseModel):
    """Request to add a comment."""

    content: str
    parent_comment_id: UUID | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Validate content length."""
        if not v.strip():
            raise ValueError("Comment content is required")
        if len(v) > 1000:
            raise ValueError("Comment must be 1000 characters or less")
        return v


class CommentResponse(BaseModel):
    """Comment as returned by the API and the ``new-comment`` event."""

    id: str
    post_id: str
    parent_comment_id: str | None
    author: AuthorSummary
    content: str
    created_at: str

    @classmethod
    def from_model(cls, comment: Comment, author: User) -> "CommentResponse":
        return cls(
            id=str(comment.id),
            post_id=str(comment.post_id),
            parent_comment_id=str(comment.parent_comment_id) if comment.parent_comment_id else None,
            author=AuthorSummary.from_user(author),
            content=comment.content,
            created_at=comment.created_at.isoformat(),
        )
