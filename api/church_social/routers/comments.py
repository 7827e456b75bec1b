"""Comments router."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from church_social.auth.dependencies import get_current_user, is_owner_or_role
from church_social.database import get_db
from church_social.errors import forbidden, not_found
from church_social.models.post import Comment
from church_social.models.user import APIKey, User
from church_social.realtime import events
from church_social.realtime.dependencies import get_gateway
from church_social.realtime.gateway import Gateway
from church_social.routers.posts import get_post_or_404
from church_social.schemas.posts import CommentRequest, CommentResponse
from church_social.services.fanout import NotificationDraft, SingleRecipient, fan_out

router = APIRouter(prefix="/api/v1", tags=["Comments"])

COMMENT_MODERATOR_ROLES = {"pastor", "admin"}


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: UUID,
    data: CommentRequest,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> CommentResponse:
    """Comment on a post, notifying the post's author."""
    user, _ = auth

    post = await get_post_or_404(db, post_id)
    author_id = post.author_id

    if data.parent_comment_id is not None:
        parent = await db.get(Comment, data.parent_comment_id)
        if parent is None or parent.post_id != post_id:
            raise not_found(f"Comment '{data.parent_comment_id}' not found")

    comment = Comment(
        post_id=post_id,
        author_id=user.id,
        parent_comment_id=data.parent_comment_id,
        content=data.content,
    )
    db.add(comment)
    await db.commit()

    response = CommentResponse.from_model(comment, user)

    await fan_out(
        db,
        gateway,
        actor_id=user.id,
        rule=SingleRecipient(author_id),
        draft=NotificationDraft(
            type="comment",
            title="New Comment",
            message=f"{response.author.first_name} {response.author.last_name} commented on your post",
            related_post_id=post_id,
        ),
    )

    await gateway.broadcast(
        events.NEW_COMMENT,
        {"postId": str(post_id), "comment": response.model_dump(mode="json")},
    )

    return response


@router.delete(
    "/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_comment(
    comment_id: UUID,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> None:
    """Delete a comment. Allowed for its author, pastors and admins."""
    user, _ = auth

    result = await db.execute(select(Comment).where(Comment.id == comment_id))
    comment = result.scalar_one_or_none()

    if not comment:
        raise not_found(f"Comment '{comment_id}' not found")

    if not is_owner_or_role(user, comment.author_id, COMMENT_MODERATOR_ROLES):
        raise forbidden("Not authorized to delete this comment")

    post_id = comment.post_id
    await db.delete(comment)
    await db.commit()

    await gateway.broadcast(
        events.COMMENT_DELETED,
        {"postId": str(post_id), "commentId": str(comment_id)},
    )
