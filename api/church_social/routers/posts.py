"""Posts router: create, delete, like and share."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from church_social.auth.dependencies import get_current_user, is_owner_or_role
from church_social.config import settings
from church_social.database import get_db
from church_social.errors import forbidden, not_found
from church_social.middleware.rate_limit import limiter
from church_social.models.post import Comment, Post, PostLike, PostShare
from church_social.models.user import APIKey, User
from church_social.realtime import events
from church_social.realtime.dependencies import get_gateway
from church_social.realtime.gateway import Gateway
from church_social.schemas.posts import (
    CreatePostRequest,
    LikeResponse,
    PostResponse,
    ShareResponse,
)
from church_social.services.fanout import (
    AllOtherUsers,
    NotificationDraft,
    SingleRecipient,
    fan_out,
    preview,
)

router = APIRouter(prefix="/api/v1/posts", tags=["Posts"])


async def get_post_or_404(db: AsyncSession, post_id: UUID) -> Post:
    result = await db.execute(
        select(Post).options(selectinload(Post.author)).where(Post.id == post_id)
    )
    post = result.scalar_one_or_none()
    if not post:
        raise not_found(f"Post '{post_id}' not found")
    return post


# --- Create Post ---


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.post_create_rate_limit)
async def create_post(
    request: Request,
    data: CreatePostRequest,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> PostResponse:
    """
    Create a post.

    Posts by staff are announced to every other member through the
    notification inbox. Every new post is broadcast as ``new-post``.
    """
    user, _ = auth

    post = Post(
        author_id=user.id,
        content=data.content,
        post_type=data.post_type,
        visibility=data.visibility,
        group_id=data.group_id,
        youtube_url=data.youtube_url,
    )
    db.add(post)
    await db.commit()

    response = PostResponse.from_model(post, user)

    if user.is_staff:
        await fan_out(
            db,
            gateway,
            actor_id=user.id,
            rule=AllOtherUsers(active_only=settings.staff_post_fanout_active_only),
            draft=NotificationDraft(
                type="announcement",
                title="New Post from Staff",
                message=(
                    f"{response.author.first_name} {response.author.last_name} posted: "
                    f"{preview(data.content, settings.notification_preview_length)}"
                ),
                live_message=(
                    f"{response.author.first_name} {response.author.last_name} posted an update"
                ),
                link="/feed",
                related_post_id=UUID(response.id),
            ),
        )

    await gateway.broadcast(events.NEW_POST, response.model_dump(mode="json"))

    return response


# --- Delete Post ---


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_post(
    post_id: UUID,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> None:
    """
    Delete a post with its comments, likes and shares.

    Only the author or an admin can delete a post.
    """
    user, _ = auth

    post = await get_post_or_404(db, post_id)

    if not is_owner_or_role(user, post.author_id, {"admin"}):
        raise forbidden("Not authorized to delete this post")

    await db.execute(delete(Comment).where(Comment.post_id == post_id))
    await db.execute(delete(PostLike).where(PostLike.post_id == post_id))
    await db.execute(delete(PostShare).where(PostShare.post_id == post_id))
    await db.delete(post)
    await db.commit()

    await gateway.broadcast(events.POST_DELETED, {"postId": str(post_id)})


# --- Like / Unlike ---


@router.post(
    "/{post_id}/like",
    response_model=LikeResponse,
    status_code=status.HTTP_200_OK,
)
async def toggle_like(
    post_id: UUID,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> LikeResponse:
    """
    Like the post, or remove the like if already liked.

    Every like (not unlike) notifies the author unless they liked their own
    post. Repeated like/unlike cycles notify again each time.
    """
    user, _ = auth
    actor_id, actor_name = user.id, user.full_name

    post = await get_post_or_404(db, post_id)
    author_id = post.author_id

    result = await db.execute(
        select(PostLike).where(PostLike.post_id == post_id, PostLike.user_id == actor_id)
    )
    existing = result.scalar_one_or_none()

    if existing:
        await db.delete(existing)
        liked = False
    else:
        db.add(PostLike(post_id=post_id, user_id=actor_id))
        liked = True
    await db.commit()

    count_result = await db.execute(
        select(func.count()).select_from(PostLike).where(PostLike.post_id == post_id)
    )
    response = LikeResponse(
        post_id=str(post_id),
        liked=liked,
        like_count=count_result.scalar() or 0,
    )

    if liked:
        await fan_out(
            db,
            gateway,
            actor_id=actor_id,
            rule=SingleRecipient(author_id),
            draft=NotificationDraft(
                type="like",
                title="New Like",
                message=f"{actor_name} liked your post",
                related_post_id=post_id,
            ),
        )

    await gateway.broadcast(
        events.POST_LIKED,
        {
            "postId": response.post_id,
            "userId": str(actor_id),
            "liked": response.liked,
            "likeCount": response.like_count,
        },
    )

    return response


# --- Share ---


@router.post(
    "/{post_id}/share",
    response_model=ShareResponse,
    status_code=status.HTTP_200_OK,
)
async def share_post(
    post_id: UUID,
    db: AsyncSession = Depends(get_db),
    gateway: Gateway = Depends(get_gateway),
    auth: tuple[User, APIKey] = Depends(get_current_user),
) -> ShareResponse:
    """Share a post and notify its author."""
    user, _ = auth
    actor_id, actor_name = user.id, user.full_name

    post = await get_post_or_404(db, post_id)
    author_id = post.author_id

    db.add(PostShare(post_id=post_id, user_id=actor_id))
    await db.commit()

    count_result = await db.execute(
        select(func.count()).select_from(PostShare).where(PostShare.post_id == post_id)
    )
    response = ShareResponse(post_id=str(post_id), share_count=count_result.scalar() or 0)

    await fan_out(
        db,
        gateway,
        actor_id=actor_id,
        rule=SingleRecipient(author_id),
        draft=NotificationDraft(
            type="share",
            title="New Share",
            message=f"{actor_name} shared your post",
            related_post_id=post_id,
        ),
    )

    return response
