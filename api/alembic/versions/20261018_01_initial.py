"""Initial schema."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20261018_01_initial"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ("member", "pastor", "sound_engineer", "admin")
POST_TYPES = ("general", "announcement", "testimony", "event", "prayer")
POST_VISIBILITIES = ("public", "members", "group")
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
MESSAGE_TYPES = ("text", "image", "video", "file")
NOTIFICATION_TYPES = (
    "like",
    "comment",
    "share",
    "event-invite",
    "event-reminder",
    "group-invite",
    "group-request",
    "prayer-response",
    "message",
    "announcement",
    "mention",
)


def _enum(values: tuple[str, ...], name: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False)


def _user_fk(ondelete: str = "CASCADE") -> sa.ForeignKey:
    return sa.ForeignKey("users.id", ondelete=ondelete)


def _ts(name: str) -> sa.Column:
    return sa.Column(name, sa.TIMESTAMP(timezone=True), nullable=True)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=False),
        sa.Column("role", _enum(USER_ROLES, "user_role"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _ts("created_at"),
        _ts("last_seen_at"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("idx_users_active", "users", ["is_active"])

    op.create_table(
        "api_keys",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), _user_fk(), nullable=False),
        sa.Column("key_hash", sa.Text(), nullable=False),
        sa.Column("key_prefix", sa.String(12), nullable=False),
        sa.Column("name", sa.Text(), nullable=True),
        _ts("created_at"),
        _ts("last_used_at"),
        _ts("revoked_at"),
    )
    op.create_index("idx_api_keys_hash", "api_keys", ["key_hash"])

    op.create_table(
        "groups",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("leader_id", sa.Uuid(), _user_fk(), nullable=False),
        sa.Column("requires_approval", sa.Boolean(), nullable=False),
        _ts("created_at"),
    )

    op.create_table(
        "group_members",
        sa.Column(
            "group_id",
            sa.Uuid(),
            sa.ForeignKey("groups.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("user_id", sa.Uuid(), _user_fk(), primary_key=True),
        sa.Column("role", _enum(("leader", "member"), "group_member_role"), nullable=False),
        _ts("joined_at"),
    )

    op.create_table(
        "group_membership_requests",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "group_id",
            sa.Uuid(),
            sa.ForeignKey("groups.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Uuid(), _user_fk(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        _ts("created_at"),
    )
    op.create_index(
        "idx_group_requests_group", "group_membership_requests", ["group_id"]
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("author_id", sa.Uuid(), _user_fk(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("post_type", _enum(POST_TYPES, "post_type"), nullable=False),
        sa.Column(
            "visibility", _enum(POST_VISIBILITIES, "post_visibility"), nullable=False
        ),
        sa.Column(
            "group_id",
            sa.Uuid(),
            sa.ForeignKey("groups.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("youtube_url", sa.Text(), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.CheckConstraint("length(content) <= 5000", name="ck_post_content_length"),
    )
    op.create_index(
        "idx_posts_author", "posts", ["author_id", sa.text("created_at DESC")]
    )
    op.create_index("idx_posts_created", "posts", [sa.text("created_at DESC")])

    op.create_table(
        "post_likes",
        sa.Column(
            "post_id",
            sa.Uuid(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("user_id", sa.Uuid(), _user_fk(), primary_key=True),
        _ts("created_at"),
    )

    op.create_table(
        "post_shares",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "post_id",
            sa.Uuid(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Uuid(), _user_fk(), nullable=False),
        _ts("shared_at"),
    )
    op.create_index("idx_post_shares_post", "post_shares", ["post_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "post_id",
            sa.Uuid(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("author_id", sa.Uuid(), _user_fk(), nullable=False),
        sa.Column(
            "parent_comment_id",
            sa.Uuid(),
            sa.ForeignKey("comments.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        _ts("created_at"),
        sa.CheckConstraint("length(content) <= 1000", name="ck_comment_content_length"),
    )
    op.create_index("idx_comments_post", "comments", ["post_id", "created_at"])

    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("event_type", _enum(EVENT_TYPES, "event_type"), nullable=False),
        sa.Column("start_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("location_name", sa.Text(), nullable=False),
        sa.Column("location_address", sa.Text(), nullable=True),
        sa.Column("is_online", sa.Boolean(), nullable=False),
        sa.Column("online_link", sa.Text(), nullable=True),
        sa.Column("organizer_id", sa.Uuid(), _user_fk(), nullable=False),
        _ts("created_at"),
    )
    op.create_index("idx_events_start", "events", ["start_date"])

    op.create_table(
        "event_attendees",
        sa.Column(
            "event_id",
            sa.Uuid(),
            sa.ForeignKey("events.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("user_id", sa.Uuid(), _user_fk(), primary_key=True),
        sa.Column("status", _enum(RSVP_STATUSES, "rsvp_status"), nullable=False),
        _ts("registered_at"),
    )

    op.create_table(
        "sermons",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("pastor_id", sa.Uuid(), _user_fk(), nullable=False),
        sa.Column("scripture", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=True),
        _ts("preached_at"),
        _ts("created_at"),
    )
    op.create_index("idx_sermons_created", "sermons", [sa.text("created_at DESC")])

    op.create_table(
        "conversations",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("is_group", sa.Boolean(), nullable=False),
        sa.Column("group_name", sa.Text(), nullable=True),
        sa.Column("admin_id", sa.Uuid(), _user_fk("SET NULL"), nullable=True),
        sa.Column("last_message_id", sa.Uuid(), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
    )

    op.create_table(
        "conversation_participants",
        sa.Column(
            "conversation_id",
            sa.Uuid(),
            sa.ForeignKey("conversations.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("user_id", sa.Uuid(), _user_fk(), primary_key=True),
        _ts("joined_at"),
    )
    op.create_index(
        "idx_conversation_participants_user", "conversation_participants", ["user_id"]
    )

    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "conversation_id",
            sa.Uuid(),
            sa.ForeignKey("conversations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("sender_id", sa.Uuid(), _user_fk(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("message_type", _enum(MESSAGE_TYPES, "message_type"), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        _ts("created_at"),
    )
    op.create_index(
        "idx_messages_conversation", "messages", ["conversation_id", "created_at"]
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("recipient_id", sa.Uuid(), _user_fk(), nullable=False),
        sa.Column("sender_id", sa.Uuid(), _user_fk("SET NULL"), nullable=True),
        sa.Column("type", _enum(NOTIFICATION_TYPES, "notification_type"), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("link", sa.Text(), nullable=True),
        sa.Column("related_post_id", sa.Uuid(), nullable=True),
        sa.Column("related_event_id", sa.Uuid(), nullable=True),
        sa.Column("related_group_id", sa.Uuid(), nullable=True),
        sa.Column("related_prayer_id", sa.Uuid(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        _ts("read_at"),
        _ts("created_at"),
    )
    op.create_index(
        "idx_notifications_recipient",
        "notifications",
        ["recipient_id", sa.text("created_at DESC")],
    )
    op.create_index(
        "idx_notifications_unread", "notifications", ["recipient_id", "is_read"]
    )


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("messages")
    op.drop_table("conversation_participants")
    op.drop_table("conversations")
    op.drop_table("sermons")
    op.drop_table("event_attendees")
    op.drop_table("events")
    op.drop_table("comments")
    op.drop_table("post_shares")
    op.drop_table("post_likes")
    op.drop_table("posts")
    op.drop_table("group_membership_requests")
    op.drop_table("group_members")
    op.drop_table("groups")
    op.drop_table("api_keys")
    op.drop_table("users")
