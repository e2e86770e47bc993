"""Initial schema: users, skills, swap requests, conversations, messages, ratings.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SWAP_STATUS = sa.Enum(
    "PENDING", "ACCEPTED", "REJECTED", "CANCELLED", "COMPLETED", name="swap_status"
)
MESSAGE_TYPE = sa.Enum("TEXT", "IMAGE", name="message_type")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.TIMESTAMP, server_default=sa.func.now()),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "skills",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("category", sa.String(50)),
        sa.Column("description", sa.Text),
        sa.Column("skill_type", sa.String(20), nullable=False, server_default="offered"),
        sa.Column("created_at", sa.TIMESTAMP, server_default=sa.func.now()),
    )
    op.create_index("ix_skills_id", "skills", ["id"])
    op.create_index("ix_skills_user_id", "skills", ["user_id"])

    op.create_table(
        "swap_requests",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("from_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("to_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("skill_offered_id", sa.Integer, sa.ForeignKey("skills.id"), nullable=False),
        sa.Column("skill_wanted_id", sa.Integer, sa.ForeignKey("skills.id"), nullable=False),
        sa.Column("status", SWAP_STATUS, nullable=False, server_default="PENDING"),
        sa.Column("message", sa.Text),
        sa.Column("created_at", sa.TIMESTAMP, nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP, nullable=False),
        sa.CheckConstraint("from_user_id <> to_user_id", name="check_swap_distinct_users"),
    )
    op.create_index("ix_swap_requests_id", "swap_requests", ["id"])
    op.create_index("ix_swap_requests_from_user_id", "swap_requests", ["from_user_id"])
    op.create_index("ix_swap_requests_to_user_id", "swap_requests", ["to_user_id"])
    op.create_index("ix_swap_requests_status", "swap_requests", ["status"])
    op.create_index("ix_swap_requests_updated_at", "swap_requests", ["updated_at"])

    op.create_table(
        "conversations",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("participant_key", sa.String(64), nullable=False),
        sa.Column(
            "swap_request_id",
            sa.Integer,
            sa.ForeignKey("swap_requests.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.TIMESTAMP, nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP, nullable=False),
        sa.UniqueConstraint("participant_key", name="uq_conversations_participant_key"),
    )
    op.create_index("ix_conversations_id", "conversations", ["id"])
    op.create_index("ix_conversations_swap_request_id", "conversations", ["swap_request_id"])
    op.create_index("ix_conversations_updated_at", "conversations", ["updated_at"])

    op.create_table(
        "conversation_participants",
        sa.Column(
            "conversation_id",
            sa.Integer,
            sa.ForeignKey("conversations.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "user_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("last_read_at", sa.TIMESTAMP, nullable=True),
    )
    op.create_index(
        "ix_conversation_participants_user_id", "conversation_participants", ["user_id"]
    )

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "conversation_id",
            sa.Integer,
            sa.ForeignKey("conversations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("sender_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("type", MESSAGE_TYPE, nullable=False, server_default="TEXT"),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.TIMESTAMP, nullable=False),
    )
    op.create_index("ix_messages_id", "messages", ["id"])
    op.create_index("ix_messages_conversation_id", "messages", ["conversation_id"])
    op.create_index("ix_messages_sender_id", "messages", ["sender_id"])
    op.create_index("ix_messages_created_at", "messages", ["created_at"])

    op.create_table(
        "ratings",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("swap_id", sa.Integer, sa.ForeignKey("swap_requests.id"), nullable=False),
        sa.Column("from_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("to_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text),
        sa.Column("created_at", sa.TIMESTAMP, nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP, nullable=False),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="check_rating_range"),
        sa.UniqueConstraint("swap_id", "from_user_id", name="uq_rating_swap_rater"),
    )
    op.create_index("ix_ratings_id", "ratings", ["id"])
    op.create_index("ix_ratings_swap_id", "ratings", ["swap_id"])
    op.create_index("ix_ratings_from_user_id", "ratings", ["from_user_id"])
    op.create_index("ix_ratings_to_user_id", "ratings", ["to_user_id"])


def downgrade() -> None:
    op.drop_table("ratings")
    op.drop_table("messages")
    op.drop_table("conversation_participants")
    op.drop_table("conversations")
    op.drop_table("swap_requests")
    op.drop_table("skills")
    op.drop_table("users")
    SWAP_STATUS.drop(op.get_bind(), checkfirst=True)
    MESSAGE_TYPE.drop(op.get_bind(), checkfirst=True)
