"""add community updates, likes and accountability buddies

Revision ID: 8a3f6b2c5d71
Revises: 2c7d1e9a4b10
Create Date: 2026-10-06 16:40:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "8a3f6b2c5d71"
down_revision = "2c7d1e9a4b10"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "community_updates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("community_updates", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_community_updates_user_id"), ["user_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_community_updates_kind"), ["kind"], unique=False)
        batch_op.create_index(batch_op.f("ix_community_updates_created_at"), ["created_at"], unique=False)

    with op.batch_alter_table("community_updates", schema=None) as batch_op:
        batch_op.alter_column("likes", server_default=None)

    op.create_table(
        "community_likes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("update_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["update_id"], ["community_updates.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("update_id", "user_id", name="uq_community_likes_update_user"),
    )
    with op.batch_alter_table("community_likes", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_community_likes_update_id"), ["update_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_community_likes_user_id"), ["user_id"], unique=False)

    op.create_table(
        "accountability_buddies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("buddy_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["buddy_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "buddy_id", name="uq_accountability_buddies_pair"),
    )
    with op.batch_alter_table("accountability_buddies", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_accountability_buddies_user_id"), ["user_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_accountability_buddies_buddy_id"), ["buddy_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_accountability_buddies_status"), ["status"], unique=False)


def downgrade():
    with op.batch_alter_table("accountability_buddies", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_accountability_buddies_status"))
        batch_op.drop_index(batch_op.f("ix_accountability_buddies_buddy_id"))
        batch_op.drop_index(batch_op.f("ix_accountability_buddies_user_id"))
    op.drop_table("accountability_buddies")

    with op.batch_alter_table("community_likes", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_community_likes_user_id"))
        batch_op.drop_index(batch_op.f("ix_community_likes_update_id"))
    op.drop_table("community_likes")

    with op.batch_alter_table("community_updates", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_community_updates_created_at"))
        batch_op.drop_index(batch_op.f("ix_community_updates_kind"))
        batch_op.drop_index(batch_op.f("ix_community_updates_user_id"))
    op.drop_table("community_updates")
