"""count community likes from like rows

Revision ID: c41e07d9a2f3
Revises: 8a3f6b2c5d71
Create Date: 2026-10-19 10:15:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "c41e07d9a2f3"
down_revision = "8a3f6b2c5d71"
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table("community_updates", schema=None) as batch_op:
        batch_op.drop_column("likes")


def downgrade():
    with op.batch_alter_table("community_updates", schema=None) as batch_op:
        batch_op.add_column(sa.Column("likes", sa.Integer(), nullable=False, server_default="0"))

    op.execute(
        "UPDATE community_updates SET likes = "
        "(SELECT COUNT(*) FROM community_likes WHERE community_likes.update_id = community_updates.id)"
    )

    with op.batch_alter_table("community_updates", schema=None) as batch_op:
        batch_op.alter_column("likes", server_default=None)
