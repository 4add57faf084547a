"""add schedule archive columns and teacher subject

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("schedules") as batch_op:
        batch_op.add_column(sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.text("false")))
        batch_op.add_column(sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True))
        batch_op.add_column(sa.Column("notes", sa.Text(), nullable=True))
    with op.batch_alter_table("teachers") as batch_op:
        batch_op.add_column(sa.Column("subject", sa.String(length=50), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("teachers") as batch_op:
        batch_op.drop_column("subject")
    with op.batch_alter_table("schedules") as batch_op:
        batch_op.drop_column("notes")
        batch_op.drop_column("archived_at")
        batch_op.drop_column("is_archived")
