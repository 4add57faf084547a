"""track when a schedule first saved its original generation

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("schedules") as batch_op:
        batch_op.add_column(sa.Column("original_saved_at", sa.DateTime(timezone=True), nullable=True))

    # Schedules that already hold original rows have saved a baseline before.
    op.execute(
        "UPDATE schedules SET original_saved_at = CURRENT_TIMESTAMP "
        "WHERE EXISTS (SELECT 1 FROM course_arrangements "
        "WHERE course_arrangements.schedule_id = schedules.id "
        "AND course_arrangements.is_original = true)"
    )


def downgrade() -> None:
    with op.batch_alter_table("schedules") as batch_op:
        batch_op.drop_column("original_saved_at")
