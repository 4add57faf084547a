"""create teachers, semesters, schedules and arrangements

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "teachers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=100), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("name", name="uq_teachers_name"),
    )
    op.create_table(
        "semester_config",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("semester_name", sa.String(length=50), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "schedules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("semester_id", sa.Integer(), sa.ForeignKey("semester_config.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_schedules_teacher_id", "schedules", ["teacher_id"])
    op.create_table(
        "course_arrangements",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("schedule_id", sa.Integer(), sa.ForeignKey("schedules.id"), nullable=False),
        sa.Column("course_type", sa.String(length=20), nullable=False, server_default="regular"),
        sa.Column("weekday", sa.Integer(), nullable=True),
        sa.Column("time_slot", sa.Integer(), nullable=False),
        sa.Column("specific_date", sa.Date(), nullable=True),
        sa.Column("course_name", sa.String(length=100), nullable=False),
        sa.Column("classroom", sa.String(length=50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_original", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_course_arrangements_schedule_generation",
        "course_arrangements",
        ["schedule_id", "is_original"],
    )
    op.create_table(
        "operation_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("schedule_id", sa.Integer(), sa.ForeignKey("schedules.id"), nullable=False),
        sa.Column("operation_type", sa.String(length=20), nullable=False),
        sa.Column("old_data", sa.JSON(), nullable=False),
        sa.Column("new_data", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_operation_history_schedule_id", "operation_history", ["schedule_id"])


def downgrade() -> None:
    op.drop_index("ix_operation_history_schedule_id", table_name="operation_history")
    op.drop_table("operation_history")
    op.drop_index("ix_course_arrangements_schedule_generation", table_name="course_arrangements")
    op.drop_table("course_arrangements")
    op.drop_index("ix_schedules_teacher_id", table_name="schedules")
    op.drop_table("schedules")
    op.drop_table("semester_config")
    op.drop_table("teachers")
