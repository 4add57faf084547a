from __future__ import annotations

import logging

from sqlalchemy import inspect, text

import weekgrid.models  # noqa: F401
from weekgrid.db.base import Base
from weekgrid.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "teachers": {"id", "name", "subject"},
    "semester_config": {"id", "start_date", "end_date", "is_current"},
    "schedules": {"id", "teacher_id", "semester_id", "is_active", "is_archived", "original_saved_at"},
    "course_arrangements": {
        "id",
        "schedule_id",
        "course_type",
        "weekday",
        "time_slot",
        "specific_date",
        "course_name",
        "is_original",
    },
    "operation_history": {"id", "schedule_id", "operation_type", "old_data", "new_data"},
}

# Columns added after the first release; older databases get them patched in place.
SCHEDULE_ADDITIVE_COLUMNS: dict[str, dict[str, str]] = {
    "is_archived": {
        "postgresql": "BOOLEAN NOT NULL DEFAULT FALSE",
        "default": "BOOLEAN NOT NULL DEFAULT 0",
    },
    "archived_at": {"postgresql": "TIMESTAMP WITH TIME ZONE", "default": "DATETIME"},
    "notes": {"postgresql": "TEXT", "default": "TEXT"},
    "original_saved_at": {"postgresql": "TIMESTAMP WITH TIME ZONE", "default": "DATETIME"},
}


def _ensure_teachers_subject_column() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "teachers" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("teachers")}
        if "subject" in column_names:
            return
        connection.execute(text("ALTER TABLE teachers ADD COLUMN subject VARCHAR(50)"))


def _ensure_schedule_archive_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "schedules" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("schedules")}
        dialect = "postgresql" if connection.dialect.name == "postgresql" else "default"
        for column_name, definitions in SCHEDULE_ADDITIVE_COLUMNS.items():
            if column_name in column_names:
                continue
            connection.execute(text(f"ALTER TABLE schedules ADD COLUMN {column_name} {definitions[dialect]}"))


def _backfill_original_saved_at() -> None:
    """Schedules that already hold original rows count as having saved a baseline."""
    with engine.begin() as connection:
        connection.execute(
            text(
                "UPDATE schedules SET original_saved_at = CURRENT_TIMESTAMP "
                "WHERE original_saved_at IS NULL AND EXISTS ("
                "SELECT 1 FROM course_arrangements "
                "WHERE course_arrangements.schedule_id = schedules.id "
                "AND course_arrangements.is_original = :flag)"
            ),
            {"flag": True},
        )


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Missing tables first, then additive patches on tables that predate them.
        Base.metadata.create_all(bind=engine)
        _ensure_teachers_subject_column()
        _ensure_schedule_archive_columns()
        _backfill_original_saved_at()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
