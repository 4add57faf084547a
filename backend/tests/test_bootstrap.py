import pytest

from weekgrid.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(bootstrap, "_ensure_teachers_subject_column", lambda: None)
    monkeypatch.setattr(bootstrap, "_ensure_schedule_archive_columns", lambda: None)
    monkeypatch.setattr(bootstrap, "_backfill_original_saved_at", lambda: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_bootstrap_patches_legacy_schedule_table(monkeypatch, tmp_path):
    from sqlalchemy import create_engine, inspect, text

    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'legacy.db'}")
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE teachers (id INTEGER PRIMARY KEY, name VARCHAR(50) NOT NULL)"))
        connection.execute(
            text(
                "CREATE TABLE schedules (id INTEGER PRIMARY KEY, teacher_id INTEGER NOT NULL, "
                "name VARCHAR(100) NOT NULL, semester_id INTEGER NOT NULL, is_active BOOLEAN NOT NULL DEFAULT 1)"
            )
        )
        connection.execute(text("INSERT INTO schedules (id, teacher_id, name, semester_id) VALUES (1, 1, 'old', 1)"))
    monkeypatch.setattr(bootstrap, "engine", engine)

    bootstrap.ensure_runtime_schema_compatibility()

    inspector = inspect(engine)
    schedule_columns = {item["name"] for item in inspector.get_columns("schedules")}
    assert {"is_archived", "archived_at", "notes", "original_saved_at"} <= schedule_columns
    assert "subject" in {item["name"] for item in inspector.get_columns("teachers")}
    assert "course_arrangements" in inspector.get_table_names()
    engine.dispose()
