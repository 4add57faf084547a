import os
from datetime import date

# Settings are cached on first import; keep the app off the default Postgres URL.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import weekgrid.models  # noqa: F401
from weekgrid.api.deps import get_db, get_today
from weekgrid.db.base import Base
from weekgrid.main import app
from weekgrid.models.schedule import Schedule
from weekgrid.models.semester import Semester
from weekgrid.models.teacher import Teacher

SEMESTER_START = date(2024, 9, 2)
# Wednesday of week 3
TODAY = date(2024, 9, 18)


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def schedule(db_session) -> Schedule:
    teacher = Teacher(name="张老师", email="zhang@school.com")
    semester = Semester(
        semester_name="2024学年第一学期",
        start_date=SEMESTER_START,
        end_date=date(2025, 1, 17),
        is_current=True,
    )
    db_session.add_all([teacher, semester])
    db_session.flush()
    record = Schedule(
        teacher_id=teacher.id,
        name="张老师课程表",
        semester_id=semester.id,
        is_active=True,
        is_archived=False,
    )
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def anyio_backend():
    return "asyncio"
