"""Seed demo teachers, a current semester and a starter weekly schedule.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import func, select

from weekgrid.db.bootstrap import ensure_runtime_schema_compatibility
from weekgrid.db.session import SessionLocal
from weekgrid.models.arrangement import Arrangement, ArrangementKind
from weekgrid.models.schedule import Schedule
from weekgrid.models.semester import Semester
from weekgrid.models.teacher import Teacher

DEMO_TEACHERS = [
    {"name": "张老师", "email": "zhang@school.com", "subject": "信息科技"},
    {"name": "李老师", "email": "li@school.com", "subject": None},
    {"name": "王老师", "email": "wang@school.com", "subject": None},
]

DEMO_SEMESTER = {
    "semester_name": "2024学年第一学期",
    "start_date": date(2024, 9, 1),
    "end_date": date(2025, 1, 20),
}

# (weekday, time_slot, classroom) for the first teacher's 信息科技 lessons
STARTER_LESSONS = [
    (1, 3, "505"),
    (2, 3, "601"),
    (3, 3, "611"),
    (5, 3, "608"),
    (1, 5, "609"),
    (2, 6, "604"),
    (3, 6, "606"),
    (4, 6, "605"),
    (5, 6, "503"),
    (1, 7, "501"),
    (2, 7, "612"),
    (3, 7, "610"),
]


def upsert_teachers(session) -> list[Teacher]:
    teachers = []
    for profile in DEMO_TEACHERS:
        existing = session.execute(select(Teacher).where(Teacher.name == profile["name"])).scalar_one_or_none()
        if existing is None:
            existing = Teacher(**profile)
            session.add(existing)
        else:
            existing.email = profile["email"]
            existing.subject = profile["subject"] or existing.subject
        teachers.append(existing)
    session.flush()
    return teachers


def upsert_current_semester(session) -> Semester:
    existing = session.execute(
        select(Semester).where(Semester.semester_name == DEMO_SEMESTER["semester_name"])
    ).scalar_one_or_none()
    if existing is None:
        existing = Semester(**DEMO_SEMESTER, is_current=True)
        session.add(existing)
    else:
        existing.start_date = DEMO_SEMESTER["start_date"]
        existing.end_date = DEMO_SEMESTER["end_date"]
        existing.is_current = True
    session.flush()
    return existing


def upsert_schedule(session, teacher: Teacher, semester: Semester) -> Schedule:
    name = f"{teacher.name}课程表"
    existing = session.execute(
        select(Schedule).where(Schedule.teacher_id == teacher.id, Schedule.name == name)
    ).scalar_one_or_none()
    if existing is None:
        existing = Schedule(teacher_id=teacher.id, name=name, semester_id=semester.id, is_active=True)
        session.add(existing)
        session.flush()
    return existing


def seed_starter_lessons(session, schedule: Schedule) -> int:
    already_seeded = session.execute(
        select(func.count(Arrangement.id)).where(Arrangement.schedule_id == schedule.id)
    ).scalar_one()
    if already_seeded:
        return 0
    for weekday, time_slot, classroom in STARTER_LESSONS:
        session.add(
            Arrangement(
                schedule_id=schedule.id,
                course_type=ArrangementKind.regular,
                weekday=weekday,
                time_slot=time_slot,
                course_name="信息科技",
                classroom=classroom,
                is_original=False,
            )
        )
    return len(STARTER_LESSONS)


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        teachers = upsert_teachers(session)
        semester = upsert_current_semester(session)
        schedules = [upsert_schedule(session, teacher, semester) for teacher in teachers]
        lesson_count = seed_starter_lessons(session, schedules[0])
        session.commit()

    print("Demo data seeded successfully.")
    print("")
    print(f"Semester: {semester.semester_name} ({semester.start_date} - {semester.end_date})")
    print(f"Teachers: {', '.join(teacher.name for teacher in teachers)}")
    print(f"Schedules: {len(schedules)}")
    print(f"Starter lessons added: {lesson_count}")


if __name__ == "__main__":
    main()
