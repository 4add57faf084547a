from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from weekgrid.api.deps import get_db
from weekgrid.core.exceptions import ResourceNotFoundError
from weekgrid.models.schedule import Schedule
from weekgrid.models.weekly_note import WeeklyNote
from weekgrid.schemas.weekly_note import WeeklyNoteOut, WeeklyNoteUpsert

router = APIRouter()


def _find_note(db: Session, teacher_id: int, schedule_id: int, year: int, week_number: int) -> WeeklyNote | None:
    return db.execute(
        select(WeeklyNote).where(
            WeeklyNote.teacher_id == teacher_id,
            WeeklyNote.schedule_id == schedule_id,
            WeeklyNote.year == year,
            WeeklyNote.week_number == week_number,
        )
    ).scalar_one_or_none()


@router.get("/{teacher_id}/{schedule_id}/{year}/{week_number}", response_model=WeeklyNoteOut)
def get_weekly_note(
    teacher_id: int,
    schedule_id: int,
    year: int,
    week_number: int,
    db: Session = Depends(get_db),
) -> WeeklyNoteOut:
    note = _find_note(db, teacher_id, schedule_id, year, week_number)
    if note is None:
        # An unwritten week reads as an empty note.
        return WeeklyNoteOut(
            teacher_id=teacher_id,
            schedule_id=schedule_id,
            year=year,
            week_number=week_number,
            content="",
        )
    return WeeklyNoteOut.model_validate(note)


@router.post("/", response_model=WeeklyNoteOut)
def upsert_weekly_note(payload: WeeklyNoteUpsert, db: Session = Depends(get_db)) -> WeeklyNoteOut:
    schedule = db.get(Schedule, payload.schedule_id)
    if schedule is None or schedule.teacher_id != payload.teacher_id:
        raise ResourceNotFoundError("Schedule", payload.schedule_id)

    note = _find_note(db, payload.teacher_id, payload.schedule_id, payload.year, payload.week_number)
    if note is None:
        note = WeeklyNote(**payload.model_dump())
        db.add(note)
    else:
        note.content = payload.content
    db.commit()
    db.refresh(note)
    return WeeklyNoteOut.model_validate(note)
