from datetime import date
from math import ceil

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from weekgrid.api.deps import get_db, get_store, get_today
from weekgrid.core.exceptions import ResourceNotFoundError
from weekgrid.models.semester import Semester
from weekgrid.schemas.arrangement import ArrangementOut
from weekgrid.schemas.schedule import SemesterCreate, SemesterOut
from weekgrid.services.grid import DAYS_PER_WEEK, current_week_number
from weekgrid.services.reconciliation import ReconciliationStore

router = APIRouter()


def _semester_out(semester: Semester, today: date) -> SemesterOut:
    payload = SemesterOut.model_validate(semester)
    payload.current_week = current_week_number(semester.start_date, today)
    payload.total_weeks = ceil(((semester.end_date - semester.start_date).days + 1) / DAYS_PER_WEEK)
    return payload


@router.get("/semester/current", response_model=SemesterOut)
def get_current_semester(db: Session = Depends(get_db), today: date = Depends(get_today)) -> SemesterOut:
    semester = db.execute(
        select(Semester).where(Semester.is_current.is_(True)).order_by(Semester.id.desc()).limit(1)
    ).scalar_one_or_none()
    if semester is None:
        raise ResourceNotFoundError("Semester", "current")
    return _semester_out(semester, today)


@router.post("/semester", response_model=SemesterOut, status_code=status.HTTP_201_CREATED)
def create_semester(
    payload: SemesterCreate,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
) -> SemesterOut:
    if payload.is_current:
        db.execute(update(Semester).values(is_current=False))
    semester = Semester(**payload.model_dump())
    db.add(semester)
    db.commit()
    db.refresh(semester)
    return _semester_out(semester, today)


@router.get("/week/{week}/special-care", response_model=list[ArrangementOut])
def get_week_special_care(
    week: int,
    schedule_id: int = Query(alias="scheduleId", ge=1),
    store: ReconciliationStore = Depends(get_store),
) -> list[ArrangementOut]:
    return [ArrangementOut.model_validate(row) for row in store.week_view(schedule_id, week).special_care]
