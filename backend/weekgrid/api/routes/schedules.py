from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from weekgrid.api.deps import get_db, get_store
from weekgrid.core.exceptions import ResourceNotFoundError, ValidationError
from weekgrid.models.schedule import Schedule
from weekgrid.models.semester import Semester
from weekgrid.models.teacher import Teacher
from weekgrid.schemas.arrangement import (
    ArrangementOut,
    OriginalScheduleOut,
    ReconcileOut,
    WeekScheduleOut,
)
from weekgrid.schemas.schedule import OperationOut, ScheduleCreate, ScheduleOut, ScheduleUpdate
from weekgrid.services.audit import list_operations
from weekgrid.services.reconciliation import GenerationView, ReconciliationStore, WeekView

router = APIRouter()


def _schedule_out(schedule: Schedule) -> ScheduleOut:
    payload = ScheduleOut.model_validate(schedule)
    payload.teacher_name = schedule.teacher.name if schedule.teacher is not None else None
    return payload


def original_payload(view: GenerationView) -> OriginalScheduleOut:
    return OriginalScheduleOut(
        regular_courses=[ArrangementOut.model_validate(row) for row in view.regular],
        special_care=[ArrangementOut.model_validate(row) for row in view.special_care],
    )


def week_payload(view: WeekView) -> WeekScheduleOut:
    return WeekScheduleOut(
        week=view.week,
        week_start=view.date_range.start,
        week_end=view.date_range.end,
        regular_courses=[ArrangementOut.model_validate(row) for row in view.regular],
        special_care=[ArrangementOut.model_validate(row) for row in view.special_care],
    )


@router.get("/teacher/{teacher_id}", response_model=ScheduleOut)
def get_active_schedule(teacher_id: int, db: Session = Depends(get_db)) -> ScheduleOut:
    if db.get(Teacher, teacher_id) is None:
        raise ResourceNotFoundError("Teacher", teacher_id)
    schedule = db.execute(
        select(Schedule)
        .where(
            Schedule.teacher_id == teacher_id,
            Schedule.is_active.is_(True),
            Schedule.is_archived.is_(False),
        )
        .order_by(Schedule.id.desc())
        .limit(1)
    ).scalar_one_or_none()
    if schedule is None:
        raise ResourceNotFoundError("Active schedule for teacher", teacher_id)
    return _schedule_out(schedule)


@router.post("/", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
def create_schedule(payload: ScheduleCreate, db: Session = Depends(get_db)) -> ScheduleOut:
    if db.get(Teacher, payload.teacher_id) is None:
        raise ResourceNotFoundError("Teacher", payload.teacher_id)

    semester_id = payload.semester_id
    if semester_id is None:
        current = db.execute(
            select(Semester).where(Semester.is_current.is_(True)).order_by(Semester.id.desc()).limit(1)
        ).scalar_one_or_none()
        if current is None:
            raise ValidationError("No current semester is configured", details={"field": "semester_id"})
        semester_id = current.id
    elif db.get(Semester, semester_id) is None:
        raise ResourceNotFoundError("Semester", semester_id)

    schedule = Schedule(
        teacher_id=payload.teacher_id,
        name=payload.name.strip(),
        semester_id=semester_id,
        notes=payload.notes,
        is_active=True,
        is_archived=False,
    )
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    return _schedule_out(schedule)


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_schedule(schedule_id: int, store: ReconciliationStore = Depends(get_store)) -> ScheduleOut:
    return _schedule_out(store.get_schedule(schedule_id))


@router.put("/{schedule_id}", response_model=ScheduleOut)
def update_schedule(
    schedule_id: int,
    payload: ScheduleUpdate,
    db: Session = Depends(get_db),
) -> ScheduleOut:
    schedule = db.get(Schedule, schedule_id)
    if schedule is None:
        raise ResourceNotFoundError("Schedule", schedule_id)

    data = payload.model_dump(exclude_unset=True)
    if "is_archived" in data and data["is_archived"] != schedule.is_archived:
        schedule.archived_at = datetime.now(timezone.utc) if data["is_archived"] else None
    for key, value in data.items():
        setattr(schedule, key, value)
    db.commit()
    db.refresh(schedule)
    return _schedule_out(schedule)


@router.get("/{schedule_id}/week/{week}", response_model=WeekScheduleOut)
def get_week_schedule(
    schedule_id: int,
    week: int,
    store: ReconciliationStore = Depends(get_store),
) -> WeekScheduleOut:
    return week_payload(store.week_view(schedule_id, week))


@router.get("/{schedule_id}/original", response_model=OriginalScheduleOut)
def get_original_schedule(
    schedule_id: int,
    store: ReconciliationStore = Depends(get_store),
) -> OriginalScheduleOut:
    return original_payload(store.list_original(schedule_id))


@router.post("/{schedule_id}/save-original", response_model=ReconcileOut)
def save_original_schedule(
    schedule_id: int,
    store: ReconciliationStore = Depends(get_store),
) -> ReconcileOut:
    result = store.save_as_original(schedule_id)
    return ReconcileOut(
        message="Original schedule saved",
        original_count=result.original_count,
        working_count=result.working_count,
    )


@router.post("/{schedule_id}/reset", response_model=ReconcileOut)
def reset_schedule(
    schedule_id: int,
    store: ReconciliationStore = Depends(get_store),
) -> ReconcileOut:
    result = store.reset(schedule_id)
    return ReconcileOut(
        message="Schedule reset to the original",
        original_count=result.original_count,
        working_count=result.working_count,
    )


@router.get("/{schedule_id}/history", response_model=list[OperationOut])
def get_schedule_history(
    schedule_id: int,
    limit: int = Query(default=100, ge=1, le=500),
    store: ReconciliationStore = Depends(get_store),
) -> list[OperationOut]:
    store.get_schedule(schedule_id)
    return [OperationOut.model_validate(item) for item in list_operations(store.db, schedule_id=schedule_id, limit=limit)]
