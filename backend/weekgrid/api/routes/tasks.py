from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from weekgrid.api.deps import get_db
from weekgrid.core.exceptions import ResourceNotFoundError
from weekgrid.models.schedule import Schedule
from weekgrid.models.task import Task, TaskPriority, TaskStatus
from weekgrid.models.teacher import Teacher
from weekgrid.schemas.task import TaskCreate, TaskOut, TaskStats, TaskUpdate

router = APIRouter()

_PRIORITY_ORDER = case(
    (Task.priority_level == TaskPriority.high, 0),
    (Task.priority_level == TaskPriority.medium, 1),
    else_=2,
)
_STATUS_ORDER = case((Task.status == TaskStatus.pending, 0), else_=1)


def _get_task(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if task is None:
        raise ResourceNotFoundError("Task", task_id)
    return task


@router.get("/course/{schedule_id}/{weekday}/{time_slot}", response_model=list[TaskOut])
def list_course_tasks(
    schedule_id: int,
    weekday: int,
    time_slot: int,
    db: Session = Depends(get_db),
) -> list[TaskOut]:
    query = (
        select(Task)
        .where(Task.schedule_id == schedule_id, Task.weekday == weekday, Task.time_slot == time_slot)
        .order_by(_STATUS_ORDER, _PRIORITY_ORDER, Task.id)
    )
    return list(db.execute(query).scalars())


@router.get("/teacher/{teacher_id}", response_model=list[TaskOut])
def list_teacher_tasks(
    teacher_id: int,
    task_status: TaskStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
) -> list[TaskOut]:
    query = select(Task).where(Task.teacher_id == teacher_id)
    if task_status is not None:
        query = query.where(Task.status == task_status)
    query = query.order_by(_STATUS_ORDER, _PRIORITY_ORDER, Task.task_date, Task.id)
    return list(db.execute(query).scalars())


@router.get("/teacher/{teacher_id}/stats", response_model=TaskStats)
def get_teacher_task_stats(teacher_id: int, db: Session = Depends(get_db)) -> TaskStats:
    row = db.execute(
        select(
            func.count(Task.id),
            func.sum(case((Task.status == TaskStatus.pending, 1), else_=0)),
            func.sum(case((Task.status == TaskStatus.completed, 1), else_=0)),
            func.sum(
                case(
                    ((Task.priority_level == TaskPriority.high) & (Task.status == TaskStatus.pending), 1),
                    else_=0,
                )
            ),
        ).where(Task.teacher_id == teacher_id)
    ).one()
    total, pending, completed, high = (value or 0 for value in row)
    return TaskStats(total=total, pending=pending, completed=completed, high=high)


@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(payload: TaskCreate, db: Session = Depends(get_db)) -> TaskOut:
    if db.get(Teacher, payload.teacher_id) is None:
        raise ResourceNotFoundError("Teacher", payload.teacher_id)
    if payload.schedule_id is not None and db.get(Schedule, payload.schedule_id) is None:
        raise ResourceNotFoundError("Schedule", payload.schedule_id)
    task = Task(**payload.model_dump(), status=TaskStatus.pending)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@router.put("/{task_id}", response_model=TaskOut)
def update_task(task_id: int, payload: TaskUpdate, db: Session = Depends(get_db)) -> TaskOut:
    task = _get_task(db, task_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(task, key, value)
    db.commit()
    db.refresh(task)
    return task


@router.delete("/{task_id}")
def delete_task(task_id: int, db: Session = Depends(get_db)) -> dict:
    task = _get_task(db, task_id)
    db.delete(task)
    db.commit()
    return {"message": "Task deleted"}
