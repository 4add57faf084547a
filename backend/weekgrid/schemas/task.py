from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from weekgrid.models.task import TaskPriority, TaskStatus, TaskType


class TaskCreate(BaseModel):
    teacher_id: int = Field(ge=1)
    schedule_id: int | None = Field(default=None, ge=1)
    weekday: int | None = Field(default=None, ge=1, le=7)
    time_slot: int | None = Field(default=None, ge=1, le=9)
    task_date: date | None = None
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    task_type: TaskType = TaskType.general
    priority_level: TaskPriority = TaskPriority.medium

    @model_validator(mode="after")
    def validate_course_anchor(self) -> "TaskCreate":
        if self.task_type == TaskType.course and None in (self.schedule_id, self.weekday, self.time_slot):
            raise ValueError("Course tasks need schedule_id, weekday and time_slot")
        return self


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    task_date: date | None = None
    priority_level: TaskPriority | None = None
    status: TaskStatus | None = None


class TaskOut(BaseModel):
    id: int
    teacher_id: int
    schedule_id: int | None
    weekday: int | None
    time_slot: int | None
    task_date: date | None
    title: str
    description: str | None
    task_type: TaskType
    priority_level: TaskPriority
    status: TaskStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class TaskStats(BaseModel):
    total: int = 0
    pending: int = 0
    completed: int = 0
    high: int = 0
