from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator


class SemesterCreate(BaseModel):
    semester_name: str = Field(min_length=1, max_length=50)
    start_date: date
    end_date: date
    is_current: bool = True

    @model_validator(mode="after")
    def validate_range(self) -> "SemesterCreate":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class SemesterOut(BaseModel):
    id: int
    semester_name: str
    start_date: date
    end_date: date
    is_current: bool
    current_week: int | None = None
    total_weeks: int | None = None

    model_config = {"from_attributes": True}


class ScheduleCreate(BaseModel):
    teacher_id: int = Field(ge=1)
    name: str = Field(min_length=1, max_length=100)
    semester_id: int | None = Field(default=None, ge=1)
    notes: str | None = Field(default=None, max_length=2000)


class ScheduleUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    is_active: bool | None = None
    is_archived: bool | None = None
    notes: str | None = Field(default=None, max_length=2000)


class ScheduleOut(BaseModel):
    id: int
    teacher_id: int
    teacher_name: str | None = None
    name: str
    semester_id: int
    is_active: bool
    is_archived: bool
    archived_at: datetime | None = None
    notes: str | None = None
    original_saved_at: datetime | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class OperationOut(BaseModel):
    id: int
    schedule_id: int
    operation_type: str
    old_data: dict
    new_data: dict
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
