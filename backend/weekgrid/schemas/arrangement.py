from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from weekgrid.models.arrangement import ArrangementKind
from weekgrid.services.grid import SPECIAL_CARE_SLOT
from weekgrid.services.reconciliation import ArrangementDraft

# Request bodies keep required placement fields optional on purpose: the
# reconciliation store is the gate that reports what is missing.


class CourseCreate(BaseModel):
    schedule_id: int | None = Field(default=None, alias="scheduleId")
    weekday: int | None = None
    time_slot: int | None = Field(default=None, alias="timeSlot")
    course_name: str | None = Field(default=None, alias="courseName", max_length=100)
    classroom: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=2000)
    is_edit_mode: bool = Field(default=False, alias="isEditMode")

    model_config = {"populate_by_name": True}

    def to_draft(self) -> ArrangementDraft:
        return ArrangementDraft(
            schedule_id=self.schedule_id,
            kind=ArrangementKind.regular,
            course_name=self.course_name,
            weekday=self.weekday,
            time_slot=self.time_slot,
            classroom=self.classroom,
            notes=self.notes,
        )


class SpecialCareCreate(BaseModel):
    schedule_id: int | None = Field(default=None, alias="scheduleId")
    specific_date: date | None = Field(default=None, alias="specificDate")
    course_name: str | None = Field(default=None, alias="courseName", max_length=100)
    classroom: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=2000)
    is_edit_mode: bool = Field(default=False, alias="isEditMode")

    model_config = {"populate_by_name": True}

    def to_draft(self) -> ArrangementDraft:
        return ArrangementDraft(
            schedule_id=self.schedule_id,
            kind=ArrangementKind.special_care,
            course_name=self.course_name,
            time_slot=SPECIAL_CARE_SLOT,
            specific_date=self.specific_date,
            classroom=self.classroom,
            notes=self.notes,
        )


class CourseMove(BaseModel):
    weekday: int | None = None
    time_slot: int | None = Field(default=None, alias="timeSlot")
    schedule_id: int | None = Field(default=None, alias="scheduleId")

    model_config = {"populate_by_name": True}


class CourseUpdate(BaseModel):
    course_name: str | None = Field(default=None, alias="courseName", min_length=1, max_length=100)
    classroom: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=2000)

    model_config = {"populate_by_name": True}


class SpecialCareUpdate(BaseModel):
    specific_date: date | None = Field(default=None, alias="specificDate")
    course_name: str | None = Field(default=None, alias="courseName", max_length=100)
    classroom: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=2000)

    model_config = {"populate_by_name": True}


class ArrangementOut(BaseModel):
    id: int
    schedule_id: int
    course_type: ArrangementKind
    weekday: int | None
    time_slot: int
    specific_date: date | None
    course_name: str
    classroom: str | None
    notes: str | None
    is_original: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class OriginalScheduleOut(BaseModel):
    regular_courses: list[ArrangementOut] = Field(alias="regularCourses")
    special_care: list[ArrangementOut] = Field(alias="specialCare")

    model_config = {"populate_by_name": True}


class WeekScheduleOut(OriginalScheduleOut):
    week: int
    week_start: date = Field(alias="weekStart")
    week_end: date = Field(alias="weekEnd")


class CreatedOut(BaseModel):
    id: int
    is_original: bool = Field(alias="isOriginal")
    message: str

    model_config = {"populate_by_name": True}


class MoveOut(BaseModel):
    message: str
    course_id: int = Field(alias="courseId")
    original_kept: bool = Field(alias="originalKept")

    model_config = {"populate_by_name": True}


class ReconcileOut(BaseModel):
    message: str
    original_count: int = Field(alias="originalCount")
    working_count: int = Field(alias="workingCount")

    model_config = {"populate_by_name": True}


class MessageOut(BaseModel):
    message: str
    changes: int = 0
