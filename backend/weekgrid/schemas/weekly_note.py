from datetime import datetime

from pydantic import BaseModel, Field


class WeeklyNoteUpsert(BaseModel):
    teacher_id: int = Field(ge=1)
    schedule_id: int = Field(ge=1)
    year: int = Field(ge=2000, le=2100)
    week_number: int = Field(ge=1, le=53)
    content: str = Field(default="", max_length=20000)


class WeeklyNoteOut(BaseModel):
    id: int | None = None
    teacher_id: int
    schedule_id: int
    year: int
    week_number: int
    content: str
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
