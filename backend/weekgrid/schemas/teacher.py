from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator


class TeacherBase(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=20)
    subject: str | None = Field(default=None, max_length=50)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("Teacher name cannot be blank")
        return name


class TeacherCreate(TeacherBase):
    pass


class TeacherUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=20)
    subject: str | None = Field(default=None, max_length=50)


class TeacherOut(BaseModel):
    id: int
    name: str
    email: str | None
    phone: str | None
    subject: str | None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
