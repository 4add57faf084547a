from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from weekgrid.db.base import Base


class ArrangementKind(str, Enum):
    regular = "regular"
    special_care = "special_care"


class Generation(str, Enum):
    """The two generations a schedule keeps: the saved baseline and the live working copy."""

    original = "original"
    working = "working"

    @property
    def is_original(self) -> bool:
        return self is Generation.original

    @classmethod
    def from_flag(cls, is_original: bool) -> "Generation":
        return cls.original if is_original else cls.working


# Columns copied verbatim when a row is duplicated into another generation.
CONTENT_FIELDS = (
    "schedule_id",
    "course_type",
    "weekday",
    "time_slot",
    "specific_date",
    "course_name",
    "classroom",
    "notes",
)


class Arrangement(Base):
    __tablename__ = "course_arrangements"
    __table_args__ = (
        Index("ix_course_arrangements_schedule_generation", "schedule_id", "is_original"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    schedule_id: Mapped[int] = mapped_column(ForeignKey("schedules.id"), nullable=False)
    course_type: Mapped[ArrangementKind] = mapped_column(
        SAEnum(ArrangementKind, name="arrangement_kind", native_enum=False, length=20),
        nullable=False,
        default=ArrangementKind.regular,
    )
    # NULL for special care; its weekday is derived from specific_date.
    weekday: Mapped[int | None] = mapped_column(Integer, nullable=True)
    time_slot: Mapped[int] = mapped_column(Integer, nullable=False)
    specific_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    course_name: Mapped[str] = mapped_column(String(100), nullable=False)
    classroom: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_original: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def generation(self) -> Generation:
        return Generation.from_flag(self.is_original)

    def content(self) -> dict:
        return {field: getattr(self, field) for field in CONTENT_FIELDS}

    def snapshot(self) -> dict:
        """JSON-safe view used for operation history entries."""
        data = self.content()
        data["id"] = self.id
        data["is_original"] = self.is_original
        data["course_type"] = self.course_type.value
        data["specific_date"] = self.specific_date.isoformat() if self.specific_date else None
        return data
