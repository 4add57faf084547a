"""Weekly grid rules: which cells exist, what may be placed where, and week/date arithmetic.

The grid is five weekdays by nine time slots. Slots 1-8 hold regular courses,
slot 9 is reserved for special care. Special care is anchored to a calendar
date, so its column is derived from that date instead of being stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from math import ceil

from weekgrid.core.exceptions import ValidationError
from weekgrid.models.arrangement import ArrangementKind

WEEKDAYS: tuple[int, ...] = (1, 2, 3, 4, 5)
REGULAR_SLOTS: tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7, 8)
SPECIAL_CARE_SLOT = 9
DAYS_PER_WEEK = 7
SCHOOL_DAYS = 5


@dataclass(frozen=True)
class TimeSlotDef:
    id: int
    name: str
    time: str


TIME_SLOTS: tuple[TimeSlotDef, ...] = (
    TimeSlotDef(1, "上午1", "8:30-9:10"),
    TimeSlotDef(2, "上午2", "9:50-10:30"),
    TimeSlotDef(3, "上午3", "10:45-11:30"),
    TimeSlotDef(4, "午间管理", "午休时间"),
    TimeSlotDef(5, "下午1", "13:30-14:10"),
    TimeSlotDef(6, "下午2", "14:20-15:05"),
    TimeSlotDef(7, "下午3", "15:15-15:55"),
    TimeSlotDef(8, "晚托", "放学后托管"),
    TimeSlotDef(9, "特需托管", "特殊安排"),
)

WEEKDAY_LABELS = {1: "周一", 2: "周二", 3: "周三", 4: "周四", 5: "周五", 6: "周六", 7: "周日"}


@dataclass(frozen=True)
class WeekRange:
    start: date
    end: date

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end

    def day(self, weekday: int) -> date:
        return self.start + timedelta(days=weekday - 1)


def is_valid_placement(kind: ArrangementKind, weekday: int | None, time_slot: int) -> bool:
    if kind == ArrangementKind.regular:
        return weekday in WEEKDAYS and time_slot in REGULAR_SLOTS
    if kind == ArrangementKind.special_care:
        # weekday comes from the booking date; weekend bookings are stored but never shown
        return time_slot == SPECIAL_CARE_SLOT and (weekday is None or 1 <= weekday <= DAYS_PER_WEEK)
    return False


def weekday_from_date(value: date) -> int:
    """1 = Monday ... 7 = Sunday."""
    return value.isoweekday()


def is_displayed_weekday(weekday: int | None) -> bool:
    return weekday in WEEKDAYS


def effective_weekday(kind: ArrangementKind, weekday: int | None, specific_date: date | None) -> int | None:
    if kind == ArrangementKind.special_care:
        return weekday_from_date(specific_date) if specific_date is not None else None
    return weekday


def compute_week_date_range(semester_start: date, week_number: int) -> WeekRange:
    if week_number < 1:
        raise ValidationError("Week number must be 1 or greater", details={"week": week_number})
    anchor = semester_start + timedelta(days=(week_number - 1) * DAYS_PER_WEEK)
    week_start = anchor - timedelta(days=anchor.weekday())
    return WeekRange(start=week_start, end=week_start + timedelta(days=SCHOOL_DAYS - 1))


def current_week_number(semester_start: date, today: date) -> int:
    elapsed_days = (today - semester_start).days
    return max(1, ceil(elapsed_days / DAYS_PER_WEEK))


def date_for_weekday(semester_start: date, week_number: int, weekday: int) -> date:
    """Calendar date of `weekday` in the given semester week."""
    return compute_week_date_range(semester_start, week_number).day(weekday)


def validate_drop(
    kind: ArrangementKind,
    source: tuple[int | None, int],
    target: tuple[int, int],
    *,
    target_occupied: bool,
) -> str | None:
    """Return why a dragged item may not land on `target`, or None when the drop is allowed."""
    target_weekday, target_slot = target
    if (target_weekday, target_slot) == tuple(source):
        return "Target is the current position"
    if kind == ArrangementKind.special_care and target_slot != SPECIAL_CARE_SLOT:
        return "Special care can only occupy the special care slot"
    if kind == ArrangementKind.regular and target_slot == SPECIAL_CARE_SLOT:
        return "Regular courses cannot use the special care slot"
    if not is_valid_placement(kind, target_weekday, target_slot):
        return "Target cell is outside the weekly grid"
    if target_occupied:
        return "Target cell is already occupied"
    return None


def format_weekday(weekday: int) -> str:
    return WEEKDAY_LABELS.get(weekday, f"星期{weekday}")


def format_time_slot(time_slot: int) -> str:
    for slot in TIME_SLOTS:
        if slot.id == time_slot:
            return f"{slot.name} ({slot.time})"
    return f"第{time_slot}节"
