"""Client-side schedule session: which teacher, schedule and week are shown, and in which mode.

The session mirrors what a browser page does with the schedule API. In viewing
mode it shows the working set of the current week. In editing mode it shows the
whole original set, and every create or delete goes straight to the original
rows. Cancelling edit mode only switches the view back; it does not undo
edit-mode writes that already reached the server.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from weekgrid.client.api import ScheduleApiClient
from weekgrid.core.exceptions import (
    PermissionDeniedError,
    ResourceNotFoundError,
    StaleResponseError,
    ValidationError,
    WeekBoundaryError,
)
from weekgrid.models.arrangement import ArrangementKind
from weekgrid.services.colors import SPECIAL_CARE_CATEGORY, assign_color
from weekgrid.services.grid import (
    SPECIAL_CARE_SLOT,
    current_week_number,
    date_for_weekday,
    is_displayed_weekday,
    is_valid_placement,
    validate_drop,
    weekday_from_date,
)

logger = logging.getLogger(__name__)


class SessionMode(str, Enum):
    viewing = "viewing"
    editing = "editing"


@dataclass(frozen=True)
class SessionContext:
    schedule_id: int | None
    week: int
    mode: SessionMode
    # Bumped on every load, so a superseded request never matches again.
    epoch: int

    def as_tuple(self) -> tuple:
        return (self.schedule_id, self.week, self.mode.value, self.epoch)


@dataclass(frozen=True)
class RenderedItem:
    id: int
    kind: ArrangementKind
    course_name: str
    weekday: int | None
    time_slot: int
    specific_date: date | None
    classroom: str | None
    notes: str | None
    is_original: bool
    color: str


@dataclass
class WeekGrid:
    mode: SessionMode
    week: int
    week_start: date | None = None
    week_end: date | None = None
    cells: dict[tuple[int, int], RenderedItem] = field(default_factory=dict)
    special_care: dict[int, list[RenderedItem]] = field(default_factory=dict)

    def item_at(self, weekday: int, time_slot: int) -> RenderedItem | None:
        if time_slot == SPECIAL_CARE_SLOT:
            bookings = self.special_care.get(weekday) or []
            return bookings[0] if bookings else None
        return self.cells.get((weekday, time_slot))

    def items(self) -> Iterator[RenderedItem]:
        yield from self.cells.values()
        for bookings in self.special_care.values():
            yield from bookings

    def find(self, arrangement_id: int) -> RenderedItem | None:
        for item in self.items():
            if item.id == arrangement_id:
                return item
        return None


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def render_grid(
    payload: dict,
    *,
    mode: SessionMode,
    week: int,
) -> WeekGrid:
    """Place API rows into grid cells and tag each with its color category."""
    grid = WeekGrid(
        mode=mode,
        week=week,
        week_start=_parse_date(payload.get("weekStart")),
        week_end=_parse_date(payload.get("weekEnd")),
    )
    rendered: list[str] = []

    for row in payload.get("regularCourses", []):
        color = assign_color(row["course_name"], row.get("id"), rendered)
        rendered.append(color)
        item = RenderedItem(
            id=row["id"],
            kind=ArrangementKind.regular,
            course_name=row["course_name"],
            weekday=row["weekday"],
            time_slot=row["time_slot"],
            specific_date=None,
            classroom=row.get("classroom"),
            notes=row.get("notes"),
            is_original=row["is_original"],
            color=color,
        )
        grid.cells[(item.weekday, item.time_slot)] = item

    for row in payload.get("specialCare", []):
        specific_date = _parse_date(row.get("specific_date"))
        weekday = weekday_from_date(specific_date) if specific_date else None
        if not is_displayed_weekday(weekday):
            continue
        item = RenderedItem(
            id=row["id"],
            kind=ArrangementKind.special_care,
            course_name=row["course_name"],
            weekday=weekday,
            time_slot=SPECIAL_CARE_SLOT,
            specific_date=specific_date,
            classroom=row.get("classroom"),
            notes=row.get("notes"),
            is_original=row["is_original"],
            color=SPECIAL_CARE_CATEGORY,
        )
        grid.special_care.setdefault(weekday, []).append(item)

    return grid


class ScheduleSession:
    def __init__(self, api: ScheduleApiClient, *, today: Callable[[], date] = date.today) -> None:
        self.api = api
        # Read on every teacher selection so a long-lived session follows the calendar.
        self.today = today
        self.current_teacher: dict | None = None
        self.current_schedule: dict | None = None
        self.current_semester: dict | None = None
        self.current_week = 1
        self.mode = SessionMode.viewing
        self.grid: WeekGrid | None = None
        self._epoch = 0

    @property
    def is_edit_mode(self) -> bool:
        return self.mode == SessionMode.editing

    @property
    def schedule_id(self) -> int | None:
        return self.current_schedule["id"] if self.current_schedule else None

    @property
    def context(self) -> SessionContext:
        return SessionContext(self.schedule_id, self.current_week, self.mode, self._epoch)

    def _require_schedule(self) -> int:
        if self.schedule_id is None:
            raise ValidationError("Select a teacher before working with a schedule")
        return self.schedule_id

    def _check_fresh(self, requested: SessionContext) -> None:
        if requested != self.context:
            raise StaleResponseError(requested.as_tuple(), self.context.as_tuple())

    async def _load(self, fetch: Callable[[], Awaitable[dict]]) -> WeekGrid | None:
        self._epoch += 1
        requested = self.context
        payload = await fetch()
        try:
            self._check_fresh(requested)
        except StaleResponseError as exc:
            logger.debug(
                "STALE RESPONSE DISCARDED | expected=%s | actual=%s",
                exc.details["expected"],
                exc.details["actual"],
            )
            return None
        self.grid = render_grid(payload, mode=requested.mode, week=requested.week)
        return self.grid

    # -- navigation --------------------------------------------------------------

    async def select_teacher(self, teacher_id: int) -> WeekGrid | None:
        teachers = await self.api.list_teachers()
        teacher = next((item for item in teachers if item["id"] == teacher_id), None)
        if teacher is None:
            raise ResourceNotFoundError("Teacher", teacher_id)

        schedule = await self.api.get_active_schedule(teacher_id)
        semester = await self.api.get_current_semester()
        self.current_teacher = teacher
        self.current_schedule = schedule
        self.current_semester = semester
        self.current_week = current_week_number(date.fromisoformat(semester["start_date"]), self.today())
        self.mode = SessionMode.viewing
        logger.info("TEACHER SELECTED | teacher_id=%s | schedule_id=%s | week=%s", teacher_id, schedule["id"], self.current_week)
        return await self.load_week()

    async def load_week(self) -> WeekGrid | None:
        schedule_id = self._require_schedule()
        week = self.current_week
        return await self._load(lambda: self.api.get_week(schedule_id, week))

    async def load_original(self) -> WeekGrid | None:
        schedule_id = self._require_schedule()
        return await self._load(lambda: self.api.get_original(schedule_id))

    async def reload(self) -> WeekGrid | None:
        if self.is_edit_mode:
            return await self.load_original()
        return await self.load_week()

    async def change_week(self, delta: int) -> WeekGrid | None:
        target = self.current_week + delta
        if target < 1:
            raise WeekBoundaryError(target)
        self.current_week = target
        if self.is_edit_mode:
            # The original set is a weekly template and does not depend on the week.
            return self.grid
        return await self.load_week()

    # -- edit mode ---------------------------------------------------------------

    async def enter_edit_mode(self) -> WeekGrid | None:
        self._require_schedule()
        self.mode = SessionMode.editing
        return await self.load_original()

    async def save_edits(self) -> WeekGrid | None:
        schedule_id = self._require_schedule()
        if not self.is_edit_mode:
            raise PermissionDeniedError("Saving the original schedule requires edit mode")
        await self.api.save_original(schedule_id)
        self.mode = SessionMode.viewing
        return await self.load_week()

    async def cancel_edit(self) -> WeekGrid | None:
        self.mode = SessionMode.viewing
        return await self.load_week()

    async def reset_schedule(self) -> WeekGrid | None:
        schedule_id = self._require_schedule()
        if self.is_edit_mode:
            raise PermissionDeniedError("Leave edit mode before resetting the schedule")
        await self.api.reset(schedule_id)
        return await self.load_week()

    # -- arrangement actions -----------------------------------------------------

    async def add_course(
        self,
        weekday: int,
        time_slot: int,
        course_name: str,
        *,
        classroom: str | None = None,
        notes: str | None = None,
    ) -> WeekGrid | None:
        schedule_id = self._require_schedule()
        if not is_valid_placement(ArrangementKind.regular, weekday, time_slot):
            raise ValidationError(
                "Courses can only be placed in weekday slots 1 to 8",
                details={"weekday": weekday, "time_slot": time_slot},
            )
        if self.grid is not None and self.grid.item_at(weekday, time_slot) is not None:
            raise ValidationError("Cell is already occupied", details={"weekday": weekday, "time_slot": time_slot})
        await self.api.create_course(
            schedule_id,
            weekday,
            time_slot,
            course_name,
            classroom=classroom,
            notes=notes,
            edit_mode=self.is_edit_mode,
        )
        return await self.reload()

    async def add_special_care(
        self,
        course_name: str,
        *,
        specific_date: date | None = None,
        weekday: int | None = None,
        classroom: str | None = None,
        notes: str | None = None,
    ) -> WeekGrid | None:
        """Book special care on a date, or on a weekday column of the current week. Edit mode only."""
        schedule_id = self._require_schedule()
        if not self.is_edit_mode:
            raise PermissionDeniedError("Adding special care requires edit mode")
        if specific_date is None:
            if weekday is None or self.current_semester is None:
                raise ValidationError("Special care needs a date", details={"missing": ["specificDate"]})
            semester_start = date.fromisoformat(self.current_semester["start_date"])
            specific_date = date_for_weekday(semester_start, self.current_week, weekday)
        await self.api.create_special_care(
            schedule_id,
            specific_date,
            course_name,
            classroom=classroom,
            notes=notes,
            edit_mode=self.is_edit_mode,
        )
        return await self.reload()

    async def move_course(self, arrangement_id: int, weekday: int, time_slot: int) -> WeekGrid | None:
        schedule_id = self._require_schedule()
        item = self.grid.find(arrangement_id) if self.grid is not None else None
        if item is None:
            raise ResourceNotFoundError("Arrangement", arrangement_id)
        if item.kind == ArrangementKind.special_care:
            raise ValidationError(
                "Special care is rescheduled by changing its date, not by moving it",
                details={"arrangement_id": arrangement_id},
            )
        occupant = self.grid.item_at(weekday, time_slot)
        reason = validate_drop(
            item.kind,
            (item.weekday, item.time_slot),
            (weekday, time_slot),
            target_occupied=occupant is not None and occupant.id != item.id,
        )
        if reason is not None:
            raise ValidationError(reason, details={"arrangement_id": arrangement_id})
        await self.api.move_course(arrangement_id, weekday, time_slot, schedule_id=schedule_id)
        return await self.reload()

    async def delete_arrangement(self, arrangement_id: int) -> WeekGrid | None:
        self._require_schedule()
        item = self.grid.find(arrangement_id) if self.grid is not None else None
        if item is None:
            raise ResourceNotFoundError("Arrangement", arrangement_id)
        if not self.is_edit_mode and (item.is_original or item.kind == ArrangementKind.special_care):
            raise PermissionDeniedError(
                "Deleting this arrangement requires edit mode",
                details={"arrangement_id": arrangement_id},
            )
        if item.kind == ArrangementKind.special_care:
            await self.api.delete_special_care(arrangement_id, edit_mode=self.is_edit_mode)
        else:
            await self.api.delete_course(arrangement_id, edit_mode=self.is_edit_mode)
        return await self.reload()
