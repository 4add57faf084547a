"""Original/working reconciliation for a schedule's arrangements.

Every schedule keeps two generations of the same arrangement set. The original
generation is the saved baseline and is only touched in edit mode. The working
generation is what day-to-day viewing shows and what normal-mode moves change.
Save-as-original and reset rebuild both generations from one captured set
inside a single transaction, so a failure leaves the store exactly as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from weekgrid.core.exceptions import NoBaselineError, ResourceNotFoundError, TransactionError, ValidationError
from weekgrid.models.arrangement import Arrangement, ArrangementKind, Generation
from weekgrid.models.operation_history import OperationType
from weekgrid.models.schedule import Schedule
from weekgrid.services.audit import record_operation_best_effort
from weekgrid.services.grid import (
    SPECIAL_CARE_SLOT,
    WeekRange,
    compute_week_date_range,
    effective_weekday,
    is_valid_placement,
    validate_drop,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("course_name", "classroom", "notes")


@dataclass
class ArrangementDraft:
    """An arrangement as submitted by a caller, before any validation."""

    schedule_id: int | None
    kind: ArrangementKind
    course_name: str | None
    weekday: int | None = None
    time_slot: int | None = None
    specific_date: date | None = None
    classroom: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class MoveResult:
    arrangement: Arrangement
    # True when an original row was left in place and a working copy was inserted.
    original_kept: bool


@dataclass(frozen=True)
class ReconcileResult:
    original_count: int
    working_count: int


@dataclass
class GenerationView:
    regular: list[Arrangement] = field(default_factory=list)
    special_care: list[Arrangement] = field(default_factory=list)


@dataclass
class WeekView(GenerationView):
    week: int = 1
    date_range: WeekRange | None = None


def _sort_key(row: Arrangement) -> tuple:
    return (
        row.course_type.value,
        row.weekday or 0,
        row.time_slot,
        row.specific_date or date.min,
        row.id or 0,
    )


class ReconciliationStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    # -- lookups -----------------------------------------------------------------

    def get_schedule(self, schedule_id: int) -> Schedule:
        schedule = self.db.get(Schedule, schedule_id)
        if schedule is None:
            raise ResourceNotFoundError("Schedule", schedule_id)
        return schedule

    def get(self, arrangement_id: int, kind: ArrangementKind | None = None) -> Arrangement:
        arrangement = self.db.get(Arrangement, arrangement_id)
        if arrangement is None or (kind is not None and arrangement.course_type != kind):
            resource = "Special care" if kind == ArrangementKind.special_care else "Arrangement"
            raise ResourceNotFoundError(resource, arrangement_id)
        return arrangement

    def _rows(
        self,
        schedule_id: int,
        generation: Generation,
        kind: ArrangementKind | None = None,
    ) -> list[Arrangement]:
        query = select(Arrangement).where(
            Arrangement.schedule_id == schedule_id,
            Arrangement.is_original == generation.is_original,
        )
        if kind is not None:
            query = query.where(Arrangement.course_type == kind)
        return sorted(self.db.execute(query).scalars(), key=_sort_key)

    def _cell_occupant(
        self,
        schedule_id: int,
        generation: Generation,
        kind: ArrangementKind,
        *,
        weekday: int | None = None,
        time_slot: int | None = None,
        specific_date: date | None = None,
        exclude_id: int | None = None,
    ) -> Arrangement | None:
        query = select(Arrangement).where(
            Arrangement.schedule_id == schedule_id,
            Arrangement.is_original == generation.is_original,
            Arrangement.course_type == kind,
        )
        if kind == ArrangementKind.special_care:
            query = query.where(Arrangement.specific_date == specific_date)
        else:
            query = query.where(Arrangement.weekday == weekday, Arrangement.time_slot == time_slot)
        if exclude_id is not None:
            query = query.where(Arrangement.id != exclude_id)
        return self.db.execute(query.limit(1)).scalars().first()

    # -- transactions ------------------------------------------------------------

    @contextmanager
    def _transaction(self, event: str, **context) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            fields = " | ".join(f"{key}=%s" for key in context)
            logger.exception(f"{event} FAILED | {fields}", *context.values())
            raise TransactionError(
                f"{event.capitalize()} failed, no changes were applied",
                details={key: str(value) for key, value in context.items()},
            ) from exc
        except Exception:
            self.db.rollback()
            raise

    def _insert_copy(self, content: dict, generation: Generation) -> Arrangement:
        row = Arrangement(**content, is_original=generation.is_original)
        self.db.add(row)
        return row

    def _replace_generations(self, schedule_id: int, captured: list[dict]) -> None:
        self.db.execute(delete(Arrangement).where(Arrangement.schedule_id == schedule_id))
        for generation in (Generation.original, Generation.working):
            for content in captured:
                self._insert_copy(content, generation)
        self.db.flush()

    # -- validation --------------------------------------------------------------

    @staticmethod
    def _validate_draft(draft: ArrangementDraft) -> None:
        missing = []
        if draft.schedule_id is None:
            missing.append("scheduleId")
        if not (draft.course_name or "").strip():
            missing.append("courseName")
        if draft.kind == ArrangementKind.special_care:
            if draft.specific_date is None:
                missing.append("specificDate")
        else:
            if draft.weekday is None:
                missing.append("weekday")
            if draft.time_slot is None:
                missing.append("timeSlot")
        if missing:
            raise ValidationError("Missing required fields", details={"missing": missing})

        time_slot = SPECIAL_CARE_SLOT if draft.kind == ArrangementKind.special_care else draft.time_slot
        weekday = effective_weekday(draft.kind, draft.weekday, draft.specific_date)
        if not is_valid_placement(draft.kind, weekday, time_slot):
            raise ValidationError(
                "Placement is not allowed for this kind of arrangement",
                details={"kind": draft.kind.value, "weekday": weekday, "time_slot": time_slot},
            )

    # -- writes ------------------------------------------------------------------

    def create(self, draft: ArrangementDraft, *, edit_mode: bool = False) -> Arrangement:
        self._validate_draft(draft)
        self.get_schedule(draft.schedule_id)
        generation = Generation.from_flag(edit_mode)
        is_special = draft.kind == ArrangementKind.special_care

        occupant = self._cell_occupant(
            draft.schedule_id,
            generation,
            draft.kind,
            weekday=draft.weekday,
            time_slot=draft.time_slot,
            specific_date=draft.specific_date,
        )
        if occupant is not None:
            raise ValidationError(
                "Cell is already occupied",
                details={"occupied_by": occupant.id, "generation": generation.value},
            )

        arrangement = Arrangement(
            schedule_id=draft.schedule_id,
            course_type=draft.kind,
            weekday=None if is_special else draft.weekday,
            time_slot=SPECIAL_CARE_SLOT if is_special else draft.time_slot,
            specific_date=draft.specific_date if is_special else None,
            course_name=draft.course_name.strip(),
            classroom=draft.classroom,
            notes=draft.notes,
            is_original=generation.is_original,
        )
        with self._transaction("ARRANGEMENT CREATE", schedule_id=draft.schedule_id, generation=generation.value):
            self.db.add(arrangement)
        self.db.refresh(arrangement)

        if not edit_mode:
            record_operation_best_effort(
                self.db,
                schedule_id=arrangement.schedule_id,
                operation_type=OperationType.add,
                new_data=arrangement.snapshot(),
            )
        return arrangement

    def move(
        self,
        arrangement_id: int,
        target_weekday: int | None,
        target_time_slot: int | None,
        *,
        schedule_id: int | None = None,
    ) -> MoveResult:
        arrangement = self.get(arrangement_id)
        if schedule_id is not None and arrangement.schedule_id != schedule_id:
            raise ValidationError(
                "Arrangement does not belong to this schedule",
                details={"arrangement_id": arrangement_id, "schedule_id": schedule_id},
            )
        if arrangement.course_type == ArrangementKind.special_care:
            raise ValidationError(
                "Special care is rescheduled by changing its date, not by moving it",
                details={"arrangement_id": arrangement_id},
            )
        if target_weekday is None or target_time_slot is None:
            raise ValidationError("Missing required fields", details={"missing": ["weekday", "timeSlot"]})

        occupant = self._cell_occupant(
            arrangement.schedule_id,
            Generation.working,
            ArrangementKind.regular,
            weekday=target_weekday,
            time_slot=target_time_slot,
        )
        reason = validate_drop(
            arrangement.course_type,
            (arrangement.weekday, arrangement.time_slot),
            (target_weekday, target_time_slot),
            target_occupied=occupant is not None,
        )
        if reason is not None:
            raise ValidationError(
                reason,
                details={"arrangement_id": arrangement_id, "weekday": target_weekday, "time_slot": target_time_slot},
            )

        before = arrangement.snapshot()
        with self._transaction("ARRANGEMENT MOVE", arrangement_id=arrangement_id, original=before["is_original"]):
            if arrangement.is_original:
                moved = self._insert_copy(arrangement.content(), Generation.working)
            else:
                moved = arrangement
            moved.weekday = target_weekday
            moved.time_slot = target_time_slot
            self.db.flush()
        self.db.refresh(moved)

        record_operation_best_effort(
            self.db,
            schedule_id=moved.schedule_id,
            operation_type=OperationType.move,
            old_data=before,
            new_data=moved.snapshot(),
        )
        return MoveResult(arrangement=moved, original_kept=before["is_original"])

    def save_as_original(self, schedule_id: int) -> ReconcileResult:
        """Make the current original rows the baseline and regenerate the working set from them.

        A schedule that has never saved a baseline and has no original rows
        promotes its working set instead, which is how the first baseline is
        created from day-to-day data.
        """
        schedule = self.get_schedule(schedule_id)
        captured_rows = self._rows(schedule_id, Generation.original)
        if not captured_rows and schedule.original_saved_at is None:
            captured_rows = self._rows(schedule_id, Generation.working)
        captured = [row.content() for row in captured_rows]

        with self._transaction("SAVE ORIGINAL", schedule_id=schedule_id, rows=len(captured)):
            self._replace_generations(schedule_id, captured)
            schedule.original_saved_at = datetime.now(timezone.utc)

        logger.info("SAVE ORIGINAL | schedule_id=%s | rows=%s", schedule_id, len(captured))
        record_operation_best_effort(
            self.db,
            schedule_id=schedule_id,
            operation_type=OperationType.save_original,
            new_data={"rows": len(captured)},
        )
        return ReconcileResult(original_count=len(captured), working_count=len(captured))

    def reset(self, schedule_id: int) -> ReconcileResult:
        self.get_schedule(schedule_id)
        originals = self._rows(schedule_id, Generation.original)
        if not originals:
            raise NoBaselineError(schedule_id)
        discarded = len(self._rows(schedule_id, Generation.working))
        captured = [row.content() for row in originals]

        with self._transaction("RESET", schedule_id=schedule_id, rows=len(captured)):
            self._replace_generations(schedule_id, captured)

        logger.info("RESET | schedule_id=%s | rows=%s | discarded=%s", schedule_id, len(captured), discarded)
        record_operation_best_effort(
            self.db,
            schedule_id=schedule_id,
            operation_type=OperationType.reset,
            old_data={"rows": discarded},
            new_data={"rows": len(captured)},
        )
        return ReconcileResult(original_count=len(captured), working_count=len(captured))

    def delete(self, arrangement_id: int, kind: ArrangementKind | None = None) -> dict:
        """Physically delete one row of either generation; permission checks belong to the caller."""
        arrangement = self.get(arrangement_id, kind)
        removed = arrangement.snapshot()
        with self._transaction("ARRANGEMENT DELETE", arrangement_id=arrangement_id):
            self.db.delete(arrangement)

        if not removed["is_original"]:
            record_operation_best_effort(
                self.db,
                schedule_id=removed["schedule_id"],
                operation_type=OperationType.delete,
                old_data=removed,
            )
        return removed

    def update_course(self, arrangement_id: int, fields: dict) -> Arrangement:
        arrangement = self.get(arrangement_id, ArrangementKind.regular)
        self._check_editable(fields)
        before = arrangement.snapshot()
        self._apply_editable(arrangement, fields)
        with self._transaction("COURSE UPDATE", arrangement_id=arrangement_id):
            self.db.flush()
        self.db.refresh(arrangement)
        self._record_update(arrangement, before)
        return arrangement

    def update_special_care(self, arrangement_id: int, fields: dict) -> Arrangement:
        arrangement = self.get(arrangement_id, ArrangementKind.special_care)
        self._check_editable(fields)
        before = arrangement.snapshot()
        new_date = fields.get("specific_date")
        if new_date is not None and new_date != arrangement.specific_date:
            weekday = effective_weekday(ArrangementKind.special_care, None, new_date)
            if not is_valid_placement(ArrangementKind.special_care, weekday, SPECIAL_CARE_SLOT):
                raise ValidationError("Placement is not allowed for special care", details={"specific_date": str(new_date)})
            occupant = self._cell_occupant(
                arrangement.schedule_id,
                arrangement.generation,
                ArrangementKind.special_care,
                specific_date=new_date,
                exclude_id=arrangement.id,
            )
            if occupant is not None:
                raise ValidationError(
                    "Special care is already booked for that date",
                    details={"occupied_by": occupant.id, "specific_date": new_date.isoformat()},
                )
            arrangement.specific_date = new_date
        self._apply_editable(arrangement, fields)
        with self._transaction("SPECIAL CARE UPDATE", arrangement_id=arrangement_id):
            self.db.flush()
        self.db.refresh(arrangement)
        self._record_update(arrangement, before)
        return arrangement

    @staticmethod
    def _check_editable(fields: dict) -> None:
        if "course_name" in fields and not (fields["course_name"] or "").strip():
            raise ValidationError("Course name cannot be empty", details={"missing": ["courseName"]})

    @staticmethod
    def _apply_editable(arrangement: Arrangement, fields: dict) -> None:
        if "course_name" in fields:
            arrangement.course_name = fields["course_name"].strip()
        for key in EDITABLE_FIELDS[1:]:
            if key in fields:
                setattr(arrangement, key, fields[key])

    def _record_update(self, arrangement: Arrangement, before: dict) -> None:
        if arrangement.is_original:
            return
        record_operation_best_effort(
            self.db,
            schedule_id=arrangement.schedule_id,
            operation_type=OperationType.update,
            old_data=before,
            new_data=arrangement.snapshot(),
        )

    # -- reads -------------------------------------------------------------------

    def list_original(self, schedule_id: int) -> GenerationView:
        self.get_schedule(schedule_id)
        return GenerationView(
            regular=self._rows(schedule_id, Generation.original, ArrangementKind.regular),
            special_care=self._rows(schedule_id, Generation.original, ArrangementKind.special_care),
        )

    def week_view(self, schedule_id: int, week_number: int) -> WeekView:
        schedule = self.get_schedule(schedule_id)
        if schedule.semester is None:
            raise ResourceNotFoundError("Semester", schedule.semester_id)
        date_range = compute_week_date_range(schedule.semester.start_date, week_number)
        special_care = [
            row
            for row in self._rows(schedule_id, Generation.working, ArrangementKind.special_care)
            if row.specific_date is not None and date_range.contains(row.specific_date)
        ]
        return WeekView(
            regular=self._rows(schedule_id, Generation.working, ArrangementKind.regular),
            special_care=special_care,
            week=week_number,
            date_range=date_range,
        )

    def list_special_care(self, schedule_id: int, *, generation: Generation = Generation.working) -> list[Arrangement]:
        self.get_schedule(schedule_id)
        return self._rows(schedule_id, generation, ArrangementKind.special_care)

    def counts(self, schedule_id: int) -> ReconcileResult:
        return ReconcileResult(
            original_count=len(self._rows(schedule_id, Generation.original)),
            working_count=len(self._rows(schedule_id, Generation.working)),
        )
