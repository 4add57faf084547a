from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from weekgrid.core.exceptions import TransactionError
from weekgrid.models.arrangement import Arrangement, ArrangementKind, Generation

logger = logging.getLogger(__name__)

# Rows equal on all of these are the same arrangement entered twice.
DUPLICATE_KEY = (
    "schedule_id",
    "course_type",
    "weekday",
    "time_slot",
    "specific_date",
    "course_name",
    "classroom",
    "is_original",
)


@dataclass(frozen=True)
class SlotCollision:
    schedule_id: int
    generation: Generation
    kind: ArrangementKind
    weekday: int | None
    time_slot: int
    specific_date: date | None
    arrangement_ids: tuple[int, ...]


def remove_duplicate_rows(db: Session, *, schedule_id: int | None = None) -> int:
    """Delete exact duplicate arrangements, keeping the oldest row of each group."""
    keeper = aliased(Arrangement)
    survivors = select(func.min(keeper.id)).group_by(*(getattr(keeper, name) for name in DUPLICATE_KEY))
    if schedule_id is not None:
        survivors = survivors.where(keeper.schedule_id == schedule_id)

    statement = delete(Arrangement).where(Arrangement.id.not_in(survivors))
    if schedule_id is not None:
        statement = statement.where(Arrangement.schedule_id == schedule_id)

    try:
        result = db.execute(statement.execution_options(synchronize_session=False))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("DUPLICATE CLEANUP FAILED | schedule_id=%s", schedule_id)
        raise TransactionError("Duplicate cleanup failed, no changes were applied") from exc

    removed = result.rowcount or 0
    logger.info("DUPLICATE CLEANUP | schedule_id=%s | removed=%s", schedule_id, removed)
    return removed


def find_slot_collisions(db: Session, *, schedule_id: int | None = None) -> list[SlotCollision]:
    """Cells holding more than one arrangement of the same generation."""
    query = select(Arrangement).order_by(Arrangement.id)
    if schedule_id is not None:
        query = query.where(Arrangement.schedule_id == schedule_id)

    groups: dict[tuple, list[int]] = defaultdict(list)
    for row in db.execute(query).scalars():
        if row.course_type == ArrangementKind.special_care:
            cell = (row.schedule_id, row.is_original, row.course_type, None, row.time_slot, row.specific_date)
        else:
            cell = (row.schedule_id, row.is_original, row.course_type, row.weekday, row.time_slot, None)
        groups[cell].append(row.id)

    collisions = [
        SlotCollision(
            schedule_id=cell[0],
            generation=Generation.from_flag(cell[1]),
            kind=cell[2],
            weekday=cell[3],
            time_slot=cell[4],
            specific_date=cell[5],
            arrangement_ids=tuple(ids),
        )
        for cell, ids in groups.items()
        if len(ids) > 1
    ]
    if collisions:
        logger.warning("SLOT COLLISIONS FOUND | schedule_id=%s | count=%s", schedule_id, len(collisions))
    return collisions
