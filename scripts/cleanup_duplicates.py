"""Remove duplicated arrangement rows and report cells that still hold two rows.

Run:
  PYTHONPATH=backend python scripts/cleanup_duplicates.py
  SCHEDULE_ID=1 PYTHONPATH=backend python scripts/cleanup_duplicates.py
"""

from __future__ import annotations

import os

from sqlalchemy import func, select

from weekgrid.core.logging import configure_logging
from weekgrid.db.session import SessionLocal
from weekgrid.models.arrangement import Arrangement
from weekgrid.services.grid import format_time_slot, format_weekday
from weekgrid.services.maintenance import find_slot_collisions, remove_duplicate_rows


def _schedule_filter() -> int | None:
    value = os.getenv("SCHEDULE_ID", "").strip()
    return int(value) if value else None


def _count_rows(session, schedule_id: int | None) -> int:
    query = select(func.count(Arrangement.id))
    if schedule_id is not None:
        query = query.where(Arrangement.schedule_id == schedule_id)
    return session.execute(query).scalar_one()


def main() -> None:
    configure_logging("INFO")
    schedule_id = _schedule_filter()
    with SessionLocal() as session:
        before = _count_rows(session, schedule_id)
        removed = remove_duplicate_rows(session, schedule_id=schedule_id)
        after = _count_rows(session, schedule_id)
        collisions = find_slot_collisions(session, schedule_id=schedule_id)

    print(f"Arrangements before: {before}")
    print(f"Duplicates removed: {removed}")
    print(f"Arrangements after: {after}")
    if not collisions:
        print("No slot collisions found.")
        return
    print(f"Slot collisions: {len(collisions)}")
    for collision in collisions:
        where = (
            collision.specific_date.isoformat()
            if collision.specific_date
            else f"{format_weekday(collision.weekday)} {format_time_slot(collision.time_slot)}"
        )
        print(
            f"  - schedule {collision.schedule_id} [{collision.generation.value}] {where}: "
            f"rows {', '.join(str(item) for item in collision.arrangement_ids)}"
        )


if __name__ == "__main__":
    main()
