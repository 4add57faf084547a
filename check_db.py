from sqlalchemy import func, select

from weekgrid.db.session import SessionLocal
from weekgrid.models.arrangement import Arrangement
from weekgrid.models.schedule import Schedule

db = SessionLocal()
try:
    schedules = db.execute(select(Schedule).order_by(Schedule.id)).scalars().all()
    print(f"Schedules: {len(schedules)}")
    for schedule in schedules:
        counts = dict(
            db.execute(
                select(Arrangement.is_original, func.count(Arrangement.id))
                .where(Arrangement.schedule_id == schedule.id)
                .group_by(Arrangement.is_original)
            ).all()
        )
        print(
            f"  - {schedule.name} (id={schedule.id}): original={counts.get(True, 0)} "
            f"working={counts.get(False, 0)} baseline_saved={schedule.original_saved_at or 'never'}"
        )
finally:
    db.close()
