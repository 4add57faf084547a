from collections.abc import Generator
from datetime import date, datetime
from zoneinfo import ZoneInfo

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from weekgrid.core.config import get_settings
from weekgrid.db.session import SessionLocal
from weekgrid.services.reconciliation import ReconciliationStore


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> ReconciliationStore:
    return ReconciliationStore(db)


def edit_mode_flag(edit_mode: bool = Query(default=False, alias="editMode")) -> bool:
    return edit_mode


def get_today() -> date:
    """Calendar date at the school, which decides the current semester week."""
    return datetime.now(ZoneInfo(get_settings().school_timezone)).date()
