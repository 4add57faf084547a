from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from weekgrid.models.operation_history import OperationHistory, OperationType

logger = logging.getLogger(__name__)


def record_operation(
    db: Session,
    *,
    schedule_id: int,
    operation_type: OperationType,
    old_data: dict | None = None,
    new_data: dict | None = None,
) -> None:
    record = OperationHistory(
        schedule_id=schedule_id,
        operation_type=operation_type.value,
        old_data=old_data or {},
        new_data=new_data or {},
    )
    db.add(record)


def record_operation_best_effort(
    db: Session,
    *,
    schedule_id: int,
    operation_type: OperationType,
    old_data: dict | None = None,
    new_data: dict | None = None,
) -> bool:
    """Write a history entry in its own commit; a failure is logged and never propagated."""
    try:
        record_operation(
            db,
            schedule_id=schedule_id,
            operation_type=operation_type,
            old_data=old_data,
            new_data=new_data,
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning(
            "OPERATION HISTORY WRITE FAILED | schedule_id=%s | operation=%s",
            schedule_id,
            operation_type.value,
            exc_info=True,
        )
        return False
    return True


def list_operations(db: Session, *, schedule_id: int, limit: int = 200) -> list[OperationHistory]:
    query = (
        select(OperationHistory)
        .where(OperationHistory.schedule_id == schedule_id)
        .order_by(OperationHistory.created_at.desc(), OperationHistory.id.desc())
        .limit(limit)
    )
    return list(db.execute(query).scalars())
