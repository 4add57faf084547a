from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from weekgrid.db.base import Base


class OperationType(str, Enum):
    add = "add"
    move = "move"
    update = "update"
    delete = "delete"
    save_original = "save_original"
    reset = "reset"


class OperationHistory(Base):
    __tablename__ = "operation_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    schedule_id: Mapped[int] = mapped_column(ForeignKey("schedules.id"), nullable=False, index=True)
    operation_type: Mapped[str] = mapped_column(String(20), nullable=False)
    old_data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    new_data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
