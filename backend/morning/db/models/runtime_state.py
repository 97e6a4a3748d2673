"""Persisted mirror of the execution timer, used to resume after a reload."""
from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, func, text as sa_text

from morning.db.base import Base

SINGLETON_ID = 1


class RuntimeState(Base):
    __tablename__ = "runtime_state"

    id = Column(Integer, primary_key=True, default=SINGLETON_ID)
    active_date = Column(Date, nullable=False)
    is_running = Column(Boolean, nullable=False, server_default=sa_text("false"))
    current_task_index = Column(Integer, nullable=False, server_default=sa_text("0"))
    remaining_seconds = Column(Integer, nullable=False, server_default=sa_text("0"))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
