"""Day plan ORM model."""
from __future__ import annotations

from sqlalchemy import Column, Date, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from morning.db.base import Base


class DayPlan(Base):
    __tablename__ = "day_plans"

    plan_date = Column(Date, primary_key=True)
    leave_time = Column(String(length=5), nullable=False)
    sleep_minutes = Column(Integer, nullable=False)
    buffer_minutes = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    tasks = relationship(
        "PlanTask",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PlanTask.order",
        passive_deletes=True,
    )
