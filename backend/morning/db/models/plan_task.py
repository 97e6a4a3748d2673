"""Plan task ORM model."""
from __future__ import annotations

from sqlalchemy import Column, Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from morning.db.base import Base


class PlanTask(Base):
    __tablename__ = "plan_tasks"
    __table_args__ = (Index("ix_plan_tasks_plan_date", "plan_date"),)

    # Task ids are scoped to their day; the same id may appear on several dates.
    plan_date = Column(Date, ForeignKey("day_plans.plan_date", ondelete="CASCADE"), primary_key=True)
    id = Column(String(length=64), primary_key=True)
    # Lookup-only reference; templates may be deleted while plans keep their copy.
    template_id = Column(String(length=64), nullable=True)
    name = Column(Text, nullable=False)
    minutes = Column(Integer, nullable=False)
    # "order" is reserved in SQL, so the column gets a different name.
    order = Column("sort_order", Integer, nullable=False)

    plan = relationship("DayPlan", back_populates="tasks")
