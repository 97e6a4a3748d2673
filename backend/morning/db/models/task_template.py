"""Task template ORM model."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from morning.db.base import Base


class TaskTemplate(Base):
    __tablename__ = "task_templates"

    id = Column(String(length=64), primary_key=True)
    name = Column(Text, nullable=False)
    default_minutes = Column(Integer, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
