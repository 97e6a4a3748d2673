"""Housekeeping jobs run by the scheduler worker."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from morning.services.plan_repository import PlanRepository


logger = logging.getLogger(__name__)


@dataclass
class CleanupResult:
    runtime_cleared: bool
    active_date: date | None = None


def clear_stale_runtime(db: Session, today: date) -> CleanupResult:
    """Drop a mirrored run whose day is already over."""
    repo = PlanRepository(db)
    snapshot = repo.get_runtime()
    if snapshot is None:
        return CleanupResult(runtime_cleared=False)
    if snapshot.active_date is not None and snapshot.active_date >= today:
        logger.debug("Runtime state for %s is current; keeping it", snapshot.active_date)
        return CleanupResult(runtime_cleared=False, active_date=snapshot.active_date)

    repo.save_runtime(None)
    logger.info("Cleared stale runtime state for %s", snapshot.active_date)
    return CleanupResult(runtime_cleared=True, active_date=snapshot.active_date)
