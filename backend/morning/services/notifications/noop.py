"""No-op notification provider (logs only)."""
from __future__ import annotations

import logging
from datetime import date

from morning.services.notifications.base import NotificationResult, NotificationService


logger = logging.getLogger(__name__)


class NoopNotificationService(NotificationService):
    def notify_run_completed(
        self,
        *,
        plan_date: date | None,
        tasks_total: int,
        request_id: str | None,
    ) -> NotificationResult:
        logger.info(
            "Notification queued (noop) run_completed date=%s tasks=%s",
            plan_date,
            tasks_total,
        )
        return NotificationResult(status="noop", reason="notification provider is noop")
