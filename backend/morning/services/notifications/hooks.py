"""Notification hooks fired by the run manager."""
from __future__ import annotations

import logging
from datetime import date

from morning.core.config import settings
from morning.observability.metrics import log_metric
from morning.observability.tracing import trace
from morning.services.notifications.base import NotificationResult
from morning.services.notifications.factory import get_notification_service


logger = logging.getLogger(__name__)


def notify_run_completed(plan_date: date | None, tasks_total: int, request_id: str | None = None) -> NotificationResult:
    """Tell the configured provider that every task of a run is done."""
    date_str = plan_date.isoformat() if plan_date else None
    if not settings.notifications_enabled:
        result = NotificationResult(status="skipped", reason="notifications disabled")
        _record(result, date_str)
        return result

    service = get_notification_service()
    with trace(
        "notification.run_completed",
        metadata={"tasks_total": tasks_total},
        plan_date=date_str,
        request_id=request_id,
    ):
        try:
            result = service.notify_run_completed(
                plan_date=plan_date,
                tasks_total=tasks_total,
                request_id=request_id,
            )
        except Exception as exc:
            logger.exception("Run completion notification failed for %s", date_str)
            result = NotificationResult(status="failed", reason=str(exc))

    _record(result, date_str)
    return result


def _record(result: NotificationResult, date_str: str | None) -> None:
    logger.info("Run completion notification %s (%s) date=%s", result.status, result.reason, date_str)
    log_metric(
        "notification.run_completed",
        1 if result.status not in {"failed", "skipped"} else 0,
        metadata={"plan_date": date_str, "status": result.status},
    )
