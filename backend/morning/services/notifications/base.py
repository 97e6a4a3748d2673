"""Notification service interface."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass
class NotificationResult:
    status: str
    reason: str


class NotificationService:
    """Base interface for notification providers."""

    def notify_run_completed(
        self,
        *,
        plan_date: date | None,
        tasks_total: int,
        request_id: str | None,
    ) -> NotificationResult:
        raise NotImplementedError
