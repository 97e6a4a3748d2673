from __future__ import annotations

from datetime import date

from morning.core.config import settings
from morning.services.notifications import factory
from morning.services.notifications.base import NotificationResult
from morning.services.notifications.hooks import notify_run_completed
from morning.services.notifications.noop import NoopNotificationService


def test_notification_skipped_when_disabled(monkeypatch) -> None:
    monkeypatch.setattr(settings, "notifications_enabled", False)

    result = notify_run_completed(date(2024, 1, 2), 3)

    assert result.status == "skipped"


def test_noop_provider_used_when_enabled(monkeypatch) -> None:
    monkeypatch.setattr(settings, "notifications_enabled", True)
    monkeypatch.setattr(settings, "notifications_provider", "noop")
    factory.get_notification_service.cache_clear()

    result = notify_run_completed(date(2024, 1, 2), 3, request_id="req-1")

    assert result.status == "noop"
    assert isinstance(factory.get_notification_service(), NoopNotificationService)
    factory.get_notification_service.cache_clear()


def test_unknown_provider_falls_back_to_noop(monkeypatch) -> None:
    monkeypatch.setattr(settings, "notifications_provider", "carrier-pigeon")
    factory.get_notification_service.cache_clear()

    assert isinstance(factory.get_notification_service(), NoopNotificationService)
    factory.get_notification_service.cache_clear()


def test_provider_failure_is_reported_not_raised(monkeypatch) -> None:
    monkeypatch.setattr(settings, "notifications_enabled", True)

    class BrokenService:
        def notify_run_completed(self, **kwargs) -> NotificationResult:
            raise RuntimeError("provider down")

    monkeypatch.setattr("morning.services.notifications.hooks.get_notification_service", lambda: BrokenService())

    result = notify_run_completed(date(2024, 1, 2), 2)

    assert result.status == "failed"
    assert "provider down" in result.reason
