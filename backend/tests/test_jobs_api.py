from __future__ import annotations

from datetime import date

from morning.core.config import settings
from morning.services.execution_timer import RuntimeSnapshot
from morning.services.plan_repository import PlanRepository


def _save_runtime(session_factory, snapshot):
    session = session_factory()
    try:
        PlanRepository(session).save_runtime(snapshot)
    finally:
        session.close()


def test_jobs_config(client) -> None:
    response = client.get("/jobs")

    assert response.status_code == 200
    body = response.json()
    assert "scheduler_enabled" in body
    assert body["schedule"]["cleanup_time"] == f"{settings.cleanup_job_hour:02d}:{settings.cleanup_job_minute:02d}"
    assert body["request_id"]


def test_run_now_clears_stale_runtime(client, session_factory, monkeypatch) -> None:
    monkeypatch.setattr(settings, "debug", True)
    _save_runtime(session_factory, RuntimeSnapshot(date(2024, 1, 1), True, 0, 60))

    response = client.post("/jobs/run-now", json={"job": "runtime_cleanup"})

    assert response.status_code == 200
    body = response.json()
    assert body["runtime_cleared"] is True
    assert body["active_date"] == "2024-01-01"


def test_run_now_forbidden_outside_debug(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "debug", False)

    response = client.post("/jobs/run-now", json={"job": "runtime_cleanup"})

    assert response.status_code == 403
