"""Dedicated APScheduler worker process."""
from __future__ import annotations

import logging
import signal
import threading
from datetime import date

from apscheduler.schedulers.background import BackgroundScheduler

from morning.core.config import settings
from morning.core.logging import configure_logging
from morning.db.session import SessionLocal
from morning.services.job_runner import clear_stale_runtime


logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Scheduler worker starting (enabled=%s)", settings.scheduler_enabled)

    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    if settings.scheduler_enabled:
        _register_jobs(scheduler)
        scheduler.start()
        if settings.jobs_run_on_startup:
            logger.info("Running cleanup once on startup")
            _run_cleanup_job()
    else:
        logger.warning("Scheduler disabled via config; worker will idle")

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Scheduler worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def _register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        _run_cleanup_job,
        trigger="cron",
        hour=settings.cleanup_job_hour,
        minute=settings.cleanup_job_minute,
        id="runtime_cleanup_job",
        replace_existing=True,
    )
    logger.info(
        "Registered runtime cleanup job (daily at %02d:%02d %s)",
        settings.cleanup_job_hour,
        settings.cleanup_job_minute,
        settings.scheduler_timezone,
    )


def _run_cleanup_job() -> None:
    session = SessionLocal()
    try:
        result = clear_stale_runtime(session, date.today())
        logger.info("Runtime cleanup complete: cleared=%s date=%s", result.runtime_cleared, result.active_date)
    except Exception:  # pragma: no cover - defensive guard
        logger.exception("Runtime cleanup job failed")
    finally:
        session.close()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
