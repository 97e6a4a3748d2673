"""Main FastAPI application for the morning routine backend."""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI, Request

from morning.api.routes.jobs import router as jobs_router
from morning.api.routes.morning import router as morning_router
from morning.api.routes.plans import router as plans_router
from morning.api.routes.run import router as run_router
from morning.api.routes.schedule import router as schedule_router
from morning.api.routes.templates import router as templates_router
from morning.core.config import settings
from morning.core.logging import configure_logging
from morning.core.middleware import RequestIDMiddleware
from morning.db.session import SessionLocal
from morning.observability.client import init_opik
from morning.observability.tracing import trace
from morning.services.run_manager import RunManager
from morning.services.tick_driver import WallClockSampler

configure_logging(log_level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(templates_router)
app.include_router(plans_router)
app.include_router(schedule_router)
app.include_router(morning_router)
app.include_router(run_router)
app.include_router(jobs_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.on_event("startup")
def startup_timer_service() -> None:
    """Start the in-process scheduler that drives ticks and the wall clock."""
    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)
    scheduler.start()
    sampler = WallClockSampler(scheduler)
    sampler.start()
    manager = RunManager(scheduler, SessionLocal, clock=sampler)

    app.state.scheduler = scheduler
    app.state.wall_clock = sampler
    app.state.run_manager = manager

    if settings.restore_run_on_startup:
        try:
            manager.restore_run()
        except Exception:
            logger.exception("Could not restore the previous run; starting idle")


@app.on_event("shutdown")
def shutdown_timer_service() -> None:
    manager = getattr(app.state, "run_manager", None)
    if manager is not None:
        manager.shutdown()
    sampler = getattr(app.state, "wall_clock", None)
    if sampler is not None:
        sampler.stop()
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
    app.state.run_manager = None
    app.state.wall_clock = None


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
