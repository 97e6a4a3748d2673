"""Operational endpoints for scheduler jobs."""
from __future__ import annotations

from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from morning.api.deps import get_clock
from morning.api.schemas.jobs import JobRunRequest, JobRunResponse
from morning.core.clock import Clock
from morning.core.config import settings
from morning.db.deps import get_db
from morning.observability.metrics import log_metric
from morning.observability.tracing import trace
from morning.services.job_runner import clear_stale_runtime

router = APIRouter()


@router.get("/jobs", tags=["jobs"])
def get_jobs_config(request: Request) -> dict:
    request_id = getattr(request.state, "request_id", None)
    with trace("jobs.config", metadata={"request_id": request_id}, request_id=request_id):
        data = {
            "scheduler_enabled": settings.scheduler_enabled,
            "schedule": {
                "timezone": settings.scheduler_timezone,
                "cleanup_time": f"{settings.cleanup_job_hour:02d}:{settings.cleanup_job_minute:02d}",
            },
            "tick_interval_seconds": settings.tick_interval_seconds,
        }
    return {**data, "request_id": request_id or ""}


@router.post("/jobs/run-now", response_model=JobRunResponse, tags=["jobs"])
def run_job_now(
    request: Request,
    payload: JobRunRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> JobRunResponse:
    if not settings.debug:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Run-now only allowed in debug mode")

    request_id = getattr(request.state, "request_id", None)
    metadata = {"job": payload.job, "request_id": request_id}
    start = perf_counter()
    with trace("jobs.run_now", metadata=metadata, request_id=request_id):
        result = clear_stale_runtime(db, clock.today())

    latency_ms = (perf_counter() - start) * 1000
    log_metric("jobs.run_now.success", 1, metadata={"job": payload.job})
    log_metric("jobs.run_now.latency_ms", latency_ms, metadata={"job": payload.job})

    return JobRunResponse(
        job=payload.job,
        runtime_cleared=result.runtime_cleared,
        active_date=result.active_date,
        request_id=request_id or "",
    )
