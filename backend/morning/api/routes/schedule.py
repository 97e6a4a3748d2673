"""Stateless schedule preview for plans that have not been saved."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from morning.api.deps import get_clock
from morning.api.schemas.plan import SchedulePreviewRequest
from morning.api.schemas.schedule import ScheduleResponse
from morning.core.clock import Clock
from morning.observability.metrics import log_metric
from morning.observability.tracing import trace
from morning.services.schedule_calculator import InvalidScheduleError, calculate_schedule

router = APIRouter()


@router.post("/schedule/preview", response_model=ScheduleResponse, tags=["schedule"])
def preview_schedule(
    payload: SchedulePreviewRequest,
    http_request: Request,
    clock: Clock = Depends(get_clock),
) -> ScheduleResponse:
    """Back-calculate wake-up and bedtime for a draft plan without storing it."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "schedule.preview",
        metadata={"tasks": len(payload.tasks), "leave_time": payload.leave_time},
        plan_date=payload.date.isoformat(),
        request_id=request_id,
    ):
        try:
            data = payload.to_plan_data(payload.date)
            schedule = calculate_schedule(data)
        except (InvalidScheduleError, ValueError) as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))

    log_metric("schedule.preview.overtime", 1 if schedule.is_overtime else 0, metadata={"plan_date": payload.date.isoformat()})
    return ScheduleResponse.from_schedule(
        schedule,
        plan_date=payload.date,
        buffer_minutes=data.buffer_minutes,
        now=clock.now(),
    )
