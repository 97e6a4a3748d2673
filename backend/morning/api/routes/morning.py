"""Execution-day view: the schedule to follow this morning."""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from morning.api.deps import get_clock
from morning.api.schemas.morning import MorningViewResponse
from morning.api.schemas.plan import DateOption
from morning.api.schemas.schedule import ScheduleResponse
from morning.core.clock import Clock
from morning.db.deps import get_db
from morning.observability.tracing import trace
from morning.services.plan_repository import PlanRepository
from morning.services.schedule_calculator import InvalidScheduleError, calculate_schedule
from morning.services.time_format import date_label, format_time
from morning.services.timeline_view import active_index, pick_default_date

router = APIRouter()


@router.get("/morning", response_model=MorningViewResponse, tags=["morning"])
def morning_view(
    http_request: Request,
    plan_date: Optional[date] = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> MorningViewResponse:
    """Show today's plan, else tomorrow's, else the earliest one; ``?date=`` overrides."""
    request_id = getattr(http_request.state, "request_id", None)
    now = clock.now()
    today = clock.today()
    repo = PlanRepository(db)

    with trace("morning.view", metadata={"route": "/morning"}, request_id=request_id):
        plan_dates = repo.list_plan_dates()
        selected = plan_date or pick_default_date(plan_dates, today)
        data = repo.get_plan_data(selected)

        schedule = None
        current_index = None
        time_to_departure = 0
        if data is not None and data.tasks:
            try:
                calculated = calculate_schedule(data)
            except InvalidScheduleError as exc:
                raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
            schedule = ScheduleResponse.from_schedule(
                calculated,
                plan_date=selected,
                buffer_minutes=data.buffer_minutes,
                now=now,
            )
            current_index = active_index(calculated.timeline, now)
            time_to_departure = max(0, int((calculated.leave_time - now).total_seconds()))

    return MorningViewResponse(
        selected_date=selected,
        date_label=date_label(selected, today),
        available_dates=[DateOption(date=value, label=date_label(value, today)) for value in plan_dates],
        has_plan=data is not None,
        now=now,
        now_label=format_time(now),
        schedule=schedule,
        active_index=current_index,
        time_to_departure_seconds=time_to_departure,
        request_id=request_id or "",
    )
