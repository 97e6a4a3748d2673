"""Schemas for timer run control."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from morning.api.schemas.schedule import TimelineItemPayload
from morning.services.execution_timer import TimerPhase
from morning.services.run_manager import RunView


class RunStartRequest(BaseModel):
    date: date


class RunExtendRequest(BaseModel):
    seconds: int = Field(60, gt=0, le=3600)


class RunStateResponse(BaseModel):
    phase: TimerPhase
    active_date: Optional[date]
    is_running: bool
    current_task_index: int
    remaining_seconds: int
    countdown: str
    task_count: int
    current_task: Optional[TimelineItemPayload]
    current_task_progress: float
    overall_progress: float
    overall_percent: int
    leave_time: Optional[datetime]
    time_to_departure_seconds: int
    keep_awake: bool
    low_time_warning: bool
    timeline: List[TimelineItemPayload]
    now: datetime
    request_id: str

    @classmethod
    def from_view(cls, view: RunView, request_id: str | None) -> "RunStateResponse":
        return cls(
            phase=view.phase,
            active_date=view.active_date,
            is_running=view.is_running,
            current_task_index=view.current_task_index,
            remaining_seconds=view.remaining_seconds,
            countdown=view.countdown,
            task_count=view.task_count,
            current_task=TimelineItemPayload.from_item(view.current_task) if view.current_task else None,
            current_task_progress=view.current_task_progress,
            overall_progress=view.overall_progress,
            overall_percent=int(view.overall_progress * 100),
            leave_time=view.leave_time,
            time_to_departure_seconds=view.time_to_departure_seconds,
            keep_awake=view.keep_awake,
            low_time_warning=view.low_time_warning,
            timeline=[TimelineItemPayload.from_item(item) for item in view.timeline],
            now=view.now,
            request_id=request_id or "",
        )
