"""Schemas for calculated schedules."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel

from morning.services.schedule_calculator import CalculatedSchedule, TimelineItem
from morning.services.time_format import format_minutes_to_hm, format_time, sleep_time_label
from morning.services.timeline_view import item_status


class TimelineItemPayload(BaseModel):
    task_id: str
    task_name: str
    start_time: datetime
    end_time: datetime
    start_label: str
    end_label: str
    minutes: int
    order: int
    status: Optional[Literal["past", "active", "upcoming"]] = None

    @classmethod
    def from_item(cls, item: TimelineItem, now: Optional[datetime] = None) -> "TimelineItemPayload":
        return cls(
            task_id=item.task_id,
            task_name=item.task_name,
            start_time=item.start_time,
            end_time=item.end_time,
            start_label=format_time(item.start_time),
            end_label=format_time(item.end_time),
            minutes=item.minutes,
            order=item.order,
            status=item_status(item, now) if now is not None else None,
        )


class ScheduleResponse(BaseModel):
    plan_date: date
    wake_up_time: datetime
    sleep_time: datetime
    leave_time: datetime
    wake_up_label: str
    sleep_label: str
    leave_label: str
    total_task_minutes: int
    total_task_label: str
    buffer_minutes: int
    is_overtime: bool
    timeline: List[TimelineItemPayload]

    @classmethod
    def from_schedule(
        cls,
        schedule: CalculatedSchedule,
        *,
        plan_date: date,
        buffer_minutes: int,
        now: Optional[datetime] = None,
    ) -> "ScheduleResponse":
        return cls(
            plan_date=plan_date,
            wake_up_time=schedule.wake_up_time,
            sleep_time=schedule.sleep_time,
            leave_time=schedule.leave_time,
            wake_up_label=format_time(schedule.wake_up_time),
            sleep_label=sleep_time_label(schedule.sleep_time, plan_date),
            leave_label=format_time(schedule.leave_time),
            total_task_minutes=schedule.total_task_minutes,
            total_task_label=format_minutes_to_hm(schedule.total_task_minutes),
            buffer_minutes=buffer_minutes,
            is_overtime=schedule.is_overtime,
            timeline=[TimelineItemPayload.from_item(item, now) for item in schedule.timeline],
        )
