"""Backward scheduling from a departure time.

Given a day's plan, work back from the leave time to find when to wake up
and when to go to bed, then lay the tasks out forward from the wake time.
The calculation never consults the wall clock, so the same plan always
yields the same schedule.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple

_TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")


class InvalidScheduleError(ValueError):
    """Raised when a plan cannot be turned into a schedule."""


@dataclass(frozen=True)
class PlanTaskData:
    id: str
    name: str
    minutes: int
    order: int
    template_id: Optional[str] = None


@dataclass(frozen=True)
class DayPlanData:
    plan_date: date
    leave_time: str
    sleep_minutes: int
    buffer_minutes: int
    tasks: Tuple[PlanTaskData, ...] = field(default_factory=tuple)

    @classmethod
    def from_model(cls, plan) -> "DayPlanData":
        """Build a value copy of a ``DayPlan`` ORM row."""
        return cls(
            plan_date=plan.plan_date,
            leave_time=plan.leave_time,
            sleep_minutes=plan.sleep_minutes,
            buffer_minutes=plan.buffer_minutes,
            tasks=tuple(
                PlanTaskData(
                    id=task.id,
                    name=task.name,
                    minutes=task.minutes,
                    order=task.order,
                    template_id=task.template_id,
                )
                for task in plan.tasks
            ),
        )


@dataclass(frozen=True)
class TimelineItem:
    task_id: str
    task_name: str
    start_time: datetime
    end_time: datetime
    minutes: int
    order: int

    @property
    def duration_seconds(self) -> int:
        return self.minutes * 60


@dataclass(frozen=True)
class CalculatedSchedule:
    wake_up_time: datetime
    sleep_time: datetime
    leave_time: datetime
    timeline: Tuple[TimelineItem, ...]
    total_task_minutes: int
    is_overtime: bool


def parse_time_of_day(value: str) -> time:
    """Parse an ``HH:mm`` string; anything else raises ``InvalidScheduleError``."""
    match = _TIME_PATTERN.match(value or "")
    if not match:
        raise InvalidScheduleError(f"Leave time must be HH:mm, got {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidScheduleError(f"Leave time out of range: {value!r}")
    return time(hour=hour, minute=minute)


def parse_leave_time(plan_date: date, value: str) -> datetime:
    """Resolve an ``HH:mm`` leave time against the plan's calendar date."""
    return datetime.combine(plan_date, parse_time_of_day(value))


def sort_tasks(tasks: Iterable[PlanTaskData]) -> List[PlanTaskData]:
    # sorted() is stable, so equal order keys keep their input position.
    return sorted(tasks, key=lambda task: task.order)


def calculate_schedule(plan: DayPlanData) -> CalculatedSchedule:
    """Turn a day plan into wake/sleep times and an absolute timeline."""
    _validate(plan)
    leave_time = parse_leave_time(plan.plan_date, plan.leave_time)
    ordered = sort_tasks(plan.tasks)

    total_task_minutes = sum(task.minutes for task in ordered)
    wake_up_time = leave_time - timedelta(minutes=total_task_minutes + plan.buffer_minutes)
    sleep_time = wake_up_time - timedelta(minutes=plan.sleep_minutes)

    timeline: List[TimelineItem] = []
    cursor = wake_up_time
    for task in ordered:
        end_time = cursor + timedelta(minutes=task.minutes)
        timeline.append(
            TimelineItem(
                task_id=task.id,
                task_name=task.name,
                start_time=cursor,
                end_time=end_time,
                minutes=task.minutes,
                order=task.order,
            )
        )
        cursor = end_time

    # Only trips when the wake time no longer matches the tasks, so callers
    # must always recompute instead of reusing a stored wake time.
    last_end = timeline[-1].end_time if timeline else wake_up_time
    is_overtime = last_end + timedelta(minutes=plan.buffer_minutes) > leave_time

    return CalculatedSchedule(
        wake_up_time=wake_up_time,
        sleep_time=sleep_time,
        leave_time=leave_time,
        timeline=tuple(timeline),
        total_task_minutes=total_task_minutes,
        is_overtime=is_overtime,
    )


def _validate(plan: DayPlanData) -> None:
    if plan.sleep_minutes < 0:
        raise InvalidScheduleError("sleep_minutes must be >= 0")
    if plan.buffer_minutes < 0:
        raise InvalidScheduleError("buffer_minutes must be >= 0")
    for task in plan.tasks:
        if task.minutes < 1:
            raise InvalidScheduleError(f"Task {task.id!r} must last at least one minute")
