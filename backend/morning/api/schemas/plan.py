"""Schemas for day plans and their tasks."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from morning.api.schemas.schedule import ScheduleResponse
from morning.api.schemas.template import TemplateSummary
from morning.services.plan_editor import generate_task_id, normalize_order
from morning.services.schedule_calculator import DayPlanData, PlanTaskData

LEAVE_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class PlanTaskPayload(BaseModel):
    id: Optional[str] = Field(default=None, max_length=64)
    template_id: Optional[str] = Field(default=None, max_length=64)
    name: str = Field(..., min_length=1)
    minutes: int = Field(..., ge=1)
    order: Optional[int] = Field(default=None, ge=0)


class DayPlanPayload(BaseModel):
    leave_time: str = Field(..., pattern=LEAVE_TIME_PATTERN, examples=["08:00"])
    sleep_minutes: int = Field(..., ge=0)
    buffer_minutes: int = Field(..., ge=0)
    tasks: List[PlanTaskPayload] = Field(default_factory=list)

    def to_plan_data(self, plan_date: date) -> DayPlanData:
        """Domain plan for ``plan_date``; tasks without a unique id get a fresh one."""
        tasks = []
        seen = set()
        for index, task in enumerate(self.tasks):
            name = task.name.strip()
            if not name:
                raise ValueError("Task name must not be empty")
            task_id = task.id if task.id and task.id not in seen else generate_task_id()
            seen.add(task_id)
            tasks.append(
                PlanTaskData(
                    id=task_id,
                    template_id=task.template_id,
                    name=name,
                    minutes=task.minutes,
                    order=task.order if task.order is not None else index,
                )
            )
        return DayPlanData(
            plan_date=plan_date,
            leave_time=self.leave_time,
            sleep_minutes=self.sleep_minutes,
            buffer_minutes=self.buffer_minutes,
            tasks=tuple(normalize_order(tasks)),
        )


class SchedulePreviewRequest(DayPlanPayload):
    date: date


class PlanTaskSummary(BaseModel):
    id: str
    template_id: Optional[str]
    name: str
    minutes: int
    order: int


class DayPlanResponse(BaseModel):
    date: date
    date_label: str
    leave_time: str
    sleep_minutes: int
    buffer_minutes: int
    tasks: List[PlanTaskSummary]
    schedule: ScheduleResponse
    request_id: str


class PlanListItem(BaseModel):
    date: date
    date_label: str
    leave_time: str
    task_count: int
    total_task_minutes: int


class TaskAddRequest(BaseModel):
    template_id: str


class TaskUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    minutes: Optional[int] = None
    delta_minutes: Optional[int] = None


class TaskMoveRequest(BaseModel):
    to_index: int = Field(..., ge=0)


class SleepPreset(BaseModel):
    label: str
    minutes: int


class DateOption(BaseModel):
    date: date
    label: str


class EditorTemplate(TemplateSummary):
    selected: bool


class PlanEditorResponse(BaseModel):
    date: date
    date_label: str
    exists: bool
    leave_time: str
    sleep_minutes: int
    buffer_minutes: int
    tasks: List[PlanTaskSummary]
    templates: List[EditorTemplate]
    schedule: Optional[ScheduleResponse]
    buffer_options: List[int]
    sleep_presets: List[SleepPreset]
    minute_presets: List[int]
    date_options: List[DateOption]
    request_id: str
