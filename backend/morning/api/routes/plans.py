"""Day plan API routes: storage, editing and schedule calculation."""
from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from time import perf_counter
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from morning.api.deps import get_clock
from morning.api.schemas.plan import (
    DateOption,
    DayPlanPayload,
    DayPlanResponse,
    EditorTemplate,
    PlanEditorResponse,
    PlanListItem,
    PlanTaskSummary,
    SleepPreset,
    TaskAddRequest,
    TaskMoveRequest,
    TaskUpdateRequest,
)
from morning.api.schemas.schedule import ScheduleResponse
from morning.core.clock import Clock
from morning.core.config import settings
from morning.db.deps import get_db
from morning.db.models.day_plan import DayPlan
from morning.observability.metrics import log_metric
from morning.observability.tracing import trace
from morning.services import plan_editor
from morning.services.plan_editor import TaskNotFoundError
from morning.services.plan_repository import PlanNotFoundError, PlanRepository, TemplateNotFoundError
from morning.services.schedule_calculator import (
    DayPlanData,
    InvalidScheduleError,
    PlanTaskData,
    calculate_schedule,
)
from morning.services.time_format import date_label, date_options, format_minutes_to_hm

router = APIRouter()

BUFFER_OPTIONS = [0, 5, 10, 15, 20]
SLEEP_PRESET_MINUTES = [360, 390, 420, 450, 480, 510, 540]
MINUTE_PRESETS = [1, 3, 5, 10, 15, 20, 30]

TaskEdit = Callable[[List[PlanTaskData]], List[PlanTaskData]]


@router.get("/plans", response_model=List[PlanListItem], tags=["plans"])
def list_plans(
    http_request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> List[PlanListItem]:
    request_id = getattr(http_request.state, "request_id", None)
    today = clock.today()
    with trace("plan.list", metadata={"route": "/plans"}, request_id=request_id):
        plans = PlanRepository(db).list_plans()
    return [
        PlanListItem(
            date=plan.plan_date,
            date_label=date_label(plan.plan_date, today),
            leave_time=plan.leave_time,
            task_count=len(plan.tasks),
            total_task_minutes=sum(task.minutes for task in plan.tasks),
        )
        for plan in plans
    ]


@router.get("/plans/{plan_date}", response_model=DayPlanResponse, tags=["plans"])
def get_plan(
    plan_date: date,
    http_request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DayPlanResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("plan.get", metadata={"route": "/plans/{date}"}, plan_date=plan_date.isoformat(), request_id=request_id):
        plan = PlanRepository(db).get_plan(plan_date)
    if plan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")
    return _plan_response(plan, clock, request_id)


@router.put("/plans/{plan_date}", response_model=DayPlanResponse, tags=["plans"])
def save_plan(
    plan_date: date,
    payload: DayPlanPayload,
    http_request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DayPlanResponse:
    """Create or replace the plan for ``plan_date``."""
    if not payload.tasks:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Select at least one task before saving",
        )

    request_id = getattr(http_request.state, "request_id", None)
    try:
        data = payload.to_plan_data(plan_date)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    start = perf_counter()
    with trace(
        "plan.save",
        metadata={"tasks": len(data.tasks), "leave_time": data.leave_time},
        plan_date=plan_date.isoformat(),
        request_id=request_id,
    ):
        try:
            calculate_schedule(data)
        except InvalidScheduleError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
        plan = PlanRepository(db).put_plan(data)

    latency_ms = (perf_counter() - start) * 1000
    log_metric("plan.save.success", 1, metadata={"plan_date": plan_date.isoformat()})
    log_metric("plan.save.tasks", len(data.tasks), metadata={"plan_date": plan_date.isoformat()})
    log_metric("plan.save.latency_ms", latency_ms, metadata={"plan_date": plan_date.isoformat()})
    return _plan_response(plan, clock, request_id)


@router.delete("/plans/{plan_date}", status_code=status.HTTP_204_NO_CONTENT, tags=["plans"])
def delete_plan(plan_date: date, http_request: Request, db: Session = Depends(get_db)) -> Response:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("plan.delete", plan_date=plan_date.isoformat(), request_id=request_id):
        try:
            PlanRepository(db).delete_plan(plan_date)
        except PlanNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")
    log_metric("plan.delete.success", 1, metadata={"plan_date": plan_date.isoformat()})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/plans/{plan_date}/schedule", response_model=ScheduleResponse, tags=["plans"])
def get_plan_schedule(
    plan_date: date,
    http_request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ScheduleResponse:
    request_id = getattr(http_request.state, "request_id", None)
    data = PlanRepository(db).get_plan_data(plan_date)
    if data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")
    with trace("plan.schedule", plan_date=plan_date.isoformat(), request_id=request_id):
        try:
            schedule = calculate_schedule(data)
        except InvalidScheduleError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    log_metric("plan.schedule.overtime", 1 if schedule.is_overtime else 0, metadata={"plan_date": plan_date.isoformat()})
    return ScheduleResponse.from_schedule(
        schedule,
        plan_date=plan_date,
        buffer_minutes=data.buffer_minutes,
        now=clock.now(),
    )


@router.get("/plans/{plan_date}/editor", response_model=PlanEditorResponse, tags=["plans"])
def plan_editor_state(
    plan_date: date,
    http_request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> PlanEditorResponse:
    """Stored plan for the date, or the defaults for a new one, plus editor options."""
    request_id = getattr(http_request.state, "request_id", None)
    repo = PlanRepository(db)
    data = repo.get_plan_data(plan_date)
    exists = data is not None
    if data is None:
        data = _default_plan(plan_date)
    return _editor_response(repo, data, exists=exists, clock=clock, request_id=request_id)


@router.post("/plans/{plan_date}/copy-previous", response_model=PlanEditorResponse, tags=["plans"])
def copy_previous_plan(
    plan_date: date,
    http_request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> PlanEditorResponse:
    """Prefill the editor from the previous day's plan under fresh task ids (not saved)."""
    request_id = getattr(http_request.state, "request_id", None)
    repo = PlanRepository(db)
    previous = repo.get_plan_data(plan_date - timedelta(days=1))
    if previous is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No plan for the previous day")
    copied = replace(previous, plan_date=plan_date, tasks=tuple(plan_editor.copy_tasks(previous.tasks)))
    log_metric("plan.copy_previous.success", 1, metadata={"plan_date": plan_date.isoformat()})
    return _editor_response(
        repo,
        copied,
        exists=repo.get_plan(plan_date) is not None,
        clock=clock,
        request_id=request_id,
    )


@router.post("/plans/{plan_date}/tasks", response_model=DayPlanResponse, tags=["plans"])
def add_task(
    plan_date: date,
    payload: TaskAddRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DayPlanResponse:
    repo = PlanRepository(db)
    template = _require_template(repo, payload.template_id)
    return _edit_tasks(
        repo,
        plan_date,
        lambda tasks: plan_editor.add_from_template(tasks, template),
        action="add",
        clock=clock,
        request_id=getattr(http_request.state, "request_id", None),
    )


@router.post("/plans/{plan_date}/templates/{template_id}/toggle", response_model=DayPlanResponse, tags=["plans"])
def toggle_template(
    plan_date: date,
    template_id: str,
    http_request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DayPlanResponse:
    """Add the template's task to the plan, or remove it when already selected."""
    repo = PlanRepository(db)
    template = _require_template(repo, template_id)
    return _edit_tasks(
        repo,
        plan_date,
        lambda tasks: plan_editor.toggle_template(tasks, template),
        action="toggle",
        clock=clock,
        request_id=getattr(http_request.state, "request_id", None),
    )


@router.patch("/plans/{plan_date}/tasks/{task_id}", response_model=DayPlanResponse, tags=["plans"])
def update_task(
    plan_date: date,
    task_id: str,
    payload: TaskUpdateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DayPlanResponse:
    """Rename a task or change its minutes (absolute or by delta, never below one)."""

    def edit(tasks: List[PlanTaskData]) -> List[PlanTaskData]:
        if payload.name is not None:
            tasks = plan_editor.rename_task(tasks, task_id, payload.name)
        if payload.minutes is not None:
            tasks = plan_editor.set_minutes(tasks, task_id, payload.minutes)
        if payload.delta_minutes is not None:
            tasks = plan_editor.adjust_minutes(tasks, task_id, payload.delta_minutes)
        if plan_editor.find_task(tasks, task_id) is None:
            raise TaskNotFoundError(task_id)
        return tasks

    return _edit_tasks(
        PlanRepository(db),
        plan_date,
        edit,
        action="update",
        clock=clock,
        request_id=getattr(http_request.state, "request_id", None),
    )


@router.post("/plans/{plan_date}/tasks/{task_id}/move", response_model=DayPlanResponse, tags=["plans"])
def move_task(
    plan_date: date,
    task_id: str,
    payload: TaskMoveRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DayPlanResponse:
    return _edit_tasks(
        PlanRepository(db),
        plan_date,
        lambda tasks: plan_editor.move_task(tasks, task_id, payload.to_index),
        action="move",
        clock=clock,
        request_id=getattr(http_request.state, "request_id", None),
    )


@router.delete("/plans/{plan_date}/tasks/{task_id}", response_model=DayPlanResponse, tags=["plans"])
def remove_task(
    plan_date: date,
    task_id: str,
    http_request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DayPlanResponse:
    return _edit_tasks(
        PlanRepository(db),
        plan_date,
        lambda tasks: plan_editor.remove_task(tasks, task_id),
        action="remove",
        clock=clock,
        request_id=getattr(http_request.state, "request_id", None),
    )


def _edit_tasks(
    repo: PlanRepository,
    plan_date: date,
    edit: TaskEdit,
    *,
    action: str,
    clock: Clock,
    request_id: Optional[str],
) -> DayPlanResponse:
    data = repo.get_plan_data(plan_date)
    if data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")

    with trace(f"plan.task.{action}", plan_date=plan_date.isoformat(), request_id=request_id):
        try:
            tasks = edit(list(data.tasks))
        except TaskNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
        plan = repo.put_plan(replace(data, tasks=tuple(tasks)))

    log_metric(f"plan.task.{action}.success", 1, metadata={"plan_date": plan_date.isoformat()})
    return _plan_response(plan, clock, request_id)


def _require_template(repo: PlanRepository, template_id: str):
    try:
        return repo.get_template(template_id)
    except TemplateNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")


def _default_plan(plan_date: date) -> DayPlanData:
    return DayPlanData(
        plan_date=plan_date,
        leave_time=settings.default_leave_time,
        sleep_minutes=settings.default_sleep_minutes,
        buffer_minutes=settings.default_buffer_minutes,
    )


def _task_summaries(tasks) -> List[PlanTaskSummary]:
    return [
        PlanTaskSummary(
            id=task.id,
            template_id=task.template_id,
            name=task.name,
            minutes=task.minutes,
            order=task.order,
        )
        for task in plan_editor.normalize_order(tasks)
    ]


def _plan_response(plan: DayPlan, clock: Clock, request_id: Optional[str]) -> DayPlanResponse:
    data = DayPlanData.from_model(plan)
    schedule = calculate_schedule(data)
    return DayPlanResponse(
        date=data.plan_date,
        date_label=date_label(data.plan_date, clock.today()),
        leave_time=data.leave_time,
        sleep_minutes=data.sleep_minutes,
        buffer_minutes=data.buffer_minutes,
        tasks=_task_summaries(data.tasks),
        schedule=ScheduleResponse.from_schedule(
            schedule,
            plan_date=data.plan_date,
            buffer_minutes=data.buffer_minutes,
        ),
        request_id=request_id or "",
    )


def _editor_response(
    repo: PlanRepository,
    data: DayPlanData,
    *,
    exists: bool,
    clock: Clock,
    request_id: Optional[str],
) -> PlanEditorResponse:
    today = clock.today()
    templates = repo.list_templates()
    schedule = None
    if data.tasks:
        schedule = ScheduleResponse.from_schedule(
            calculate_schedule(data),
            plan_date=data.plan_date,
            buffer_minutes=data.buffer_minutes,
        )
    return PlanEditorResponse(
        date=data.plan_date,
        date_label=date_label(data.plan_date, today),
        exists=exists,
        leave_time=data.leave_time,
        sleep_minutes=data.sleep_minutes,
        buffer_minutes=data.buffer_minutes,
        tasks=_task_summaries(data.tasks),
        templates=[
            EditorTemplate(
                id=template.id,
                name=template.name,
                default_minutes=template.default_minutes,
                selected=plan_editor.is_selected(data.tasks, template.id),
            )
            for template in templates
        ],
        schedule=schedule,
        buffer_options=BUFFER_OPTIONS,
        sleep_presets=[
            SleepPreset(label=format_minutes_to_hm(minutes), minutes=minutes) for minutes in SLEEP_PRESET_MINUTES
        ],
        minute_presets=MINUTE_PRESETS,
        date_options=[DateOption(date=value, label=label) for value, label in date_options(today)],
        request_id=request_id or "",
    )
