"""Storage access for templates, day plans and the runtime mirror."""
from __future__ import annotations

import logging
from datetime import date
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import asc, func
from sqlalchemy.orm import Session

from morning.db.models.day_plan import DayPlan
from morning.db.models.plan_task import PlanTask
from morning.db.models.runtime_state import SINGLETON_ID, RuntimeState
from morning.db.models.task_template import TaskTemplate
from morning.services.execution_timer import RuntimeSnapshot
from morning.services.plan_editor import generate_template_id, normalize_order
from morning.services.schedule_calculator import DayPlanData

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES = (
    ("wash-face", "Wash face", 3),
    ("brush-teeth", "Brush teeth", 3),
    ("change-clothes", "Get dressed", 7),
    ("breakfast", "Breakfast", 12),
    ("cleanup", "Clean up", 3),
    ("prepare-leave", "Pack bag and keys", 5),
    ("prepare-school", "Coat and gloves", 3),
)


class PlanNotFoundError(LookupError):
    def __init__(self, plan_date: date):
        super().__init__(f"No plan for {plan_date.isoformat()}")
        self.plan_date = plan_date


class TemplateNotFoundError(LookupError):
    def __init__(self, template_id: str):
        super().__init__(f"Template {template_id!r} not found")
        self.template_id = template_id


class PlanRepository:
    """Explicit repository around one SQLAlchemy session.

    Methods that change data commit before returning and roll back on
    failure, mirroring how the routes manage their sessions.
    """

    def __init__(self, db: Session):
        self.db = db

    # templates

    def list_templates(self, *, seed_defaults: bool = True) -> List[TaskTemplate]:
        templates = self.db.query(TaskTemplate).order_by(asc(TaskTemplate.position), asc(TaskTemplate.created_at)).all()
        if templates or not seed_defaults:
            return templates
        return self.seed_default_templates()

    def seed_default_templates(self) -> List[TaskTemplate]:
        seeded = [
            TaskTemplate(id=template_id, name=name, default_minutes=minutes, position=position)
            for position, (template_id, name, minutes) in enumerate(DEFAULT_TEMPLATES)
        ]
        with self._commit():
            self.db.add_all(seeded)
        logger.info("Seeded %d default templates", len(seeded))
        return seeded

    def get_template(self, template_id: str) -> TaskTemplate:
        template = self.db.get(TaskTemplate, template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def add_template(self, name: str, default_minutes: int) -> TaskTemplate:
        template = TaskTemplate(
            id=generate_template_id(),
            name=_clean_name(name),
            default_minutes=max(1, int(default_minutes)),
            position=self._next_position(),
        )
        with self._commit():
            self.db.add(template)
        self.db.refresh(template)
        return template

    def update_template(
        self,
        template_id: str,
        *,
        name: Optional[str] = None,
        default_minutes: Optional[int] = None,
    ) -> TaskTemplate:
        template = self.get_template(template_id)
        with self._commit():
            if name is not None:
                template.name = _clean_name(name)
            if default_minutes is not None:
                template.default_minutes = max(1, int(default_minutes))
            self.db.add(template)
        self.db.refresh(template)
        return template

    def delete_template(self, template_id: str) -> None:
        # Plan tasks keep their own copy of name and minutes.
        template = self.get_template(template_id)
        with self._commit():
            self.db.delete(template)

    # plans

    def get_plan(self, plan_date: date) -> Optional[DayPlan]:
        return self.db.get(DayPlan, plan_date)

    def require_plan(self, plan_date: date) -> DayPlan:
        plan = self.get_plan(plan_date)
        if plan is None:
            raise PlanNotFoundError(plan_date)
        return plan

    def get_plan_data(self, plan_date: date) -> Optional[DayPlanData]:
        plan = self.get_plan(plan_date)
        return DayPlanData.from_model(plan) if plan else None

    def put_plan(self, data: DayPlanData) -> DayPlan:
        """Store ``data`` as the plan for its date, replacing any previous one."""
        tasks = normalize_order(data.tasks)
        with self._commit():
            plan = self.db.get(DayPlan, data.plan_date)
            if plan is None:
                plan = DayPlan(plan_date=data.plan_date)
                self.db.add(plan)
            plan.leave_time = data.leave_time
            plan.sleep_minutes = data.sleep_minutes
            plan.buffer_minutes = data.buffer_minutes
            plan.tasks.clear()
            # Flush the orphan deletes first so reused task ids do not collide.
            self.db.flush()
            plan.tasks.extend(
                PlanTask(
                    id=task.id,
                    template_id=task.template_id,
                    name=task.name,
                    minutes=task.minutes,
                    order=task.order,
                )
                for task in tasks
            )
        self.db.refresh(plan)
        return plan

    def delete_plan(self, plan_date: date) -> None:
        plan = self.require_plan(plan_date)
        with self._commit():
            self.db.delete(plan)

    def list_plans(self) -> List[DayPlan]:
        return self.db.query(DayPlan).order_by(asc(DayPlan.plan_date)).all()

    def list_plan_dates(self) -> List[date]:
        return [row[0] for row in self.db.query(DayPlan.plan_date).order_by(asc(DayPlan.plan_date)).all()]

    # runtime mirror

    def get_runtime(self) -> Optional[RuntimeSnapshot]:
        row = self.db.get(RuntimeState, SINGLETON_ID)
        if row is None:
            return None
        return RuntimeSnapshot(
            active_date=row.active_date,
            is_running=bool(row.is_running),
            current_task_index=row.current_task_index,
            remaining_seconds=row.remaining_seconds,
        )

    def save_runtime(self, snapshot: Optional[RuntimeSnapshot]) -> None:
        """Upsert the runtime record, or delete it when ``snapshot`` is None."""
        row = self.db.get(RuntimeState, SINGLETON_ID)
        with self._commit():
            if snapshot is None:
                if row is not None:
                    self.db.delete(row)
                return
            if row is None:
                row = RuntimeState(id=SINGLETON_ID)
            row.active_date = snapshot.active_date
            row.is_running = snapshot.is_running
            row.current_task_index = snapshot.current_task_index
            row.remaining_seconds = snapshot.remaining_seconds
            self.db.add(row)

    def _next_position(self) -> int:
        highest = self.db.query(func.max(TaskTemplate.position)).scalar()
        return 0 if highest is None else highest + 1

    @contextmanager
    def _commit(self) -> Iterator[Session]:
        try:
            yield self.db
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError("Template name must not be empty")
    return cleaned
