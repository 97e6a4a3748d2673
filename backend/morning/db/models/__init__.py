"""ORM models exposed for metadata discovery."""
from morning.db.models.day_plan import DayPlan
from morning.db.models.plan_task import PlanTask
from morning.db.models.runtime_state import RuntimeState
from morning.db.models.task_template import TaskTemplate

__all__ = [
    "DayPlan",
    "PlanTask",
    "RuntimeState",
    "TaskTemplate",
]
