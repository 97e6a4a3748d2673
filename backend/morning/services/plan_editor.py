"""Pure edits on a plan's task list.

Every function returns a fresh list whose ``order`` values run 0..N-1 in
list order; the input is never mutated.
"""
from __future__ import annotations

from dataclasses import replace
from secrets import token_hex
from typing import Iterable, List, Optional

from morning.services.schedule_calculator import PlanTaskData, sort_tasks


class TaskNotFoundError(KeyError):
    """Raised when an edit targets a task id that is not in the plan."""


def generate_task_id() -> str:
    return f"task-{token_hex(6)}"


def generate_template_id() -> str:
    return f"tmpl-{token_hex(6)}"


def renumber(tasks: Iterable[PlanTaskData]) -> List[PlanTaskData]:
    return [task if task.order == index else replace(task, order=index) for index, task in enumerate(tasks)]


def normalize_order(tasks: Iterable[PlanTaskData]) -> List[PlanTaskData]:
    """Sort by the current order and close any gaps."""
    return renumber(sort_tasks(tasks))


def is_selected(tasks: Iterable[PlanTaskData], template_id: str) -> bool:
    return any(task.template_id == template_id for task in tasks)


def add_from_template(tasks: Iterable[PlanTaskData], template) -> List[PlanTaskData]:
    """Append a task that copies the template's current name and default minutes."""
    ordered = normalize_order(tasks)
    ordered.append(
        PlanTaskData(
            id=generate_task_id(),
            template_id=template.id,
            name=template.name,
            minutes=max(1, int(template.default_minutes)),
            order=len(ordered),
        )
    )
    return ordered


def toggle_template(tasks: Iterable[PlanTaskData], template) -> List[PlanTaskData]:
    ordered = normalize_order(tasks)
    if is_selected(ordered, template.id):
        return renumber(task for task in ordered if task.template_id != template.id)
    return add_from_template(ordered, template)


def remove_task(tasks: Iterable[PlanTaskData], task_id: str) -> List[PlanTaskData]:
    ordered = normalize_order(tasks)
    _index_of(ordered, task_id)
    return renumber(task for task in ordered if task.id != task_id)


def move_task(tasks: Iterable[PlanTaskData], task_id: str, to_index: int) -> List[PlanTaskData]:
    """Move one task to ``to_index`` (clamped to the list bounds)."""
    ordered = normalize_order(tasks)
    moved = ordered.pop(_index_of(ordered, task_id))
    target = min(max(0, to_index), len(ordered))
    ordered.insert(target, moved)
    return renumber(ordered)


def set_minutes(tasks: Iterable[PlanTaskData], task_id: str, minutes: int) -> List[PlanTaskData]:
    return _update(tasks, task_id, minutes=max(1, int(minutes)))


def adjust_minutes(tasks: Iterable[PlanTaskData], task_id: str, delta: int) -> List[PlanTaskData]:
    ordered = normalize_order(tasks)
    current = ordered[_index_of(ordered, task_id)]
    return set_minutes(ordered, task_id, current.minutes + delta)


def rename_task(tasks: Iterable[PlanTaskData], task_id: str, name: str) -> List[PlanTaskData]:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError("Task name must not be empty")
    return _update(tasks, task_id, name=cleaned)


def copy_tasks(tasks: Iterable[PlanTaskData]) -> List[PlanTaskData]:
    """Duplicate a task list under fresh ids (copying yesterday's plan)."""
    return [replace(task, id=generate_task_id()) for task in normalize_order(tasks)]


def find_task(tasks: Iterable[PlanTaskData], task_id: str) -> Optional[PlanTaskData]:
    return next((task for task in tasks if task.id == task_id), None)


def _update(tasks: Iterable[PlanTaskData], task_id: str, **changes) -> List[PlanTaskData]:
    ordered = normalize_order(tasks)
    index = _index_of(ordered, task_id)
    ordered[index] = replace(ordered[index], **changes)
    return ordered


def _index_of(tasks: List[PlanTaskData], task_id: str) -> int:
    for index, task in enumerate(tasks):
        if task.id == task_id:
            return index
    raise TaskNotFoundError(task_id)
