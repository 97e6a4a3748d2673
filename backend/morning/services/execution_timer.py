"""Countdown state machine that walks through a calculated timeline.

States: ``idle -> running <-> paused -> completed``. ``tick`` is a plain
state transition; who calls it once per second is the tick driver's job.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from morning.services.schedule_calculator import TimelineItem

logger = logging.getLogger(__name__)


class TimerPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class TimerError(Exception):
    """Base class for rejected timer operations."""


class IllegalTransitionError(TimerError):
    def __init__(self, action: str, phase: TimerPhase):
        super().__init__(f"Cannot {action} while {phase.value}")
        self.action = action
        self.phase = phase


class EmptyTimelineError(TimerError):
    def __init__(self) -> None:
        super().__init__("Nothing to run: the timeline has no tasks")


@dataclass(frozen=True)
class RuntimeSnapshot:
    active_date: Optional[date]
    is_running: bool
    current_task_index: int
    remaining_seconds: int


CompletionListener = Callable[["ExecutionTimer"], None]
RunningListener = Callable[[bool], None]


class ExecutionTimer:
    """Live countdown across the tasks of one timeline."""

    def __init__(
        self,
        timeline: Sequence[TimelineItem],
        *,
        active_date: Optional[date] = None,
        leave_time: Optional[datetime] = None,
    ):
        self.timeline: Tuple[TimelineItem, ...] = tuple(timeline)
        self.active_date = active_date
        self.leave_time = leave_time
        self.phase = TimerPhase.IDLE
        self.current_task_index = 0
        self.remaining_seconds = 0
        self.elapsed_in_task = 0
        self._completion_emitted = False
        self._completion_listeners: List[CompletionListener] = []
        self._running_listeners: List[RunningListener] = []

    @classmethod
    def restore(
        cls,
        timeline: Sequence[TimelineItem],
        snapshot: RuntimeSnapshot,
        *,
        leave_time: Optional[datetime] = None,
    ) -> "ExecutionTimer":
        """Rebuild a started timer from a persisted snapshot (resume after reload).

        Only the remaining time is stored, so an extended task comes back with
        its elapsed time reset to zero.
        """
        timer = cls(timeline, active_date=snapshot.active_date, leave_time=leave_time)
        if not timer.timeline:
            raise EmptyTimelineError()
        if not 0 <= snapshot.current_task_index < len(timer.timeline):
            raise ValueError(
                f"Task index {snapshot.current_task_index} is outside a timeline of {len(timer.timeline)}"
            )
        if snapshot.remaining_seconds < 1:
            raise ValueError("remaining_seconds must be positive")

        timer.current_task_index = snapshot.current_task_index
        timer.remaining_seconds = snapshot.remaining_seconds
        current = timer.timeline[snapshot.current_task_index]
        timer.elapsed_in_task = max(0, current.duration_seconds - snapshot.remaining_seconds)
        timer.phase = TimerPhase.RUNNING if snapshot.is_running else TimerPhase.PAUSED
        return timer

    # listeners

    def on_complete(self, listener: CompletionListener) -> None:
        self._completion_listeners.append(listener)

    def on_running_changed(self, listener: RunningListener) -> None:
        """Register a host effect (e.g. keep the screen awake) for running edges."""
        self._running_listeners.append(listener)

    # read-only views

    @property
    def is_running(self) -> bool:
        return self.phase is TimerPhase.RUNNING

    @property
    def is_last_task(self) -> bool:
        return self.current_task_index >= len(self.timeline) - 1

    @property
    def current_task(self) -> Optional[TimelineItem]:
        if self.phase is TimerPhase.IDLE or not self.timeline:
            return None
        return self.timeline[self.current_task_index]

    @property
    def total_seconds(self) -> int:
        return sum(item.duration_seconds for item in self.timeline)

    @property
    def overall_progress(self) -> float:
        """Share of the whole timeline already behind us, clamped to [0, 1]."""
        total = self.total_seconds
        if total == 0:
            return 0.0
        if self.phase is TimerPhase.COMPLETED:
            return 1.0
        if self.phase is TimerPhase.IDLE:
            return 0.0
        done = sum(item.duration_seconds for item in self.timeline[: self.current_task_index])
        return min(1.0, max(0.0, (done + self.elapsed_in_task) / total))

    @property
    def current_task_progress(self) -> float:
        """Elapsed share of the current task; exceeds 1.0 once ``extend`` ran past it."""
        task = self.current_task
        if task is None:
            return 0.0
        return self.elapsed_in_task / task.duration_seconds

    def time_to_departure(self, now: datetime) -> int:
        """Whole seconds until the leave time, never negative."""
        if self.leave_time is None:
            return 0
        return max(0, int((self.leave_time - now).total_seconds()))

    def snapshot(self) -> RuntimeSnapshot:
        return RuntimeSnapshot(
            active_date=self.active_date,
            is_running=self.is_running,
            current_task_index=self.current_task_index,
            remaining_seconds=self.remaining_seconds,
        )

    # transitions

    def start(self) -> None:
        self._require("start", TimerPhase.IDLE)
        if not self.timeline:
            raise EmptyTimelineError()
        self.current_task_index = 0
        self.remaining_seconds = self.timeline[0].duration_seconds
        self.elapsed_in_task = 0
        self._set_phase(TimerPhase.RUNNING)
        logger.debug("Timer started with %d tasks", len(self.timeline))

    def tick(self) -> None:
        """Advance the countdown by one second; ignored unless running."""
        if self.phase is not TimerPhase.RUNNING or self.remaining_seconds <= 0:
            return
        self.remaining_seconds -= 1
        self.elapsed_in_task += 1
        if self.remaining_seconds == 0:
            self._advance()

    def pause(self) -> None:
        self._require("pause", TimerPhase.RUNNING)
        self._set_phase(TimerPhase.PAUSED)

    def resume(self) -> None:
        self._require("resume", TimerPhase.PAUSED)
        self._set_phase(TimerPhase.RUNNING)

    def skip(self) -> None:
        self._require("skip", TimerPhase.RUNNING, TimerPhase.PAUSED)
        self._advance()

    def extend(self, delta_seconds: int) -> None:
        self._require("extend", TimerPhase.RUNNING, TimerPhase.PAUSED)
        if delta_seconds <= 0:
            raise ValueError("delta_seconds must be positive")
        self.remaining_seconds += delta_seconds

    def reset(self) -> None:
        """Drop back to idle so a new run can start from the first task."""
        self.current_task_index = 0
        self.remaining_seconds = 0
        self.elapsed_in_task = 0
        self._completion_emitted = False
        self._set_phase(TimerPhase.IDLE)

    # internals

    def _advance(self) -> None:
        if self.is_last_task:
            self._complete()
            return
        self.current_task_index += 1
        self.remaining_seconds = self.timeline[self.current_task_index].duration_seconds
        self.elapsed_in_task = 0

    def _complete(self) -> None:
        self.remaining_seconds = 0
        self._set_phase(TimerPhase.COMPLETED)
        if self._completion_emitted:
            return
        self._completion_emitted = True
        for listener in list(self._completion_listeners):
            listener(self)

    def _set_phase(self, phase: TimerPhase) -> None:
        was_running = self.is_running
        self.phase = phase
        if was_running != self.is_running:
            for listener in list(self._running_listeners):
                listener(self.is_running)

    def _require(self, action: str, *allowed: TimerPhase) -> None:
        if self.phase not in allowed:
            raise IllegalTransitionError(action, self.phase)
