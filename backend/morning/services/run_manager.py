"""Owner of the single active timer run in this process."""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterator, Optional, Tuple

from sqlalchemy.orm import Session

from morning.core.clock import Clock, system_clock
from morning.core.config import settings
from morning.observability.metrics import log_metric
from morning.services.execution_timer import (
    EmptyTimelineError,
    ExecutionTimer,
    IllegalTransitionError,
    RuntimeSnapshot,
    TimerError,
    TimerPhase,
)
from morning.services.notifications.hooks import notify_run_completed
from morning.services.plan_repository import PlanNotFoundError, PlanRepository
from morning.services.schedule_calculator import (
    InvalidScheduleError,
    TimelineItem,
    calculate_schedule,
)
from morning.services.tick_driver import TimerTickDriver
from morning.services.time_format import format_seconds_to_ms

logger = logging.getLogger(__name__)

WARNING_THRESHOLD_SECONDS = 60


@dataclass(frozen=True)
class RunView:
    """Render model for the timer screen."""

    phase: TimerPhase
    active_date: Optional[date]
    is_running: bool
    current_task_index: int
    remaining_seconds: int
    countdown: str
    task_count: int
    current_task: Optional[TimelineItem]
    current_task_progress: float
    overall_progress: float
    leave_time: Optional[datetime]
    time_to_departure_seconds: int
    keep_awake: bool
    low_time_warning: bool
    timeline: Tuple[TimelineItem, ...]
    now: datetime


class RunManager:
    def __init__(
        self,
        scheduler,
        session_factory: Callable[[], Session],
        *,
        clock: Clock = system_clock,
        tick_interval_seconds: Optional[float] = None,
        persist_every_ticks: Optional[int] = None,
    ):
        self._scheduler = scheduler
        self._session_factory = session_factory
        self._clock = clock
        self._tick_interval_seconds = tick_interval_seconds or settings.tick_interval_seconds
        self._persist_every_ticks = max(1, persist_every_ticks or settings.runtime_persist_every_ticks)
        self._lock = threading.RLock()
        self._driver: Optional[TimerTickDriver] = None
        self._ticks_since_persist = 0
        self._keep_awake = False

    @property
    def timer(self) -> Optional[ExecutionTimer]:
        return self._driver.timer if self._driver else None

    @property
    def driver(self) -> Optional[TimerTickDriver]:
        return self._driver

    @property
    def keep_awake(self) -> bool:
        return self._keep_awake

    def start_run(self, plan_date: date) -> RunView:
        """Begin a fresh run for ``plan_date``, replacing any run in progress."""
        with self._lock:
            with self._repository() as repo:
                plan = repo.get_plan_data(plan_date)
            if plan is None:
                raise PlanNotFoundError(plan_date)
            schedule = calculate_schedule(plan)
            if not schedule.timeline:
                raise EmptyTimelineError()

            self._teardown()
            timer = ExecutionTimer(schedule.timeline, active_date=plan_date, leave_time=schedule.leave_time)
            driver = self._attach(timer)
            driver.start()
            logger.info("Run started for %s (%d tasks)", plan_date, len(schedule.timeline))
            log_metric("run.start", 1, metadata={"plan_date": plan_date.isoformat(), "tasks": len(schedule.timeline)})
            return self.view()

    def restore_run(self) -> Optional[RunView]:
        """Pick up the run mirrored in storage, if its plan still exists."""
        with self._lock:
            with self._repository() as repo:
                snapshot = repo.get_runtime()
                plan = repo.get_plan_data(snapshot.active_date) if snapshot and snapshot.active_date else None
            if snapshot is None:
                return None
            if plan is None:
                logger.info("Discarding runtime state for %s: plan no longer exists", snapshot.active_date)
                self._persist(None)
                return None
            try:
                schedule = calculate_schedule(plan)
                timer = ExecutionTimer.restore(schedule.timeline, snapshot, leave_time=schedule.leave_time)
            except (InvalidScheduleError, TimerError, ValueError) as exc:
                logger.warning("Discarding unusable runtime state for %s: %s", snapshot.active_date, exc)
                self._persist(None)
                return None

            self._teardown()
            driver = self._attach(timer)
            driver.sync()
            logger.info(
                "Run restored for %s at task %d (%ss left, running=%s)",
                snapshot.active_date,
                snapshot.current_task_index,
                snapshot.remaining_seconds,
                snapshot.is_running,
            )
            return self.view()

    def pause(self) -> RunView:
        return self._control("pause")

    def resume(self) -> RunView:
        return self._control("resume")

    def skip(self) -> RunView:
        return self._control("skip")

    def extend(self, seconds: int) -> RunView:
        return self._control("extend", seconds)

    def stop_run(self) -> None:
        """Tear the run down and forget it (the user left the timer screen)."""
        with self._lock:
            had_run = self._driver is not None
            self._teardown()
            self._persist(None)
            if had_run:
                logger.info("Run stopped")
                log_metric("run.stop", 1)

    def shutdown(self) -> None:
        """Release the tick job but keep the runtime mirror for the next start."""
        with self._lock:
            self._teardown()

    def view(self) -> RunView:
        with self._lock:
            now = self._clock.now()
            timer = self.timer
            if timer is None:
                return RunView(
                    phase=TimerPhase.IDLE,
                    active_date=None,
                    is_running=False,
                    current_task_index=0,
                    remaining_seconds=0,
                    countdown=format_seconds_to_ms(0),
                    task_count=0,
                    current_task=None,
                    current_task_progress=0.0,
                    overall_progress=0.0,
                    leave_time=None,
                    time_to_departure_seconds=0,
                    keep_awake=False,
                    low_time_warning=False,
                    timeline=(),
                    now=now,
                )
            return RunView(
                phase=timer.phase,
                active_date=timer.active_date,
                is_running=timer.is_running,
                current_task_index=timer.current_task_index,
                remaining_seconds=timer.remaining_seconds,
                countdown=format_seconds_to_ms(timer.remaining_seconds),
                task_count=len(timer.timeline),
                current_task=timer.current_task,
                current_task_progress=timer.current_task_progress,
                overall_progress=timer.overall_progress,
                leave_time=timer.leave_time,
                time_to_departure_seconds=timer.time_to_departure(now),
                keep_awake=self._keep_awake,
                low_time_warning=timer.is_running and timer.remaining_seconds <= WARNING_THRESHOLD_SECONDS,
                timeline=timer.timeline,
                now=now,
            )

    def _control(self, action: str, *args) -> RunView:
        with self._lock:
            if self._driver is None:
                raise IllegalTransitionError(action, TimerPhase.IDLE)
            getattr(self._driver, action)(*args)
            timer = self._driver.timer
            log_metric(
                f"run.{action}",
                1,
                metadata={"plan_date": timer.active_date.isoformat() if timer.active_date else None},
            )
            return self.view()

    def _attach(self, timer: ExecutionTimer) -> TimerTickDriver:
        driver = TimerTickDriver(
            timer,
            self._scheduler,
            interval_seconds=self._tick_interval_seconds,
            lock=self._lock,
        )
        timer.on_running_changed(self._running_changed)
        timer.on_complete(self._completed)
        driver.on_transition(self._transitioned)
        self._driver = driver
        self._ticks_since_persist = 0
        self._keep_awake = timer.is_running
        return driver

    def _teardown(self) -> None:
        if self._driver is not None:
            self._driver.close()
        self._driver = None
        self._keep_awake = False

    def _running_changed(self, running: bool) -> None:
        self._keep_awake = running
        logger.debug("Keep-awake %s", "requested" if running else "released")

    def _completed(self, timer: ExecutionTimer) -> None:
        plan_date = timer.active_date
        logger.info("Run completed for %s", plan_date)
        self._persist(None)
        log_metric(
            "run.completed",
            1,
            metadata={"plan_date": plan_date.isoformat() if plan_date else None, "tasks": len(timer.timeline)},
        )
        notify_run_completed(plan_date, len(timer.timeline))

    def _transitioned(self, event: str) -> None:
        timer = self.timer
        if timer is None or event == "closed" or timer.phase is TimerPhase.COMPLETED:
            return
        if event == "tick":
            self._ticks_since_persist += 1
            if self._ticks_since_persist < self._persist_every_ticks:
                return
        self._ticks_since_persist = 0
        self._persist(timer.snapshot())

    def _persist(self, snapshot: Optional[RuntimeSnapshot]) -> None:
        # Best-effort mirror: the in-memory timer stays authoritative.
        try:
            with self._repository() as repo:
                repo.save_runtime(snapshot)
        except Exception:
            logger.exception("Unable to mirror runtime state")

    @contextmanager
    def _repository(self) -> Iterator[PlanRepository]:
        db = self._session_factory()
        try:
            yield PlanRepository(db)
        finally:
            db.close()
