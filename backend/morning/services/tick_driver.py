"""Periodic drivers built on APScheduler.

``TimerTickDriver`` feeds one tick per second into an ``ExecutionTimer``. It
holds at most one scheduler job, armed only while the timer is running and
removed on every transition out of running, so pausing stops the countdown
exactly. Each arm bumps a generation token and a callback carrying an older
token is dropped.

``WallClockSampler`` is an unrelated job that refreshes "now" for display.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from apscheduler.jobstores.base import JobLookupError

from morning.core.clock import Clock, system_clock
from morning.services.execution_timer import ExecutionTimer

logger = logging.getLogger(__name__)

TransitionListener = Callable[[str], None]

TICK_JOB_ID = "execution_timer_tick"
SAMPLER_JOB_ID = "wall_clock_sampler"


class TimerTickDriver:
    """Serializes every transition of one run behind a single lock."""

    def __init__(
        self,
        timer: ExecutionTimer,
        scheduler,
        *,
        interval_seconds: float = 1.0,
        job_id: str = TICK_JOB_ID,
        lock: Optional[threading.RLock] = None,
    ):
        self.timer = timer
        self._scheduler = scheduler
        self._interval_seconds = interval_seconds
        self._job_id = job_id
        self._lock = lock or threading.RLock()
        self._job = None
        self._generation = 0
        self._closed = False
        self._listeners: List[TransitionListener] = []
        timer.on_running_changed(self._running_changed)

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def armed(self) -> bool:
        return self._job is not None

    def on_transition(self, listener: TransitionListener) -> None:
        self._listeners.append(listener)

    def sync(self) -> None:
        """Arm or disarm to match the timer, e.g. after ``ExecutionTimer.restore``."""
        with self._lock:
            self._running_changed(self.timer.is_running)

    def start(self) -> None:
        self._apply("started", self.timer.start)

    def pause(self) -> None:
        self._apply("paused", self.timer.pause)

    def resume(self) -> None:
        self._apply("resumed", self.timer.resume)

    def skip(self) -> None:
        self._apply("skipped", self.timer.skip)

    def extend(self, delta_seconds: int) -> None:
        self._apply("extended", lambda: self.timer.extend(delta_seconds))

    def close(self) -> None:
        """Release the tick job; the driver ignores everything afterwards."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._disarm()
            self._emit("closed")

    def _apply(self, event: str, transition: Callable[[], None]) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError("Run has been torn down")
            index_before = self.timer.current_task_index
            transition()
            self._emit(event)
            self._emit_task_change(index_before)

    def _on_tick(self, generation: int) -> None:
        with self._lock:
            if self._closed or generation != self._generation:
                logger.debug("Dropping stale tick (generation=%s, current=%s)", generation, self._generation)
                return
            index_before = self.timer.current_task_index
            self.timer.tick()
            self._emit("tick")
            self._emit_task_change(index_before)

    def _emit_task_change(self, index_before: int) -> None:
        if self.timer.current_task_index != index_before:
            self._emit("task_changed")

    def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:  # pragma: no cover - listeners must not break the run
                logger.exception("Timer listener failed on %s", event)

    def _running_changed(self, running: bool) -> None:
        if running and not self._closed:
            self._arm()
        else:
            self._disarm()

    def _arm(self) -> None:
        self._disarm()
        self._generation += 1
        self._job = self._scheduler.add_job(
            self._on_tick,
            trigger="interval",
            seconds=self._interval_seconds,
            args=[self._generation],
            id=self._job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.debug("Tick job armed (generation=%s)", self._generation)

    def _disarm(self) -> None:
        if self._job is None:
            return
        job, self._job = self._job, None
        try:
            job.remove()
        except JobLookupError:
            logger.debug("Tick job already gone")


class WallClockSampler:
    """Keeps a once-per-second sample of the wall clock for display."""

    def __init__(
        self,
        scheduler,
        clock: Clock = system_clock,
        *,
        interval_seconds: float = 1.0,
        job_id: str = SAMPLER_JOB_ID,
    ):
        self._scheduler = scheduler
        self._clock = clock
        self._interval_seconds = interval_seconds
        self._job_id = job_id
        self._job = None
        self._latest = None

    @property
    def running(self) -> bool:
        return self._job is not None

    def start(self) -> None:
        if self._job is not None:
            return
        self.sample()
        self._job = self._scheduler.add_job(
            self.sample,
            trigger="interval",
            seconds=self._interval_seconds,
            id=self._job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

    def stop(self) -> None:
        if self._job is None:
            return
        job, self._job = self._job, None
        self._latest = None
        try:
            job.remove()
        except JobLookupError:
            logger.debug("Sampler job already gone")

    def sample(self) -> None:
        self._latest = self._clock.now()

    def now(self):
        if self._latest is None:
            return self._clock.now()
        return self._latest

    def today(self):
        return self.now().date()
