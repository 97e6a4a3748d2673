"""Wall-clock access.

Only display code and passive timeline highlighting ask for "now"; schedule
arithmetic never does. Everything that needs the current time receives a
``Clock`` so tests can pin it.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        ...


class SystemClock:
    """Local, naive wall-clock time."""

    def now(self) -> datetime:
        return datetime.now().replace(microsecond=0)

    def today(self) -> date:
        return date.today()


class FixedClock:
    """Clock pinned to a given instant; ``advance`` moves it forward."""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def advance(self, **delta) -> None:
        self.current = self.current + timedelta(**delta)


system_clock = SystemClock()
