"""Passive (non-running) timeline highlighting and date selection."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Literal, Optional, Sequence

from morning.services.schedule_calculator import TimelineItem

ItemStatus = Literal["past", "active", "upcoming"]


def item_status(item: TimelineItem, now: datetime) -> ItemStatus:
    if now > item.end_time:
        return "past"
    if item.start_time <= now <= item.end_time:
        return "active"
    return "upcoming"


def active_index(timeline: Sequence[TimelineItem], now: datetime) -> Optional[int]:
    """Index of the first item whose window contains ``now``."""
    for index, item in enumerate(timeline):
        if item_status(item, now) == "active":
            return index
    return None


def pick_default_date(plan_dates: Iterable[date], today: date) -> date:
    """Today if planned, else tomorrow, else the earliest planned date, else today."""
    available = sorted(set(plan_dates))
    tomorrow = today + timedelta(days=1)
    if today in available:
        return today
    if tomorrow in available:
        return tomorrow
    if available:
        return available[0]
    return today
