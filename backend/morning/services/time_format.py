"""Formatting helpers for render-ready labels."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Tuple


def format_time(value: datetime | None) -> str:
    if value is None:
        return "--:--"
    return value.strftime("%H:%M")


def format_minutes_to_hm(minutes: int) -> str:
    hours, rest = divmod(int(minutes), 60)
    if hours == 0:
        return f"{rest} min"
    if rest == 0:
        return f"{hours} h"
    return f"{hours} h {rest} min"


def format_seconds_to_ms(seconds: int) -> str:
    """Render a countdown as mm:ss; minutes are not wrapped into hours."""
    minutes, rest = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{rest:02d}"


def date_label(value: date, today: date) -> str:
    if value == today:
        return "Today"
    if value == today + timedelta(days=1):
        return "Tomorrow"
    return f"{value.strftime('%b')} {value.day} ({value.strftime('%a')})"


def sleep_time_label(sleep_time: datetime, plan_date: date) -> str:
    """Bedtime label, flagged when it falls on the evening before the plan date."""
    if sleep_time.date() == plan_date - timedelta(days=1):
        return f"Prev day {format_time(sleep_time)}"
    return format_time(sleep_time)


def date_options(today: date, days: int = 7) -> List[Tuple[date, str]]:
    """Dates offered by the plan editor: today plus the next ``days`` days."""
    return [
        (today + timedelta(days=offset), date_label(today + timedelta(days=offset), today))
        for offset in range(days + 1)
    ]
