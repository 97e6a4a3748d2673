from __future__ import annotations

from datetime import date, datetime

from morning.services.schedule_calculator import DayPlanData, PlanTaskData, calculate_schedule
from morning.services.timeline_view import active_index, item_status, pick_default_date


def _timeline():
    plan = DayPlanData(
        plan_date=date(2024, 1, 2),
        leave_time="08:00",
        sleep_minutes=450,
        buffer_minutes=10,
        tasks=(
            PlanTaskData(id="wash", name="Wash face", minutes=3, order=0),
            PlanTaskData(id="breakfast", name="Breakfast", minutes=12, order=1),
        ),
    )
    return calculate_schedule(plan).timeline


def test_item_status_windows_are_inclusive() -> None:
    first = _timeline()[0]

    assert item_status(first, datetime(2024, 1, 2, 7, 30)) == "upcoming"
    assert item_status(first, datetime(2024, 1, 2, 7, 35)) == "active"
    assert item_status(first, datetime(2024, 1, 2, 7, 38)) == "active"
    assert item_status(first, datetime(2024, 1, 2, 7, 38, 1)) == "past"


def test_active_index_prefers_first_matching_item() -> None:
    timeline = _timeline()

    assert active_index(timeline, datetime(2024, 1, 2, 7, 38)) == 0
    assert active_index(timeline, datetime(2024, 1, 2, 7, 45)) == 1
    assert active_index(timeline, datetime(2024, 1, 2, 7, 55)) is None
    assert active_index((), datetime(2024, 1, 2, 7, 45)) is None


def test_pick_default_date() -> None:
    today = date(2024, 1, 2)

    assert pick_default_date([date(2024, 1, 3), today], today) == today
    assert pick_default_date([date(2024, 1, 5), date(2024, 1, 3)], today) == date(2024, 1, 3)
    assert pick_default_date([date(2024, 1, 7), date(2024, 1, 5)], today) == date(2024, 1, 5)
    assert pick_default_date([], today) == today
