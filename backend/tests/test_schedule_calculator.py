from __future__ import annotations

from datetime import date, datetime

import pytest

from morning.services.schedule_calculator import (
    DayPlanData,
    InvalidScheduleError,
    PlanTaskData,
    calculate_schedule,
    parse_leave_time,
    parse_time_of_day,
    sort_tasks,
)


def _plan(tasks, *, leave_time="08:00", sleep_minutes=450, buffer_minutes=10, plan_date=date(2024, 1, 2)):
    return DayPlanData(
        plan_date=plan_date,
        leave_time=leave_time,
        sleep_minutes=sleep_minutes,
        buffer_minutes=buffer_minutes,
        tasks=tuple(tasks),
    )


def _task(task_id, minutes, order, name=None):
    return PlanTaskData(id=task_id, name=name or task_id, minutes=minutes, order=order)


def test_wake_and_sleep_are_back_calculated_from_leave_time() -> None:
    schedule = calculate_schedule(_plan([_task("wash", 3, 0), _task("breakfast", 12, 1)]))

    assert schedule.leave_time == datetime(2024, 1, 2, 8, 0)
    assert schedule.wake_up_time == datetime(2024, 1, 2, 7, 35)
    assert schedule.sleep_time == datetime(2024, 1, 2, 0, 5)
    assert schedule.total_task_minutes == 15
    assert schedule.is_overtime is False


def test_timeline_is_contiguous_from_wake_time() -> None:
    schedule = calculate_schedule(_plan([_task("wash", 3, 0), _task("breakfast", 12, 1)]))

    first, second = schedule.timeline
    assert (first.task_id, first.start_time, first.end_time) == (
        "wash",
        datetime(2024, 1, 2, 7, 35),
        datetime(2024, 1, 2, 7, 38),
    )
    assert (second.task_id, second.start_time, second.end_time) == (
        "breakfast",
        datetime(2024, 1, 2, 7, 38),
        datetime(2024, 1, 2, 7, 50),
    )
    assert first.duration_seconds == 180
    assert second.duration_seconds == 720


def test_timeline_follows_order_not_input_position() -> None:
    schedule = calculate_schedule(_plan([_task("b", 5, 1), _task("a", 5, 0), _task("c", 5, 2)]))

    assert [item.task_id for item in schedule.timeline] == ["a", "b", "c"]
    assert [item.order for item in schedule.timeline] == [0, 1, 2]


def test_reordering_keeps_wake_and_sleep_times() -> None:
    original = calculate_schedule(_plan([_task("a", 4, 0), _task("b", 9, 1), _task("c", 6, 2)]))
    reordered = calculate_schedule(_plan([_task("a", 4, 2), _task("b", 9, 0), _task("c", 6, 1)]))

    assert [item.task_id for item in reordered.timeline] == ["b", "c", "a"]
    assert reordered.total_task_minutes == original.total_task_minutes
    assert reordered.wake_up_time == original.wake_up_time
    assert reordered.sleep_time == original.sleep_time
    assert reordered.timeline[0].start_time == original.wake_up_time
    assert reordered.timeline[-1].end_time == original.timeline[-1].end_time


def test_equal_order_keeps_input_position() -> None:
    tasks = [_task("first", 1, 1), _task("zero", 1, 0), _task("second", 1, 1)]

    assert [task.id for task in sort_tasks(tasks)] == ["zero", "first", "second"]


def test_empty_plan_wakes_buffer_before_leaving() -> None:
    schedule = calculate_schedule(_plan([], buffer_minutes=10))

    assert schedule.timeline == ()
    assert schedule.total_task_minutes == 0
    assert schedule.wake_up_time == datetime(2024, 1, 2, 7, 50)
    assert schedule.sleep_time == datetime(2024, 1, 2, 0, 20)
    assert schedule.is_overtime is False


def test_early_leave_time_rolls_back_to_previous_day() -> None:
    schedule = calculate_schedule(
        _plan([_task("pack", 60, 0)], leave_time="00:30", sleep_minutes=450, buffer_minutes=0)
    )

    assert schedule.wake_up_time == datetime(2024, 1, 1, 23, 30)
    assert schedule.sleep_time == datetime(2024, 1, 1, 16, 0)
    assert schedule.timeline[0].end_time == datetime(2024, 1, 2, 0, 30)


def test_zero_buffer_ends_exactly_at_leave_time() -> None:
    schedule = calculate_schedule(_plan([_task("a", 20, 0), _task("b", 25, 1)], buffer_minutes=0))

    assert schedule.timeline[-1].end_time == schedule.leave_time
    assert schedule.is_overtime is False


def test_same_plan_always_yields_same_schedule() -> None:
    plan = _plan([_task("a", 7, 0), _task("b", 9, 1)])

    assert calculate_schedule(plan) == calculate_schedule(plan)


@pytest.mark.parametrize("value", ["8:00", "0800", "24:00", "12:60", "", "ab:cd"])
def test_malformed_leave_time_is_rejected(value) -> None:
    with pytest.raises(InvalidScheduleError):
        calculate_schedule(_plan([_task("a", 5, 0)], leave_time=value))


def test_parse_time_helpers() -> None:
    assert parse_time_of_day("23:59").hour == 23
    assert parse_leave_time(date(2024, 3, 1), "06:45") == datetime(2024, 3, 1, 6, 45)


def test_negative_durations_are_rejected() -> None:
    with pytest.raises(InvalidScheduleError):
        calculate_schedule(_plan([_task("a", 5, 0)], sleep_minutes=-1))
    with pytest.raises(InvalidScheduleError):
        calculate_schedule(_plan([_task("a", 5, 0)], buffer_minutes=-5))
    with pytest.raises(InvalidScheduleError):
        calculate_schedule(_plan([_task("a", 0, 0)]))
