from __future__ import annotations


def _seed_plan(client, plan_date, leave_time="08:00"):
    response = client.put(
        f"/plans/{plan_date}",
        json={
            "leave_time": leave_time,
            "sleep_minutes": 450,
            "buffer_minutes": 10,
            "tasks": [
                {"id": f"{plan_date}-wash", "name": "Wash face", "minutes": 3},
                {"id": f"{plan_date}-eat", "name": "Breakfast", "minutes": 12},
            ],
        },
    )
    assert response.status_code == 200, response.text


def test_morning_without_plans(client) -> None:
    body = client.get("/morning").json()

    assert body["selected_date"] == "2024-01-02"
    assert body["has_plan"] is False
    assert body["schedule"] is None
    assert body["active_index"] is None
    assert body["available_dates"] == []
    assert body["now_label"] == "07:40"


def test_morning_prefers_today(client) -> None:
    _seed_plan(client, "2024-01-02")
    _seed_plan(client, "2024-01-03")

    body = client.get("/morning").json()

    assert body["selected_date"] == "2024-01-02"
    assert body["date_label"] == "Today"
    assert body["has_plan"] is True
    assert body["active_index"] == 1
    assert body["time_to_departure_seconds"] == 20 * 60
    assert [item["status"] for item in body["schedule"]["timeline"]] == ["past", "active"]


def test_morning_falls_back_to_tomorrow(client) -> None:
    _seed_plan(client, "2024-01-05")
    _seed_plan(client, "2024-01-03")

    body = client.get("/morning").json()

    assert body["selected_date"] == "2024-01-03"
    assert body["date_label"] == "Tomorrow"
    assert body["active_index"] is None
    assert [item["date"] for item in body["available_dates"]] == ["2024-01-03", "2024-01-05"]


def test_morning_date_override(client) -> None:
    _seed_plan(client, "2024-01-02")

    body = client.get("/morning", params={"date": "2024-01-09"}).json()

    assert body["selected_date"] == "2024-01-09"
    assert body["has_plan"] is False
