from __future__ import annotations

PLAN_URL = "/plans/2024-01-02"


def _plan_payload(**overrides):
    payload = {
        "leave_time": "08:00",
        "sleep_minutes": 450,
        "buffer_minutes": 10,
        "tasks": [
            {"id": "wash", "template_id": "wash-face", "name": "Wash face", "minutes": 3},
            {"id": "eat", "template_id": "breakfast", "name": "Breakfast", "minutes": 12},
        ],
    }
    payload.update(overrides)
    return payload


def _save(client, url=PLAN_URL, **overrides):
    response = client.put(url, json=_plan_payload(**overrides))
    assert response.status_code == 200, response.text
    return response.json()


def test_save_plan_returns_calculated_schedule(client) -> None:
    body = _save(client)

    assert body["date_label"] == "Today"
    assert [task["id"] for task in body["tasks"]] == ["wash", "eat"]
    assert [task["order"] for task in body["tasks"]] == [0, 1]
    schedule = body["schedule"]
    assert schedule["wake_up_label"] == "07:35"
    assert schedule["sleep_label"] == "00:05"
    assert schedule["leave_label"] == "08:00"
    assert schedule["total_task_label"] == "15 min"
    assert schedule["is_overtime"] is False
    assert [(item["start_label"], item["end_label"]) for item in schedule["timeline"]] == [
        ("07:35", "07:38"),
        ("07:38", "07:50"),
    ]
    assert body["request_id"]


def test_get_and_list_plans(client) -> None:
    _save(client)
    _save(client, "/plans/2024-01-03")

    assert client.get(PLAN_URL).json()["leave_time"] == "08:00"
    listed = client.get("/plans").json()
    assert [(item["date"], item["date_label"]) for item in listed] == [
        ("2024-01-02", "Today"),
        ("2024-01-03", "Tomorrow"),
    ]
    assert listed[0]["task_count"] == 2
    assert listed[0]["total_task_minutes"] == 15


def test_missing_plan_returns_404(client) -> None:
    assert client.get("/plans/2024-02-01").status_code == 404
    assert client.get("/plans/2024-02-01/schedule").status_code == 404
    assert client.delete("/plans/2024-02-01").status_code == 404


def test_save_requires_tasks_and_valid_values(client) -> None:
    assert client.put(PLAN_URL, json=_plan_payload(tasks=[])).status_code == 422
    assert client.put(PLAN_URL, json=_plan_payload(leave_time="8:00")).status_code == 422
    assert client.put(PLAN_URL, json=_plan_payload(buffer_minutes=-1)).status_code == 422
    bad_task = [{"name": "Wash", "minutes": 0}]
    assert client.put(PLAN_URL, json=_plan_payload(tasks=bad_task)).status_code == 422
    blank_name = [{"name": "   ", "minutes": 3}]
    assert client.put(PLAN_URL, json=_plan_payload(tasks=blank_name)).status_code == 422


def test_save_assigns_ids_to_new_tasks(client) -> None:
    body = _save(client, tasks=[{"name": "Stretch", "minutes": 5}, {"name": "Stretch", "minutes": 5}])

    ids = [task["id"] for task in body["tasks"]]
    assert all(task_id.startswith("task-") for task_id in ids)
    assert len(set(ids)) == 2


def test_delete_plan(client) -> None:
    _save(client)

    assert client.delete(PLAN_URL).status_code == 204
    assert client.get(PLAN_URL).status_code == 404


def test_schedule_marks_item_status_from_clock(client) -> None:
    _save(client)

    schedule = client.get(f"{PLAN_URL}/schedule").json()

    assert [item["status"] for item in schedule["timeline"]] == ["past", "active"]


def test_editor_defaults_for_new_plan(client) -> None:
    body = client.get("/plans/2024-01-03/editor").json()

    assert body["exists"] is False
    assert body["date_label"] == "Tomorrow"
    assert body["leave_time"] == "08:00"
    assert body["sleep_minutes"] == 450
    assert body["buffer_minutes"] == 10
    assert body["tasks"] == []
    assert body["schedule"] is None
    assert all(template["selected"] is False for template in body["templates"])
    assert body["buffer_options"] == [0, 5, 10, 15, 20]
    assert {"label": "7 h 30 min", "minutes": 450} in body["sleep_presets"]
    assert body["date_options"][0] == {"date": "2024-01-02", "label": "Today"}


def test_editor_marks_selected_templates(client) -> None:
    _save(client)

    body = client.get(f"{PLAN_URL}/editor").json()

    selected = {template["id"] for template in body["templates"] if template["selected"]}
    assert body["exists"] is True
    assert selected == {"wash-face", "breakfast"}
    assert body["schedule"]["wake_up_label"] == "07:35"


def test_copy_previous_day(client) -> None:
    _save(client, leave_time="07:30")

    response = client.post("/plans/2024-01-03/copy-previous")

    assert response.status_code == 200
    body = response.json()
    assert body["date"] == "2024-01-03"
    assert body["leave_time"] == "07:30"
    assert [task["name"] for task in body["tasks"]] == ["Wash face", "Breakfast"]
    assert not {task["id"] for task in body["tasks"]} & {"wash", "eat"}
    assert client.get("/plans/2024-01-03").status_code == 404


def test_copy_previous_without_plan_returns_404(client) -> None:
    assert client.post("/plans/2024-01-03/copy-previous").status_code == 404


def test_task_editing_endpoints(client) -> None:
    _save(client)
    client.get("/templates")

    added = client.post(f"{PLAN_URL}/tasks", json={"template_id": "prepare-leave"})
    assert added.status_code == 200
    tasks = added.json()["tasks"]
    assert [task["name"] for task in tasks] == ["Wash face", "Breakfast", "Pack bag and keys"]
    new_id = tasks[-1]["id"]

    moved = client.post(f"{PLAN_URL}/tasks/{new_id}/move", json={"to_index": 0})
    assert [task["id"] for task in moved.json()["tasks"]] == [new_id, "wash", "eat"]

    patched = client.patch(f"{PLAN_URL}/tasks/eat", json={"delta_minutes": -100, "name": "Toast"})
    eat = next(task for task in patched.json()["tasks"] if task["id"] == "eat")
    assert (eat["name"], eat["minutes"]) == ("Toast", 1)

    removed = client.delete(f"{PLAN_URL}/tasks/wash")
    assert [task["id"] for task in removed.json()["tasks"]] == [new_id, "eat"]
    assert [task["order"] for task in removed.json()["tasks"]] == [0, 1]
    assert removed.json()["schedule"]["total_task_minutes"] == 6


def test_toggle_template(client) -> None:
    _save(client)
    client.get("/templates")

    toggled_on = client.post(f"{PLAN_URL}/templates/cleanup/toggle")
    assert "Clean up" in [task["name"] for task in toggled_on.json()["tasks"]]

    toggled_off = client.post(f"{PLAN_URL}/templates/cleanup/toggle")
    assert "Clean up" not in [task["name"] for task in toggled_off.json()["tasks"]]


def test_task_editing_errors(client) -> None:
    _save(client)

    assert client.post(f"{PLAN_URL}/tasks", json={"template_id": "missing"}).status_code == 404
    assert client.patch(f"{PLAN_URL}/tasks/missing", json={"minutes": 3}).status_code == 404
    assert client.post(f"{PLAN_URL}/tasks/missing/move", json={"to_index": 0}).status_code == 404
    assert client.delete(f"{PLAN_URL}/tasks/missing").status_code == 404
    assert client.patch("/plans/2024-03-01/tasks/wash", json={"minutes": 3}).status_code == 404


def test_preview_schedule_without_saving(client) -> None:
    payload = _plan_payload(leave_time="00:30", sleep_minutes=480, buffer_minutes=0)
    payload["tasks"] = [{"name": "Pack", "minutes": 60}]
    payload["date"] = "2024-01-02"

    response = client.post("/schedule/preview", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["wake_up_time"] == "2024-01-01T23:30:00"
    assert body["sleep_label"] == "Prev day 15:30"
    assert client.get("/plans").json() == []


def test_same_tasks_can_be_saved_on_several_dates(client) -> None:
    first = _save(client)
    second = _save(client, "/plans/2024-01-03")

    assert [task["id"] for task in first["tasks"]] == ["wash", "eat"]
    assert [task["id"] for task in second["tasks"]] == ["wash", "eat"]

    client.delete(f"{PLAN_URL}/tasks/wash")
    assert [task["id"] for task in client.get("/plans/2024-01-03").json()["tasks"]] == ["wash", "eat"]
