from __future__ import annotations

from morning.services.plan_repository import DEFAULT_TEMPLATES


def test_list_templates_seeds_defaults(client) -> None:
    response = client.get("/templates")

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body] == [row[0] for row in DEFAULT_TEMPLATES]
    assert body[0] == {"id": "wash-face", "name": "Wash face", "default_minutes": 3}


def test_create_update_delete_template(client) -> None:
    client.get("/templates")

    created = client.post("/templates", json={"name": "Feed the cat", "default_minutes": 4})
    assert created.status_code == 201
    template_id = created.json()["id"]
    assert template_id.startswith("tmpl-")

    updated = client.patch(f"/templates/{template_id}", json={"name": "Feed cats"})
    assert updated.status_code == 200
    assert updated.json() == {"id": template_id, "name": "Feed cats", "default_minutes": 4}

    listed = client.get("/templates").json()
    assert listed[-1]["id"] == template_id

    deleted = client.delete(f"/templates/{template_id}")
    assert deleted.status_code == 204
    assert template_id not in [item["id"] for item in client.get("/templates").json()]


def test_template_validation(client) -> None:
    assert client.post("/templates", json={"name": "", "default_minutes": 4}).status_code == 422
    assert client.post("/templates", json={"name": "Stretch", "default_minutes": 0}).status_code == 422
    assert client.post("/templates", json={"name": "   "}).status_code == 422


def test_unknown_template_returns_404(client) -> None:
    assert client.patch("/templates/missing", json={"default_minutes": 3}).status_code == 404
    assert client.delete("/templates/missing").status_code == 404
