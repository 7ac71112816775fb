"""HTTP API through FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from worldline.app import create_app
from worldline.config import settings


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_PATH", str(tmp_path / "api.db"))
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def project_id(client):
    return client.post("/api/projects/", json={"name": "Saga"}).json()["id"]


@pytest.fixture
def hero_id(client, project_id):
    response = client.post(f"/api/objects/{project_id}", json={
        "name": "Hero",
        "attributes": [
            {"id": "hp", "name": "HP", "type": "number", "value": {"type": "number", "value": 100}},
        ],
    })
    assert response.status_code == 201
    return response.json()["id"]


class TestService:

    def test_health_and_root(self, client):
        assert client.get("/health").json()["status"] == "healthy"
        assert client.get("/").json()["name"] == "Worldline API"

    def test_unknown_project(self, client):
        assert client.get("/api/projects/missing").status_code == 404
        assert client.post("/api/objects/missing", json={"name": "x"}).status_code == 404


class TestObjectsApi:

    def test_state_queries(self, client, project_id, hero_id):
        for t, hp in ((10, 80), (20, 50)):
            response = client.post(f"/api/events/{project_id}", json={
                "timestamp": t, "object_id": hero_id, "attribute_id": "hp",
                "new_value": {"type": "number", "value": hp},
            })
            assert response.status_code == 201

        state = client.get(f"/api/objects/{project_id}/{hero_id}/state", params={"t": 15}).json()
        assert state["attribute_values"]["hp"] == {"type": "number", "value": 80.0}

        states = client.get(f"/api/objects/{project_id}/states", params={"t": 25, "ids": [hero_id]}).json()
        assert states[hero_id]["attribute_values"]["hp"]["value"] == 50.0

        history = client.get(
            f"/api/objects/{project_id}/{hero_id}/history",
            params={"start": 0, "end": 20, "step": 10},
        ).json()
        assert [s["timestamp"] for s in history] == [0, 10, 20]

        exists = client.get(f"/api/objects/{project_id}/{hero_id}/exists", params={"t": 5}).json()
        assert exists["exists"] is True

        assert client.get(f"/api/objects/{project_id}/ghost/state", params={"t": 1}).status_code == 404

    def test_state_reflects_edits_after_caching(self, client, project_id, hero_id):
        event = client.post(f"/api/events/{project_id}", json={
            "timestamp": 10, "object_id": hero_id, "attribute_id": "hp",
            "new_value": {"type": "number", "value": 80},
        }).json()
        url = f"/api/objects/{project_id}/{hero_id}/state"
        assert client.get(url, params={"t": 15}).json()["attribute_values"]["hp"]["value"] == 80.0
        assert client.get("/health").json()["resolver_cache"]["state_cache_size"] == 1

        client.put(f"/api/events/{project_id}/{event['id']}", json={"new_value": {"type": "number", "value": 60}})
        assert client.get(url, params={"t": 15}).json()["attribute_values"]["hp"]["value"] == 60.0

    def test_change_count(self, client, project_id, hero_id):
        for t in (0, 10, 20):
            client.post(f"/api/events/{project_id}", json={
                "timestamp": t, "object_id": hero_id, "attribute_id": "hp",
                "new_value": {"type": "number", "value": 100 - t},
            })
        url = f"/api/objects/{project_id}/{hero_id}/changes/count"
        assert client.get(url, params={"attribute_id": "hp"}).json()["count"] == 3
        assert client.get(url, params={"attribute_id": "hp", "start": 5, "end": 20}).json()["count"] == 2
        missing = client.get(f"/api/objects/{project_id}/ghost/changes/count", params={"attribute_id": "hp"})
        assert missing.status_code == 404

    def test_invalid_value_rejected(self, client, project_id, hero_id):
        response = client.post(f"/api/events/{project_id}", json={
            "timestamp": 1, "object_id": hero_id, "attribute_id": "hp",
            "new_value": {"type": "text", "value": "lots"},
        })
        assert response.status_code == 400

    def test_conflicts(self, client, project_id, hero_id):
        report = client.get(f"/api/events/{project_id}/conflicts").json()
        assert report["statistics"]["total"] == 0


class TestTimelineApi:

    def test_unknown_project_opens_no_session(self, client):
        base = "/api/timeline/nope"
        assert client.get(f"{base}/viewport").status_code == 404
        assert client.put(f"{base}/viewport/window", json={"start": 0, "end": 10}).status_code == 404
        assert client.post(f"{base}/drag/begin", json={"event_id": "e", "pixel": 1}).status_code == 404
        assert client.post(f"{base}/drag/cancel").status_code == 404
        assert client.get("/health").json()["open_sessions"] == 0

    def test_reversed_interval_rejected(self, client, project_id):
        response = client.post(f"/api/timeline/{project_id}/events", json={
            "title": "Backwards", "start_time": 20, "end_time": 10,
        })
        assert response.status_code == 422

    def test_layout(self, client, project_id):
        for start, end in ((0, 10), (5, 15), (10, 20)):
            client.post(f"/api/timeline/{project_id}/events",
                        json={"title": f"E{start}", "start_time": start, "end_time": end})
        layout = client.get(f"/api/timeline/{project_id}/layout").json()
        assert layout["track_count"] == 2
        assert sorted(layout["assignments"].values()) == [0, 0, 1]

    def test_viewport(self, client, project_id):
        base = f"/api/timeline/{project_id}/viewport"
        snapshot = client.put(f"{base}/window", json={"start": 0, "end": 100}).json()
        assert (snapshot["start_time"], snapshot["end_time"]) == (0, 100)

        snapshot = client.post(f"{base}/zoom", json={"pixel": 500, "factor": 0.5}).json()
        assert (snapshot["start_time"], snapshot["end_time"]) == (25, 75)

        snapshot = client.post(f"{base}/reset").json()
        assert snapshot["span"] == settings.VIEWPORT_DEFAULT_END - settings.VIEWPORT_DEFAULT_START

        assert client.post(f"{base}/zoom", json={"pixel": 500, "factor": 0}).status_code == 422
        assert isinstance(client.get(f"{base}/ticks").json(), list)

    def test_fit(self, client, project_id):
        client.post(f"/api/timeline/{project_id}/events", json={"title": "A", "start_time": 100, "end_time": 200})
        snapshot = client.post(f"/api/timeline/{project_id}/viewport/fit", params={"padding": 0}).json()
        assert (snapshot["start_time"], snapshot["end_time"]) == (100, 200)

    def test_drag_round_trip(self, client, project_id):
        base = f"/api/timeline/{project_id}"
        event = client.post(f"{base}/events", json={"title": "Siege", "start_time": 10, "end_time": 30}).json()
        client.put(f"{base}/viewport/window", json={"start": 0, "end": 1000})
        client.post(f"{base}/viewport/resize", json={"area_x": 0, "area_width": 1000})

        begin = client.post(f"{base}/drag/begin", json={"event_id": event["id"], "pixel": 10})
        assert begin.status_code == 200
        assert begin.json()["phase"] == "dragging"

        preview = client.post(f"{base}/drag/update", json={"pixel": 110}).json()
        assert (preview["start_time"], preview["end_time"]) == (110, 130)

        result = client.post(f"{base}/drag/end").json()
        assert result == {"event_id": event["id"], "new_start": 110, "new_end": 130}

        stored = client.get(f"{base}/events/{event['id']}").json()
        assert (stored["start_time"], stored["end_time"]) == (110, 130)

    def test_drag_errors(self, client, project_id):
        base = f"/api/timeline/{project_id}"
        assert client.post(f"{base}/drag/begin", json={"event_id": "nope", "pixel": 1}).status_code == 404
        assert client.post(f"{base}/drag/update", json={"pixel": 1}).status_code == 409
        assert client.post(f"{base}/drag/end").status_code == 409
        assert client.post(f"{base}/drag/cancel").json()["phase"] == "idle"
