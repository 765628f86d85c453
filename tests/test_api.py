from __future__ import annotations

import json

import httpx
import pytest

from alignment_demo.main import create_app
from alignment_demo.session import DemoSession

from tests.helpers import FakeProvider


@pytest.fixture()
async def api(settings, demo_session: DemoSession):
    app = create_app(settings, session=demo_session)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


async def test_key_lifecycle(api: httpx.AsyncClient, key_store) -> None:
    assert (await api.get("/api/auth/key")).json() == {"authorized": False}

    response = await api.put("/api/auth/key", json={"api_key": "  secret  "})
    assert response.json() == {"authorized": True}
    assert await key_store.get("apiKey") == "secret"

    response = await api.post("/api/auth/key/validate")
    assert response.json() == {"valid": True}

    response = await api.delete("/api/auth/key")
    assert response.json() == {"authorized": False}


async def test_blank_key_is_rejected(api: httpx.AsyncClient) -> None:
    response = await api.put("/api/auth/key", json={"api_key": "   "})

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


async def test_errors_use_code_and_message(api: httpx.AsyncClient) -> None:
    response = await api.post("/api/alignments")

    assert response.status_code == 401
    body = response.json()
    assert body["code"] == "auth_error"
    assert body["message"] == "API key not set. Please authorize first."


async def test_assets_endpoints(api: httpx.AsyncClient, provider: FakeProvider) -> None:
    response = await api.post("/api/assets/demo")
    assert response.json()["count"] == 2
    assert {a["label"] for a in response.json()["assets"]} == {"Video"}

    manifest = json.dumps([{"src": "https://cdn.test/x.wav", "title": "X", "format": "audio/wav"}])
    response = await api.post(
        "/api/assets/file",
        files={"file": ("assets.json", manifest, "application/json")},
    )
    assert [a["title"] for a in response.json()["assets"]] == ["X"]

    response = await api.post("/api/assets/file", files={"file": ("bad.json", "{", "application/json")})
    assert response.status_code == 400
    assert response.json()["code"] == "asset_load_error"

    response = await api.post(
        "/api/assets/source", json={"source_url": "https://cdn.test/clip.mov?sig=1"}
    )
    assert response.json()["assets"][0]["format"] == "video/quicktime"

    response = await api.post("/api/assets/0/select")
    assert response.json()["selected_index"] == 0
    assert response.json()["assets"][0]["selected"] is True

    response = await api.post("/api/assets/5/select")
    assert response.status_code == 404


async def test_alignment_flow(api: httpx.AsyncClient, demo_session: DemoSession) -> None:
    await api.put("/api/auth/key", json={"api_key": "test-key"})
    await api.post("/api/assets/demo")
    await api.post("/api/assets/0/select")

    response = await api.post("/api/alignments")
    assert response.status_code == 202
    assert response.json()["poll"]["state"] == "polling"
    await demo_session.alignment_job

    response = await api.get("/api/alignments/poll")
    assert response.json()["state"] == "completed"

    response = await api.get("/api/alignments", params={"filter": "surfing"})
    alignments = response.json()["alignments"]
    assert alignments[0]["source"] == "Source: surfing.mp4"
    assert alignments[0]["selectable"] is True
    assert alignments[0]["visible"] is True

    response = await api.get("/api/alignments", params={"filter": "nothing"})
    assert response.json()["alignments"][0]["visible"] is False

    response = await api.post("/api/alignments/0/select")
    player = response.json()
    assert player["kind"] == "video"
    assert player["total_words"] == 2

    response = await api.post("/api/player/time", json={"current_time": 0.25})
    assert response.json() == {"current_time": 0.25, "active": [0], "scroll_to": 0}

    response = await api.post("/api/player/words/1/seek")
    assert response.json() == {"seeked": True, "current_time": 0.5}
    assert (await api.get("/api/player")).json()["active"] == [0, 1]

    response = await api.post("/api/player/words/9/seek")
    assert response.status_code == 404


async def test_unselectable_alignment(api: httpx.AsyncClient) -> None:
    response = await api.post("/api/alignments/3/select")

    assert response.status_code == 409
    assert response.json()["message"] == "Alignment not found"


async def test_console_endpoints(api: httpx.AsyncClient) -> None:
    response = await api.post("/api/console/listTasks")
    assert response.status_code == 401

    await api.put("/api/auth/key", json={"api_key": "test-key"})
    response = await api.post("/api/console/getTaskStatistics", json={"name": "usage"})
    assert response.json() == {"data": {"name": "usage", "count": 3}}

    response = await api.post("/api/console/getTask", json={"task_id": "missing"})
    assert response.status_code == 502
    assert response.json()["status"] == 404
    assert response.json()["message"] == "Task not found"

    response = await api.post("/api/console/dropTable")
    assert response.status_code == 404
    assert response.json()["code"] == "unknown_method_error"

    entries = (await api.get("/api/console/entries")).json()
    assert entries["status"] == "Error: Task not found"
    assert any(e["level"] == "error" for e in entries["entries"])

    response = await api.delete("/api/console/entries")
    assert response.json()["entries"] == []


async def test_alignment_list_paging(api: httpx.AsyncClient, provider: FakeProvider) -> None:
    await api.put("/api/auth/key", json={"api_key": "test-key"})

    response = await api.get(
        "/api/alignments", params={"refresh": "true", "skip": 20, "take": 10}
    )
    assert response.status_code == 200

    listing = [r for r in provider.requests if r.url.path == "/tasks"][-1]
    assert dict(listing.url.params) == {"skip": "20", "take": "10"}

    response = await api.get("/api/alignments", params={"refresh": "true", "skip": -1})
    assert response.status_code == 422


async def test_listing_with_malformed_task_keeps_valid_ones(
    api: httpx.AsyncClient, provider: FakeProvider
) -> None:
    await api.put("/api/auth/key", json={"api_key": "test-key"})
    provider.tasks["task-1"] = {"url": "https://cdn.test/media/song.mp3"}
    provider.tasks["broken"] = {"url": "https://cdn.test/media/other.mp3"}
    original = provider._task
    provider._task = lambda task_id: (
        {"id": task_id, "targets": "nonsense"} if task_id == "broken" else original(task_id)
    )

    response = await api.get("/api/alignments", params={"refresh": "true"})

    assert [a["id"] for a in response.json()["alignments"]] == ["task-1"]
