"""Provider payload builders shared by the tests."""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

BASE_URL = "https://api.audioshake.test"


def json_response(status_code: int, payload: Any) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


def task_payload(
    task_id: str = "task-1",
    status: str = "processing",
    output: Optional[list[dict[str, Any]]] = None,
    url: str = "https://cdn.test/media/song.mp3?sig=abc",
    error: Optional[str] = None,
    model: str = "alignment",
) -> dict[str, Any]:
    target: dict[str, Any] = {"model": model, "status": status, "url": url}
    if output is not None:
        target["output"] = output
    if error is not None:
        target["error"] = error
    return {"id": task_id, "createdAt": "2024-05-01T10:00:00Z", "targets": [target]}


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


class FakeProvider:
    """In-memory stand-in for the tasks API and its artifact CDN.

    Tasks report ``processing`` for ``rounds`` status fetches, then
    ``final_status``. Completed tasks link to ``alignment``.
    """

    def __init__(
        self,
        rounds: int = 1,
        final_status: str = "completed",
        alignment: Any = None,
        manifest: Any = None,
    ) -> None:
        self.rounds = rounds
        self.final_status = final_status
        self.alignment = alignment if alignment is not None else {
            "lines": [
                {
                    "words": [
                        {"text": "hello", "start": 0.0, "end": 0.5},
                        {"text": "there", "start": 0.5, "end": 1.2},
                    ]
                }
            ]
        }
        self.manifest = manifest
        self.tasks: dict[str, dict[str, Any]] = {}
        self.fetches: dict[str, int] = {}
        self.requests: list[httpx.Request] = []
        self.fail_listing = False

    def _task(self, task_id: str) -> dict[str, Any]:
        fetches = self.fetches.get(task_id, 0)
        if fetches <= self.rounds:
            return task_payload(task_id, status="processing", url=self.tasks[task_id]["url"])
        output = None
        if self.final_status == "completed":
            output = [
                {
                    "format": "json",
                    "type": "application/json",
                    "link": f"https://cdn.test/alignments/{task_id}.json",
                }
            ]
        return task_payload(
            task_id,
            status=self.final_status,
            output=output,
            url=self.tasks[task_id]["url"],
            error="Alignment failed" if self.final_status == "failed" else None,
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.url.host == "cdn.test":
            if path.startswith("/alignments/"):
                return json_response(200, self.alignment)
            if path == "/assets.json" and self.manifest is not None:
                return json_response(200, self.manifest)
            return httpx.Response(404, text="Not Found")

        if request.method == "POST" and path == "/tasks":
            body = request_json(request)
            task_id = f"task-{len(self.tasks) + 1}"
            self.tasks[task_id] = {"url": body["url"]}
            return json_response(200, task_payload(task_id, url=body["url"]))
        if path == "/tasks/statistics":
            return json_response(200, {"name": request.url.params["name"], "count": 3})
        if path == "/tasks":
            if self.fail_listing:
                return json_response(500, {"error": "listing unavailable"})
            return json_response(200, [self._task(task_id) for task_id in self.tasks])
        if path.startswith("/tasks/"):
            task_id = path.rsplit("/", 1)[-1]
            if task_id not in self.tasks:
                return json_response(404, {"message": "Task not found"})
            self.fetches[task_id] = self.fetches.get(task_id, 0) + 1
            return json_response(200, self._task(task_id))
        return json_response(404, {"message": "Not found"})
