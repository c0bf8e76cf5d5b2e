"""Pytest fixtures for recce tests."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path

import httpx
import pytest

from recce import CollectingReporter, Handler, ResponseRecorder


@dataclass
class Task:
    id: int
    title: str


class TaskStore:
    """In-memory task list for the example API."""

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self.tasks = list(tasks) if tasks is not None else [Task(id=1, title="First task")]

    def create(self, title: str) -> Task:
        task = Task(id=len(self.tasks) + 1, title=title)
        self.tasks.append(task)
        return task

    def get(self, task_id: int) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None


def make_task_handler(store: TaskStore) -> Handler:
    """Route GET /tasks, GET /tasks/{id} and POST /tasks against ``store``."""

    def reply(sink: ResponseRecorder, status: int, payload: object) -> None:
        sink.write_header(status)
        sink.write(json.dumps(payload) + "\n")

    def handler(sink: ResponseRecorder, request: httpx.Request) -> None:
        sink.headers["Content-Type"] = "application/json"
        path = request.url.path

        if request.method == "GET" and path == "/tasks":
            reply(sink, 200, [asdict(task) for task in store.tasks])
        elif request.method == "GET" and path.startswith("/tasks/"):
            try:
                task_id = int(path.removeprefix("/tasks/"))
            except ValueError:
                reply(sink, 400, {"error": "Invalid task ID"})
                return
            task = store.get(task_id)
            if task is None:
                reply(sink, 404, {"error": "Task not found"})
            else:
                reply(sink, 200, asdict(task))
        elif request.method == "POST" and path == "/tasks":
            try:
                data = json.loads(request.content or b"{}")
            except ValueError:
                data = {}
            task = store.create(str(data.get("title", "")))
            reply(sink, 200, asdict(task))
        else:
            reply(sink, 404, {"error": "Not found"})

    return handler


@pytest.fixture(autouse=True)
def clean_recce_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep RECCE_* variables from the outer environment out of the tests."""
    for key in list(os.environ):
        if key.startswith("RECCE_"):
            monkeypatch.delenv(key)


@pytest.fixture
def task_store() -> TaskStore:
    return TaskStore()


@pytest.fixture
def task_handler(task_store: TaskStore) -> Handler:
    return make_task_handler(task_store)


@pytest.fixture
def reporter() -> CollectingReporter:
    return CollectingReporter()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "recordings"


@pytest.fixture
def fixed_time() -> datetime:
    return datetime(2006, 1, 2, 15, 4, 5)
