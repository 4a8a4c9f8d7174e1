# tests/test_webhook_client.py

from __future__ import annotations

import json
from datetime import UTC, datetime

import httpx
import pytest

from todo_sync.errors import StoreError
from todo_sync.remote.client import WebhookTaskStore

URL = "https://hooks.example.test/webhook/todos"

TODO_ROW = {
    "id": "a1",
    "title": 42,
    "completed": "TRUE",
    "createdAt": "2024-05-01T10:00:00.000Z",
    "updatedAt": "2024-05-01T11:00:00.000Z",
}


class Recorder:
    """MockTransport handler that records JSON bodies and replies with a fixed response."""

    def __init__(self, response: httpx.Response | None = None, exc: Exception | None = None) -> None:
        self.response = response or httpx.Response(200, json={"success": True})
        self.exc = exc
        self.bodies: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert str(request.url) == URL
        self.bodies.append(json.loads(request.content))
        if self.exc is not None:
            raise self.exc
        return self.response


def _store(recorder: Recorder) -> WebhookTaskStore:
    return WebhookTaskStore(URL, transport=httpx.MockTransport(recorder))


@pytest.mark.asyncio
async def test_list_reads_object_with_todos() -> None:
    rec = Recorder(httpx.Response(200, json={"action": "read", "success": True, "todos": [TODO_ROW]}))
    async with _store(rec) as store:
        tasks = await store.list()

    assert rec.bodies == [{"action": "read", "todo": {}}]
    assert len(tasks) == 1
    task = tasks[0]
    assert task.id == "a1"
    assert task.title == "42"
    assert task.completed is True
    assert task.created_at == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_list_reads_array_wrapped_todos() -> None:
    rec = Recorder(httpx.Response(200, json=[{"todos": [TODO_ROW]}, {"ignored": True}]))
    async with _store(rec) as store:
        tasks = await store.list()
    assert [t.id for t in tasks] == ["a1"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        [],
        [{"rows": []}],
        {"success": True},
        {"todos": "nope"},
        "just a string",
    ],
)
async def test_list_unrecognized_shape_is_empty(body) -> None:
    rec = Recorder(httpx.Response(200, json=body))
    async with _store(rec) as store:
        assert await store.list() == []


@pytest.mark.asyncio
async def test_list_non_json_body_is_empty() -> None:
    rec = Recorder(httpx.Response(200, text="Workflow was started"))
    async with _store(rec) as store:
        assert await store.list() == []


@pytest.mark.asyncio
async def test_list_failure_status_raises() -> None:
    rec = Recorder(httpx.Response(503))
    async with _store(rec) as store:
        with pytest.raises(StoreError) as info:
            await store.list()
    assert info.value.action == "read"
    assert info.value.status_code == 503


@pytest.mark.asyncio
async def test_create_sends_full_task() -> None:
    rec = Recorder()
    async with _store(rec) as store:
        task = await store.create("  Buy milk ")

    assert task.title == "Buy milk"
    assert task.completed is False
    assert task.created_at == task.updated_at
    (body,) = rec.bodies
    assert body["action"] == "create"
    assert body["todo"] == task.to_wire()
    assert body["todo"]["createdAt"].endswith("Z")


@pytest.mark.asyncio
async def test_create_500_raises_without_retry() -> None:
    rec = Recorder(httpx.Response(500))
    async with _store(rec) as store:
        with pytest.raises(StoreError) as info:
            await store.create("Buy milk")
    assert info.value.status_code == 500
    assert len(rec.bodies) == 1


@pytest.mark.asyncio
async def test_update_sends_only_changed_fields() -> None:
    rec = Recorder()
    ts = datetime(2024, 5, 2, 8, 30, tzinfo=UTC)
    async with _store(rec) as store:
        patch = await store.update("a1", title="Buy oat milk", updated_at=ts)

    assert patch.title == "Buy oat milk"
    assert patch.completed is None
    assert rec.bodies == [
        {
            "action": "update",
            "todo": {"id": "a1", "updatedAt": "2024-05-02T08:30:00.000Z", "title": "Buy oat milk"},
        }
    ]


@pytest.mark.asyncio
async def test_update_completed_only() -> None:
    rec = Recorder()
    async with _store(rec) as store:
        await store.update("a1", completed=True)
    todo = rec.bodies[0]["todo"]
    assert todo["completed"] is True
    assert "title" not in todo
    assert "updatedAt" in todo


@pytest.mark.asyncio
async def test_delete_sends_only_id() -> None:
    rec = Recorder(httpx.Response(204))
    async with _store(rec) as store:
        await store.delete("a1")
    assert rec.bodies == [{"action": "delete", "todo": {"id": "a1"}}]


@pytest.mark.asyncio
async def test_transport_error_becomes_store_error() -> None:
    rec = Recorder(exc=httpx.ConnectError("connection refused"))
    async with _store(rec) as store:
        with pytest.raises(StoreError) as info:
            await store.delete("a1")
    assert info.value.action == "delete"
    assert info.value.status_code is None
    assert isinstance(info.value.__cause__, httpx.ConnectError)


def test_requires_url() -> None:
    with pytest.raises(ValueError):
        WebhookTaskStore("  ")
