# src/todo_sync/remote/client.py

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from ..errors import StoreError
from ..tasks.task_models import Task, TaskPatch, utcnow
from .parsing import TodosFound, parse_read_response

logger = logging.getLogger(__name__)


def _make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(
        connect=connect_s,
        read=read_s,
        write=10.0,
        pool=connect_s,
    )


class WebhookTaskStore:
    """
    Remote task store behind a single webhook endpoint.

    Every operation is one POST of {"action": ..., "todo": ...}. Success is
    decided by HTTP status alone (2xx); mutation response bodies are ignored.
    Transport failures and non-2xx statuses raise StoreError. No retries and
    no caching: the caller owns local state.
    """

    def __init__(
            self,
            url: str,
            *,
            connect_timeout: float = 5.0,
            read_timeout: float = 15.0,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not url or not url.strip():
            raise ValueError("webhook url is required")
        self._url = url.strip()
        self._client = httpx.AsyncClient(
            timeout=_make_timeout(connect_timeout, read_timeout),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings, *, transport: httpx.AsyncBaseTransport | None = None) -> WebhookTaskStore:
        return cls(
            str(settings.webhook_url),
            connect_timeout=float(getattr(settings, "connect_timeout_seconds", 5.0)),
            read_timeout=float(getattr(settings, "read_timeout_seconds", 15.0)),
            transport=transport,
        )

    @property
    def url(self) -> str:
        return self._url

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> WebhookTaskStore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ---- low-level ----

    async def _post(self, action: str, todo: dict[str, Any]) -> httpx.Response:
        payload = {"action": action, "todo": todo}
        try:
            response = await self._client.post(self._url, json=payload)
        except httpx.HTTPError as e:
            logger.error("Webhook %s failed: %s (%s)", action, e.__class__.__name__, e)
            raise StoreError(action, f"Webhook {action} request failed: {e}") from e

        if not response.is_success:
            logger.error("Webhook %s failed with status=%s", action, response.status_code)
            raise StoreError(
                action,
                f"Webhook {action} request failed with status: {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug("Webhook %s ok status=%s", action, response.status_code)
        return response

    # ---- public API ----

    async def list(self) -> list[Task]:
        response = await self._post("read", {})
        try:
            data = response.json()
        except ValueError:
            logger.warning("Read response is not JSON; treating as empty.")
            return []

        result = parse_read_response(data)
        if not isinstance(result, TodosFound):
            logger.warning("Unrecognized read response shape (%s); treating as empty.", result.reason)
            return []

        if result.skipped:
            logger.warning("Read response: skipped %d malformed todo item(s).", result.skipped)
        logger.info("Read %d todo(s) from webhook.", len(result.tasks))
        return result.tasks

    async def create(self, title: str) -> Task:
        return await self.send_create(Task.new(title))

    async def send_create(self, task: Task) -> Task:
        await self._post("create", task.to_wire())
        logger.info("Created todo id=%s", task.id)
        return task

    async def update(
            self,
            task_id: str,
            *,
            title: str | None = None,
            completed: bool | None = None,
            updated_at: datetime | None = None,
    ) -> TaskPatch:
        patch = TaskPatch(
            id=task_id,
            updated_at=updated_at or utcnow(),
            title=title,
            completed=completed,
        )
        await self._post("update", patch.to_wire())
        logger.info("Updated todo id=%s", task_id)
        return patch

    async def delete(self, task_id: str) -> None:
        await self._post("delete", {"id": task_id})
        logger.info("Deleted todo id=%s", task_id)
