# src/duetrack/tasks/store_client.py

"""
Remote task store client.

The store is an opaque JSON CRUD endpoint:
- GET    {base}         -> list of task records
- POST   {base}         -> created record
- PUT    {base}/{id}    -> updated record
- DELETE {base}/{id}

No retries and no caching here; the lifecycle controller decides what to do
with a failure.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import ConfigurationError, NetworkError
from .task_models import Task, TaskFields

logger = logging.getLogger(__name__)


class TaskStoreClient:
    def __init__(
        self,
        base_url: str | None,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or "").strip().rstrip("/") or None
        self._timeout = httpx.Timeout(timeout_seconds, connect=min(5.0, timeout_seconds))
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def configured(self) -> bool:
        return self._base_url is not None

    def _base(self) -> str:
        if self._base_url is None:
            raise ConfigurationError("Task store URL is not set. Set DUETRACK_API_URL in your .env.")
        return self._base_url

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> TaskStoreClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, *, json: dict[str, Any] | None = None) -> httpx.Response:
        try:
            response = await self._http().request(method, url, json=json)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.info("Store %s %s failed: %s", method, url, e.__class__.__name__)
            raise NetworkError(str(e) or e.__class__.__name__) from e

        if response.is_error:
            logger.info("Store %s %s -> HTTP %s", method, url, response.status_code)
            reason = response.reason_phrase or "error"
            raise NetworkError(
                f"Request failed with status code {response.status_code} ({reason})",
                status_code=response.status_code,
            )

        logger.debug("Store %s %s -> HTTP %s", method, url, response.status_code)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError("Store returned a response that is not JSON") from e

    def _single(self, response: httpx.Response) -> Task:
        data = self._json(response)
        if not isinstance(data, dict):
            raise NetworkError("Store returned an unexpected response shape")
        try:
            return Task.from_record(data)
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkError(f"Store returned a malformed task record: {e}") from e

    async def list_tasks(self) -> list[Task]:
        response = await self._request("GET", self._base())
        data = self._json(response)
        if not isinstance(data, list):
            raise NetworkError("Store returned an unexpected response shape")

        tasks: list[Task] = []
        for record in data:
            if not isinstance(record, dict):
                logger.warning("Skipping non-object task record: %r", record)
                continue
            try:
                tasks.append(Task.from_record(record))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed task record id=%s", record.get("_id"), exc_info=True)
        return tasks

    async def create_task(self, fields: TaskFields) -> Task:
        response = await self._request("POST", self._base(), json=fields.to_payload())
        task = self._single(response)
        logger.info("Created task id=%s", task.id)
        return task

    async def update_task(self, task_id: str, fields: TaskFields) -> Task:
        response = await self._request("PUT", f"{self._base()}/{task_id}", json=fields.to_payload())
        task = self._single(response)
        logger.info("Updated task id=%s", task_id)
        return task

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"{self._base()}/{task_id}")
        logger.info("Deleted task id=%s", task_id)
