from __future__ import annotations

from typing import Any

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from famly.integrations.entities.base import EntityAPIError, EntityGateway, Record

logger = structlog.get_logger(__name__)


class HTTPEntityClient:
    """CRUD wrapper for one entity collection of the family backend."""

    def __init__(self, http: httpx.AsyncClient, entity_name: str) -> None:
        self._http = http
        self._name = entity_name

    @property
    def name(self) -> str:
        return self._name

    async def create(self, data: Record) -> Record:
        return await self._send("POST", self._path(), json=data)

    async def update(self, entity_id: str, data: Record) -> Record:
        return await self._send("PATCH", self._path(entity_id), json=data)

    async def delete(self, entity_id: str) -> None:
        await self._send("DELETE", self._path(entity_id))

    async def filter(self, **criteria: Any) -> list[Record]:
        params = {key: value for key, value in criteria.items() if value is not None}
        try:
            response = await self._get(self._path(), params)
        except httpx.TransportError as exc:
            raise EntityAPIError(None, f"{self._name} filter failed: {exc}") from exc
        records = self._unwrap(response)
        if not isinstance(records, list):
            raise EntityAPIError(response.status_code, f"{self._name} filter did not return a list")
        return records

    async def to_task(self, event_id: str) -> Record:
        return await self._send("POST", f"{self._path(event_id)}/to-task")

    async def to_event(self, task_id: str) -> Record:
        return await self._send("POST", f"{self._path(task_id)}/to-event")

    # Reads are idempotent, so transport hiccups are retried; writes never are.
    @retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
    )
    async def _get(self, path: str, params: dict[str, Any]) -> httpx.Response:
        return await self._http.get(path, params=params)

    async def _send(self, method: str, path: str, json: Record | None = None) -> Record:
        try:
            response = await self._http.request(method, path, json=json)
        except httpx.TransportError as exc:
            raise EntityAPIError(None, f"{self._name} {method} failed: {exc}") from exc
        payload = self._unwrap(response)
        return payload if isinstance(payload, dict) else {}

    def _unwrap(self, response: httpx.Response) -> Any:
        if response.is_error:
            logger.warning(
                "entities.request_failed",
                entity=self._name,
                method=response.request.method,
                status=response.status_code,
            )
            raise EntityAPIError(response.status_code, f"{self._name} API error: {response.status_code}")
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    def _path(self, entity_id: str | None = None) -> str:
        base = f"/api/entities/{self._name}"
        return base if entity_id is None else f"{base}/{entity_id}"


def create_entity_gateway(http: httpx.AsyncClient) -> EntityGateway:
    return EntityGateway(
        tasks=HTTPEntityClient(http, "Task"),
        events=HTTPEntityClient(http, "ScheduleEvent"),
        wishlist_items=HTTPEntityClient(http, "WishlistItem"),
        chat_messages=HTTPEntityClient(http, "ChatMessage"),
        conversations=HTTPEntityClient(http, "Conversation"),
    )


def create_entity_http_client(base_url: str, token: str, timeout_seconds: float) -> httpx.AsyncClient:
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(base_url=base_url.rstrip("/"), headers=headers, timeout=timeout_seconds)
