from __future__ import annotations

import json

import httpx
import pytest

from famly.integrations.entities.base import EntityAPIError
from famly.integrations.entities.client import HTTPEntityClient, create_entity_gateway


def _client(handler: httpx.MockTransport) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=handler, base_url="http://entities.test")


@pytest.mark.asyncio
async def test_create_posts_to_collection() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"id": "W1", **json.loads(request.content)})

    async with _client(httpx.MockTransport(handler)) as http:
        record = await create_entity_gateway(http).wishlist_items.create({"name": "milk"})

    assert record == {"id": "W1", "name": "milk"}
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/entities/WishlistItem"


@pytest.mark.asyncio
async def test_filter_passes_criteria_and_maps_forbidden() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["family_member_id"] == "M1"
        return httpx.Response(403, json={"error": "locked"})

    async with _client(httpx.MockTransport(handler)) as http:
        client = HTTPEntityClient(http, "WishlistItem")
        with pytest.raises(EntityAPIError) as exc_info:
            await client.filter(family_member_id="M1", unused=None)

    assert exc_info.value.is_forbidden


@pytest.mark.asyncio
async def test_filter_retries_transport_errors() -> None:
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        if len(attempts) < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=[{"id": "E1"}])

    async with _client(httpx.MockTransport(handler)) as http:
        records = await HTTPEntityClient(http, "ScheduleEvent").filter(family_id="F1")

    assert records == [{"id": "E1"}]
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_writes_are_not_retried() -> None:
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(httpx.MockTransport(handler)) as http:
        with pytest.raises(EntityAPIError):
            await HTTPEntityClient(http, "Task").update("T9", {"status": "done"})

    assert len(attempts) == 1


@pytest.mark.asyncio
async def test_conversion_endpoints() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json={"id": "new"})

    async with _client(httpx.MockTransport(handler)) as http:
        gateway = create_entity_gateway(http)
        await gateway.events.to_task("E1")  # type: ignore[attr-defined]
        await gateway.tasks.to_event("T1")  # type: ignore[attr-defined]

    assert paths == ["/api/entities/ScheduleEvent/E1/to-task", "/api/entities/Task/T1/to-event"]
