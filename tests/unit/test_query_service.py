from __future__ import annotations

import pytest

from famly.domain.family import FamilyMember
from famly.integrations.entities.base import EntityAPIError, EntityGateway
from famly.services.assistant.assistant_response import GENERIC_FAILURE
from famly.services.assistant.query_service import QueryService
from tests.conftest import FIXED_NOW


def _queries(gateway: EntityGateway, limit: int = 5) -> QueryService:
    return QueryService(entities=gateway, upcoming_limit=limit, clock=lambda: FIXED_NOW)


@pytest.mark.asyncio
async def test_empty_wishlist(gateway: EntityGateway) -> None:
    text = await _queries(gateway).show_wishlist(FamilyMember(id="M2", name="Max"))
    assert text == "Max's wishlist is empty."


@pytest.mark.asyncio
async def test_wishlist_without_member(gateway: EntityGateway) -> None:
    assert await _queries(gateway).show_wishlist(None) == "I couldn't tell whose wishlist you mean."
    assert gateway.wishlist_items.filters == []  # type: ignore[attr-defined]


@pytest.mark.asyncio
async def test_wishlist_server_error_is_generic(gateway: EntityGateway) -> None:
    gateway.wishlist_items.filter_error = EntityAPIError(500, "boom")  # type: ignore[attr-defined]
    assert await _queries(gateway).show_wishlist(FamilyMember(id="M2", name="Max")) == GENERIC_FAILURE


@pytest.mark.asyncio
async def test_upcoming_events_respects_limit(gateway: EntityGateway) -> None:
    gateway.events.records = [  # type: ignore[attr-defined]
        {"title": f"Event {day}", "start_time": f"2026-10-{day}T10:00:00Z"} for day in range(20, 26)
    ]

    text = await _queries(gateway, limit=2).show_upcoming_events("F1")

    assert text.splitlines() == ["Coming up:", "- Tue 20 Oct 10:00: Event 20", "- Wed 21 Oct 10:00: Event 21"]
    assert gateway.events.filters == [{"family_id": "F1"}]  # type: ignore[attr-defined]


@pytest.mark.asyncio
async def test_nothing_upcoming_and_no_open_tasks(gateway: EntityGateway) -> None:
    gateway.tasks.records = [{"title": "Done already", "status": "done"}]  # type: ignore[attr-defined]
    queries = _queries(gateway)

    assert await queries.show_upcoming_events("F1") == "There is nothing on the calendar coming up."
    assert await queries.show_tasks("F1") == "There are no open tasks."
