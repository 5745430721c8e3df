from __future__ import annotations

import pytest

from famly.domain.actions import (
    AddMultipleToWishlistAction,
    CreateTaskAction,
    MultipleWishlistItemsPayload,
    TaskPayload,
    WishlistItemPayload,
)
from famly.domain.errors import NothingPendingError, PendingActionConflictError, PendingActionEditError
from famly.services.stores.pending_action_store import PendingActionStore
from tests.conftest import FakeRedis


def _wishlist_batch() -> AddMultipleToWishlistAction:
    return AddMultipleToWishlistAction(
        action_payload=MultipleWishlistItemsPayload(
            items=[WishlistItemPayload(name="lego"), WishlistItemPayload(name="book")]
        )
    )


@pytest.mark.asyncio
async def test_put_then_get_round_trips_and_clear_removes(fake_redis: FakeRedis) -> None:
    store = PendingActionStore(fake_redis)  # type: ignore[arg-type]
    await store.put("S1", CreateTaskAction(action_payload=TaskPayload(title="Laundry")))

    stored = await store.get("S1")
    assert isinstance(stored, CreateTaskAction)
    assert stored.action_payload.title == "Laundry"

    await store.clear("S1")
    assert await store.get("S1") is None


@pytest.mark.asyncio
async def test_put_refuses_to_overwrite(fake_redis: FakeRedis) -> None:
    store = PendingActionStore(fake_redis)  # type: ignore[arg-type]
    await store.put("S1", CreateTaskAction(action_payload=TaskPayload(title="a")))

    with pytest.raises(PendingActionConflictError):
        await store.put("S1", CreateTaskAction(action_payload=TaskPayload(title="b")))

    await store.put("S2", CreateTaskAction(action_payload=TaskPayload(title="b")))


@pytest.mark.asyncio
async def test_edit_field_and_toggle_item_persist(fake_redis: FakeRedis) -> None:
    store = PendingActionStore(fake_redis)  # type: ignore[arg-type]
    await store.put("S1", CreateTaskAction(action_payload=TaskPayload(title="a")))
    await store.edit_field("S1", "due_date", "2026-10-21T08:00:00")
    stored = await store.get("S1")
    assert stored is not None
    assert stored.action_payload.due_date == "2026-10-21T08:00:00"  # type: ignore[union-attr]

    await store.clear("S1")
    await store.put("S1", _wishlist_batch())
    await store.toggle_item("S1", "items", 0, False)
    await store.edit_item("S1", "items", 1, "name", "comic")
    batch = await store.get("S1")
    assert isinstance(batch, AddMultipleToWishlistAction)
    assert [(item.name, item.selected) for item in batch.action_payload.items] == [
        ("lego", False),
        ("comic", True),
    ]


@pytest.mark.asyncio
async def test_edit_without_pending_action_raises(fake_redis: FakeRedis) -> None:
    store = PendingActionStore(fake_redis)  # type: ignore[arg-type]
    with pytest.raises(NothingPendingError):
        await store.edit_field("S1", "title", "x")


@pytest.mark.asyncio
async def test_invalid_edit_leaves_stored_action_unchanged(fake_redis: FakeRedis) -> None:
    store = PendingActionStore(fake_redis)  # type: ignore[arg-type]
    await store.put("S1", _wishlist_batch())

    with pytest.raises(PendingActionEditError):
        await store.edit_item("S1", "items", 5, "name", "x")

    stored = await store.get("S1")
    assert isinstance(stored, AddMultipleToWishlistAction)
    assert [item.name for item in stored.action_payload.items] == ["lego", "book"]


@pytest.mark.asyncio
async def test_corrupt_entry_is_dropped(fake_redis: FakeRedis) -> None:
    store = PendingActionStore(fake_redis)  # type: ignore[arg-type]
    await fake_redis.set("pending_action:S1", '{"action_type": "nope"}', ex=60)

    assert await store.get("S1") is None
    assert await fake_redis.get("pending_action:S1") is None


@pytest.mark.asyncio
async def test_take_returns_action_once(fake_redis: FakeRedis) -> None:
    store = PendingActionStore(fake_redis)  # type: ignore[arg-type]
    await store.put("S1", CreateTaskAction(action_payload=TaskPayload(title="Laundry")))

    taken = await store.take("S1")

    assert isinstance(taken, CreateTaskAction)
    assert await store.take("S1") is None
    assert await store.get("S1") is None
