from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError
from redis.asyncio import Redis

from famly.domain.actions import PENDING_ACTION_ADAPTER, PendingAction, edit_pending_action
from famly.domain.errors import NothingPendingError, PendingActionConflictError

logger = structlog.get_logger(__name__)


class PendingActionStore:
    """Zero-or-one proposed action per assistant session."""

    def __init__(self, redis: Redis, ttl_seconds: int = 3600) -> None:
        self._redis = redis
        self._ttl = ttl_seconds

    async def get(self, session_id: str) -> PendingAction | None:
        raw = await self._redis.get(self._key(session_id))
        if raw is None:
            return None
        try:
            return PENDING_ACTION_ADAPTER.validate_json(raw)
        except ValidationError:
            logger.warning("pending_action.corrupt_entry_dropped", session_id=session_id)
            await self.clear(session_id)
            return None

    async def take(self, session_id: str) -> PendingAction | None:
        """Remove and return the pending action in one step.

        Of two overlapping callers only one receives the action.
        """
        raw = await self._redis.getdel(self._key(session_id))
        if raw is None:
            return None
        try:
            return PENDING_ACTION_ADAPTER.validate_json(raw)
        except ValidationError:
            logger.warning("pending_action.corrupt_entry_dropped", session_id=session_id)
            return None

    async def put(self, session_id: str, action: PendingAction) -> None:
        if await self.get(session_id) is not None:
            msg = f"Session {session_id} already has a pending action"
            raise PendingActionConflictError(msg)
        await self.replace(session_id, action)

    async def replace(self, session_id: str, action: PendingAction) -> None:
        raw = PENDING_ACTION_ADAPTER.dump_json(action).decode("utf-8")
        await self._redis.set(self._key(session_id), raw, ex=self._ttl)

    async def clear(self, session_id: str) -> None:
        await self._redis.delete(self._key(session_id))

    async def edit_field(self, session_id: str, field: str, value: Any) -> PendingAction:
        action = await self._require(session_id)
        updated = edit_pending_action(action, field=field, value=value)
        await self.replace(session_id, updated)
        return updated

    async def edit_item(
        self,
        session_id: str,
        collection: str,
        index: int,
        field: str,
        value: Any,
    ) -> PendingAction:
        action = await self._require(session_id)
        updated = edit_pending_action(action, field=field, value=value, collection=collection, index=index)
        await self.replace(session_id, updated)
        return updated

    async def toggle_item(self, session_id: str, collection: str, index: int, selected: bool) -> PendingAction:
        return await self.edit_item(session_id, collection, index, "selected", selected)

    async def _require(self, session_id: str) -> PendingAction:
        action = await self.get(session_id)
        if action is None:
            msg = f"Session {session_id} has nothing pending"
            raise NothingPendingError(msg)
        return action

    def _key(self, session_id: str) -> str:
        return f"pending_action:{session_id}"
