from __future__ import annotations

import structlog
from pydantic import TypeAdapter, ValidationError
from redis.asyncio import Redis

from famly.domain.actions import ConversationTurn

logger = structlog.get_logger(__name__)

_TURNS_ADAPTER: TypeAdapter[list[ConversationTurn]] = TypeAdapter(list[ConversationTurn])


class TranscriptStore:
    """Cache of the assistant chat so a session survives reloads.

    Not authoritative: a missing or unreadable entry is an empty chat.
    """

    KEY_PREFIX = "famly_ai_conversation"

    def __init__(self, redis: Redis, ttl_seconds: int = 7 * 86400, max_turns: int = 200) -> None:
        self._redis = redis
        self._ttl = ttl_seconds
        self._max_turns = max_turns

    async def load(self, session_id: str) -> list[ConversationTurn]:
        raw = await self._redis.get(self._key(session_id))
        if raw is None:
            return []
        try:
            turns = _TURNS_ADAPTER.validate_json(raw)
        except ValidationError:
            logger.warning("transcript.corrupt_entry_ignored", session_id=session_id)
            return []
        return turns[-self._max_turns :]

    async def save(self, session_id: str, turns: list[ConversationTurn]) -> None:
        raw = _TURNS_ADAPTER.dump_json(turns[-self._max_turns :]).decode("utf-8")
        await self._redis.set(self._key(session_id), raw, ex=self._ttl)

    async def append(self, session_id: str, *turns: ConversationTurn) -> list[ConversationTurn]:
        current = await self.load(session_id)
        current.extend(turns)
        await self.save(session_id, current)
        return current

    async def clear(self, session_id: str) -> None:
        await self._redis.delete(self._key(session_id))

    def _key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}:{session_id}"
