from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from redis.asyncio import Redis


class ProcessingGuard:
    """Rejects a second send for a session while the first is still in flight."""

    def __init__(self, redis: Redis, ttl_seconds: int = 120) -> None:
        self._redis = redis
        self._ttl = ttl_seconds

    async def acquire(self, session_id: str) -> bool:
        result = await self._redis.set(self._key(session_id), "1", ex=self._ttl, nx=True)
        return bool(result)

    async def release(self, session_id: str) -> None:
        await self._redis.delete(self._key(session_id))

    @asynccontextmanager
    async def hold(self, session_id: str) -> AsyncIterator[bool]:
        acquired = await self.acquire(session_id)
        try:
            yield acquired
        finally:
            if acquired:
                await self.release(session_id)

    def _key(self, session_id: str) -> str:
        return f"processing:{session_id}"
