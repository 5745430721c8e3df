from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from famly.domain.family import FamilyMember, UserContext
from famly.integrations.entities.base import EntityAPIError, EntityGateway
from famly.integrations.llm.base import InvokeRequest, InvokeResult

FIXED_NOW = datetime(2026, 10, 17, 9, 0, tzinfo=UTC)


class FakeCompletion:
    def __init__(self, data: dict[str, Any] | None = None, **mirrors: Any) -> None:
        self.data = data or {}
        self.mirrors = mirrors
        self.requests: list[InvokeRequest] = []
        self.error: Exception | None = None

    async def invoke(self, request: InvokeRequest) -> InvokeResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return InvokeResult(data=self.data, **self.mirrors)


class FakeEntityClient:
    def __init__(self, name: str, records: list[dict[str, Any]] | None = None) -> None:
        self.name = name
        self.records = records or []
        self.created: list[dict[str, Any]] = []
        self.updated: list[tuple[str, dict[str, Any]]] = []
        self.converted: list[str] = []
        self.filters: list[dict[str, Any]] = []
        self.fail_on_create: int | None = None
        self.filter_error: EntityAPIError | None = None
        self.update_error: EntityAPIError | None = None

    async def create(self, data: dict[str, Any]) -> dict[str, Any]:
        if self.fail_on_create is not None and len(self.created) == self.fail_on_create:
            raise EntityAPIError(500, f"{self.name} create failed")
        self.created.append(data)
        return {"id": f"{self.name}-{len(self.created)}", **data}

    async def update(self, entity_id: str, data: dict[str, Any]) -> dict[str, Any]:
        if self.update_error is not None:
            raise self.update_error
        self.updated.append((entity_id, data))
        return {"id": entity_id, "title": f"{self.name} {entity_id}", **data}

    async def delete(self, entity_id: str) -> None:
        return None

    async def filter(self, **criteria: Any) -> list[dict[str, Any]]:
        self.filters.append(criteria)
        if self.filter_error is not None:
            raise self.filter_error
        return list(self.records)

    async def to_task(self, event_id: str) -> dict[str, Any]:
        self.converted.append(event_id)
        return {"id": "task-from-event", "title": "Dentist"}

    async def to_event(self, task_id: str) -> dict[str, Any]:
        self.converted.append(task_id)
        return {"id": "event-from-task", "title": "Buy presents"}


class FakeRedis:
    def __init__(self) -> None:
        self._store: dict[str, object] = {}

    async def set(self, key: str, value: str, ex: int, nx: bool = False) -> bool:
        if nx and key in self._store:
            return False
        self._store[key] = value
        return True

    async def get(self, key: str) -> object | None:
        return self._store.get(key)

    async def getdel(self, key: str) -> object | None:
        return self._store.pop(key, None)

    async def delete(self, key: str) -> int:
        if key in self._store:
            del self._store[key]
            return 1
        return 0

    async def ping(self) -> bool:
        return True


def build_gateway() -> EntityGateway:
    return EntityGateway(
        tasks=FakeEntityClient("Task"),
        events=FakeEntityClient("ScheduleEvent"),
        wishlist_items=FakeEntityClient("WishlistItem"),
        chat_messages=FakeEntityClient("ChatMessage"),
        conversations=FakeEntityClient("Conversation"),
    )


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def gateway() -> EntityGateway:
    return build_gateway()


@pytest.fixture
def members() -> list[FamilyMember]:
    return [
        FamilyMember(id="M1", name="Alex", user_id="U1"),
        FamilyMember(id="M2", name="Max"),
        FamilyMember(id="M3", name="Maxine"),
        FamilyMember(id="AI", name="famly.ai", role="ai_assistant"),
    ]


@pytest.fixture
def user() -> UserContext:
    return UserContext(id="U1", family_id="F1", language="en")
