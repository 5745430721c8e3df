from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

Record = dict[str, Any]


class EntityAPIError(RuntimeError):
    def __init__(self, status: int | None, message: str) -> None:
        super().__init__(message)
        self.status = status

    @property
    def is_forbidden(self) -> bool:
        return self.status == 403

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class EntityClient(Protocol):
    async def create(self, data: Record) -> Record:
        ...

    async def update(self, entity_id: str, data: Record) -> Record:
        ...

    async def delete(self, entity_id: str) -> None:
        ...

    async def filter(self, **criteria: Any) -> list[Record]:
        ...


class TaskClient(EntityClient, Protocol):
    async def to_event(self, task_id: str) -> Record:
        ...


class EventClient(EntityClient, Protocol):
    async def to_task(self, event_id: str) -> Record:
        ...


@dataclass(slots=True)
class EntityGateway:
    tasks: TaskClient
    events: EventClient
    wishlist_items: EntityClient
    chat_messages: EntityClient
    conversations: EntityClient
