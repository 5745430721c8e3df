from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from famly.core.datetime_utils import format_short, parse_timestamp, utc_now
from famly.domain.enums import TaskStatus
from famly.domain.family import FamilyMember
from famly.integrations.entities.base import EntityAPIError, EntityGateway
from famly.services.assistant.assistant_response import GENERIC_FAILURE

logger = structlog.get_logger(__name__)


class QueryService:
    """Read-only answers: wishlists, upcoming events, open tasks."""

    def __init__(
        self,
        *,
        entities: EntityGateway,
        upcoming_limit: int = 5,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._entities = entities
        self._upcoming_limit = upcoming_limit
        self._clock = clock

    async def show_wishlist(self, member: FamilyMember | None) -> str:
        if member is None:
            return "I couldn't tell whose wishlist you mean."
        try:
            items = await self._entities.wishlist_items.filter(family_member_id=member.id)
        except EntityAPIError as exc:
            if exc.is_forbidden:
                return (
                    f"{member.name}'s wishlist is password protected. "
                    "Open the wishlist page to unlock it."
                )
            logger.exception("query.wishlist_failed", member_id=member.id, status=exc.status)
            return GENERIC_FAILURE

        if not items:
            return f"{member.name}'s wishlist is empty."
        lines = [self._wishlist_line(item) for item in items]
        return f"{member.name}'s wishlist:\n" + "\n".join(lines)

    async def show_upcoming_events(self, family_id: str) -> str:
        try:
            events = await self._entities.events.filter(family_id=family_id)
        except EntityAPIError as exc:
            logger.exception("query.events_failed", family_id=family_id, status=exc.status)
            return GENERIC_FAILURE

        now = self._clock()
        upcoming: list[tuple[datetime, dict[str, Any]]] = []
        for event in events:
            start = parse_timestamp(event.get("start_time"))
            if start is not None and start >= now:
                upcoming.append((start, event))
        if not upcoming:
            return "There is nothing on the calendar coming up."

        upcoming.sort(key=lambda pair: pair[0])
        lines = [
            f"- {format_short(start)}: {event.get('title') or 'Untitled event'}"
            for start, event in upcoming[: self._upcoming_limit]
        ]
        return "Coming up:\n" + "\n".join(lines)

    async def show_tasks(self, family_id: str) -> str:
        try:
            tasks = await self._entities.tasks.filter(family_id=family_id)
        except EntityAPIError as exc:
            logger.exception("query.tasks_failed", family_id=family_id, status=exc.status)
            return GENERIC_FAILURE

        open_tasks = [task for task in tasks if task.get("status") != TaskStatus.DONE.value]
        if not open_tasks:
            return "There are no open tasks."

        def sort_key(task: dict[str, Any]) -> tuple[bool, datetime | str]:
            due = parse_timestamp(task.get("due_date"))
            return (due is None, due or "")

        lines = []
        for task in sorted(open_tasks, key=sort_key):
            due = parse_timestamp(task.get("due_date"))
            suffix = f" (due {format_short(due)})" if due is not None else ""
            lines.append(f"- {task.get('title') or 'Untitled task'}{suffix}")
        return "Open tasks:\n" + "\n".join(lines)

    def _wishlist_line(self, item: dict[str, Any]) -> str:
        name = item.get("name") or "Unnamed item"
        url = item.get("url")
        return f"- {name} ({url})" if url else f"- {name}"
