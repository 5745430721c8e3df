from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from famly.domain.actions import (
    AddMultipleToWishlistAction,
    AddToWishlistAction,
    ConvertEventToTaskAction,
    ConvertTaskToEventAction,
    CreateEventAction,
    CreateMultipleEventsAction,
    CreateSuggestionsAction,
    CreateTaskAction,
    EntityPayload,
    EventPayload,
    PendingAction,
    TaskPayload,
    UpdateTaskStatusAction,
    WishlistItemPayload,
)
from famly.integrations.entities.base import EntityAPIError, EntityClient, EntityGateway
from famly.services.assistant.assistant_response import EXECUTION_FAILURE, TARGET_MISSING, ExecutionOutcome

logger = structlog.get_logger(__name__)

OnUpdateFn = Callable[[], Awaitable[None]]


class IncompleteActionError(ValueError):
    pass


class ActionExecutor:
    """Applies a confirmed or auto-applied action against the entity backend.

    Rows of a batch are created one call at a time; a failure half way leaves the
    earlier rows in place.
    """

    def __init__(self, *, entities: EntityGateway) -> None:
        self._entities = entities

    async def execute(self, action: PendingAction, on_update: OnUpdateFn | None = None) -> ExecutionOutcome:
        log = logger.bind(action_type=action.action_type.value)
        created: list[dict[str, Any]] = []
        try:
            text = await self._apply(action, created)
        except IncompleteActionError as exc:
            log.info("executor.incomplete_action", reason=str(exc))
            return ExecutionOutcome(text=str(exc), succeeded=False, created=created)
        except EntityAPIError as exc:
            if not exc.is_not_found:
                log.exception("executor.failed", created_count=len(created), status=exc.status)
                return ExecutionOutcome(text=EXECUTION_FAILURE, succeeded=False, created=created)
            log.info("executor.target_missing")
            return ExecutionOutcome(text=TARGET_MISSING, succeeded=False, created=created)
        except Exception:
            log.exception("executor.failed", created_count=len(created))
            return ExecutionOutcome(text=EXECUTION_FAILURE, succeeded=False, created=created)

        log.info("executor.applied", created_count=len(created))
        if on_update is not None:
            try:
                await on_update()
            except Exception:
                log.exception("executor.on_update_failed")
        return ExecutionOutcome(text=text, succeeded=True, created=created)

    async def _apply(self, action: PendingAction, created: list[dict[str, Any]]) -> str:
        if isinstance(action, CreateTaskAction):
            title = await self._create(self._entities.tasks, action.action_payload, created, "title")
            return f'Okay, I\'ve created the task "{title}".'

        if isinstance(action, CreateEventAction):
            title = await self._create(self._entities.events, action.action_payload, created, "title")
            return f'Okay, I\'ve scheduled the event "{title}".'

        if isinstance(action, AddToWishlistAction):
            name = await self._create(self._entities.wishlist_items, action.action_payload, created, "name")
            return f'Okay, I\'ve added "{name}" to the wishlist.'

        if isinstance(action, CreateMultipleEventsAction):
            titles = await self._create_events(action.action_payload.events, created)
            return self._summarize([("Scheduled events", titles)])

        if isinstance(action, AddMultipleToWishlistAction):
            names = await self._create_wishlist_items(action.action_payload.items, created)
            return self._summarize([("Added wishlist items", names)])

        if isinstance(action, CreateSuggestionsAction):
            payload = action.action_payload
            titles = await self._create_tasks(payload.tasks, created)
            event_titles = await self._create_events(payload.events, created)
            names = await self._create_wishlist_items(payload.items, created)
            return self._summarize(
                [("Created tasks", titles), ("Scheduled events", event_titles), ("Added wishlist items", names)]
            )

        if isinstance(action, UpdateTaskStatusAction):
            status_payload = action.action_payload
            if not status_payload.id:
                raise IncompleteActionError("Which task should I update?")
            if not status_payload.status:
                raise IncompleteActionError("What should the new status of the task be?")
            record = await self._entities.tasks.update(status_payload.id, {"status": status_payload.status})
            created.append(record)
            title = record.get("title") or status_payload.id
            return f'Okay, "{title}" is now marked as {status_payload.status}.'

        if isinstance(action, ConvertEventToTaskAction):
            event_id = action.action_payload.event_id
            if not event_id:
                raise IncompleteActionError("Which event should I turn into a task?")
            record = await self._entities.events.to_task(event_id)
            created.append(record)
            return f'Okay, I\'ve turned the event into the task "{record.get("title", event_id)}".'

        if isinstance(action, ConvertTaskToEventAction):
            task_id = action.action_payload.task_id
            if not task_id:
                raise IncompleteActionError("Which task should I put on the calendar?")
            record = await self._entities.tasks.to_event(task_id)
            created.append(record)
            return f'Okay, I\'ve put "{record.get("title", task_id)}" on the calendar.'

        msg = f"Unsupported action type: {action.action_type}"
        raise TypeError(msg)

    async def _create(
        self,
        client: EntityClient,
        payload: EntityPayload,
        created: list[dict[str, Any]],
        label_field: str,
    ) -> str:
        data = payload.to_entity()
        record = await client.create(data)
        created.append(record)
        return str(data.get(label_field) or record.get(label_field) or "")

    async def _create_tasks(self, tasks: list[TaskPayload], created: list[dict[str, Any]]) -> list[str]:
        return [await self._create(self._entities.tasks, task, created, "title") for task in tasks]

    async def _create_events(self, events: list[EventPayload], created: list[dict[str, Any]]) -> list[str]:
        return [await self._create(self._entities.events, event, created, "title") for event in events]

    async def _create_wishlist_items(
        self,
        items: list[WishlistItemPayload],
        created: list[dict[str, Any]],
    ) -> list[str]:
        return [await self._create(self._entities.wishlist_items, item, created, "name") for item in items]

    def _summarize(self, groups: list[tuple[str, list[str]]]) -> str:
        parts = [f"{label}: {', '.join(names)}." for label, names in groups if names]
        if not parts:
            return "Nothing was selected, so nothing was added."
        return " ".join(parts)
