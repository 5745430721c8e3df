from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog
from pydantic import ValidationError

from famly.domain.actions import CreateSuggestionsAction, SuggestionsPayload
from famly.domain.family import FamilyMember
from famly.integrations.llm.base import CompletionClient, CompletionError, InvokeRequest, InvokeResult
from famly.services.assistant.assistant_response import AssistantResponse
from famly.services.assistant.prompt_builder import SYSTEM_PROMPT, build_summary_prompt, build_summary_schema
from famly.services.stores.pending_action_store import PendingActionStore

logger = structlog.get_logger(__name__)


class SuggestionService:
    """Summarises a family chat and proposes the tasks, events and wishlist items it mentions."""

    def __init__(self, *, completion: CompletionClient, pending_store: PendingActionStore) -> None:
        self._completion = completion
        self._pending_store = pending_store

    async def suggest(
        self,
        *,
        session_id: str,
        family_id: str,
        members: list[FamilyMember],
        messages: list[tuple[str, str]],
        now: datetime,
        language: str | None = None,
    ) -> AssistantResponse:
        result = await self._completion.invoke(
            InvokeRequest(
                prompt=build_summary_prompt(
                    messages=messages,
                    members=members,
                    family_id=family_id,
                    now=now,
                    language=language,
                ),
                system=SYSTEM_PROMPT,
                response_json_schema=build_summary_schema(),
            )
        )
        payload = self._payload_from(result)
        if not (payload.tasks or payload.events or payload.items):
            logger.info("suggestions.nothing_found", session_id=session_id)
            return AssistantResponse(str(payload.summary))

        action = CreateSuggestionsAction(action_payload=payload)
        await self._pending_store.put(session_id, action)
        logger.info(
            "suggestions.pending_action_set",
            session_id=session_id,
            tasks=len(payload.tasks),
            events=len(payload.events),
            items=len(payload.items),
        )
        return AssistantResponse(str(payload.summary), pending_action=action)

    def _payload_from(self, result: InvokeResult) -> SuggestionsPayload:
        data = result.data
        summary = result.summary or data.get("summary")
        if not summary:
            msg = "Summary missing from suggestion response"
            raise CompletionError(msg)

        def pick(mirror: list[dict[str, Any]] | None, key: str) -> list[dict[str, Any]]:
            if mirror is not None:
                return mirror
            value = data.get(key)
            return value if isinstance(value, list) else []

        try:
            return SuggestionsPayload.model_validate(
                {
                    "summary": summary,
                    "tasks": pick(result.tasks, "tasks"),
                    "events": pick(result.events, "events"),
                    "items": pick(result.wishlist_items, "wishlist_items"),
                }
            )
        except ValidationError as exc:
            raise CompletionError("Suggestion response has an unexpected shape") from exc
