from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog
from structlog.contextvars import bound_contextvars

from famly.core.datetime_utils import utc_now
from famly.domain.actions import AssistantReply, ConversationTurn, PendingAction, selected_only
from famly.domain.enums import Role
from famly.domain.errors import PendingActionEditError
from famly.domain.family import ConversationContext, FamilyMember, UserContext, find_self_member
from famly.integrations.llm.base import CompletionClient, InvokeRequest
from famly.services.assistant.action_executor import ActionExecutor, OnUpdateFn
from famly.services.assistant.assistant_response import (
    ACTION_CANCELLED,
    GENERIC_FAILURE,
    NO_FAMILY_CONTEXT,
    NOTHING_PENDING,
    PREVIOUS_PROPOSAL_DISCARDED,
    STILL_PROCESSING,
    AssistantResponse,
)
from famly.services.assistant.prompt_builder import SYSTEM_PROMPT, build_assistant_prompt, build_response_schema
from famly.services.assistant.response_interpreter import ResponseInterpreter, TurnContext
from famly.services.assistant.suggestion_service import SuggestionService
from famly.services.stores.pending_action_store import PendingActionStore
from famly.services.stores.processing_guard import ProcessingGuard
from famly.services.stores.transcript_store import TranscriptStore

logger = structlog.get_logger(__name__)


def _assistant_turn(response: AssistantResponse) -> ConversationTurn:
    return ConversationTurn(
        role=Role.ASSISTANT,
        content=response.text,
        has_action=response.has_action,
        action=response.pending_action,
    )


class AssistantService:
    """One assistant chat surface per session id.

    Owns the transcript and the single pending action of each session; all
    handlers are sequential awaits inside one request.
    """

    def __init__(
        self,
        *,
        completion: CompletionClient,
        interpreter: ResponseInterpreter,
        executor: ActionExecutor,
        suggestions: SuggestionService,
        pending_store: PendingActionStore,
        transcripts: TranscriptStore,
        guard: ProcessingGuard,
        history_window: int = 6,
        temperature: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._completion = completion
        self._interpreter = interpreter
        self._executor = executor
        self._suggestions = suggestions
        self._pending_store = pending_store
        self._transcripts = transcripts
        self._guard = guard
        self._history_window = history_window
        self._temperature = temperature
        self._clock = clock

    async def send_message(
        self,
        *,
        session_id: str,
        user: UserContext,
        members: list[FamilyMember],
        text: str,
        conversation: ConversationContext | None = None,
        on_update: OnUpdateFn | None = None,
    ) -> AssistantResponse:
        message = text.strip()
        if not message:
            return AssistantResponse("")

        with bound_contextvars(assistant_session_id=session_id):
            async with self._guard.hold(session_id) as acquired:
                if not acquired:
                    logger.info("assistant.send_rejected_busy")
                    return AssistantResponse(STILL_PROCESSING)
                return await self._send(
                    session_id=session_id,
                    user=user,
                    members=members,
                    message=message,
                    conversation=conversation,
                    on_update=on_update,
                )

    async def _send(
        self,
        *,
        session_id: str,
        user: UserContext,
        members: list[FamilyMember],
        message: str,
        conversation: ConversationContext | None,
        on_update: OnUpdateFn | None,
    ) -> AssistantResponse:
        history = await self._transcripts.load(session_id)
        await self._discard_pending(session_id, history)
        user_turn = ConversationTurn(role=Role.USER, content=message)

        if not user.family_id:
            logger.info("assistant.no_family_context")
            response = AssistantResponse(NO_FAMILY_CONTEXT)
            await self._transcripts.save(session_id, [*history, user_turn, _assistant_turn(response)])
            return response

        logger.info("assistant.send_started", text_len=len(message), history_len=len(history))
        self_member = find_self_member(user, members)
        try:
            result = await self._completion.invoke(
                InvokeRequest(
                    prompt=build_assistant_prompt(
                        message=message,
                        history=history,
                        members=members,
                        self_member=self_member,
                        family_id=user.family_id,
                        now=self._clock(),
                        language=user.language,
                        history_window=self._history_window,
                    ),
                    system=SYSTEM_PROMPT,
                    response_json_schema=build_response_schema(),
                    strict=False,
                    temperature=self._temperature,
                )
            )
            reply = AssistantReply.model_validate(result.data)
            response = await self._interpreter.interpret(
                reply,
                TurnContext(
                    session_id=session_id,
                    message=message,
                    family_id=user.family_id,
                    members=members,
                    self_member=self_member,
                    conversation=conversation,
                    on_update=on_update,
                ),
            )
        except Exception:
            logger.exception("assistant.send_failed")
            response = AssistantResponse(GENERIC_FAILURE)

        await self._transcripts.save(session_id, [*history, user_turn, _assistant_turn(response)])
        logger.info(
            "assistant.send_completed",
            has_action=response.has_action,
            executed=response.executed,
        )
        return response

    async def confirm(self, session_id: str, on_update: OnUpdateFn | None = None) -> AssistantResponse:
        with bound_contextvars(assistant_session_id=session_id):
            pending = await self._pending_store.take(session_id)
            if pending is None:
                return AssistantResponse(NOTHING_PENDING)

            action = selected_only(pending)
            outcome = await self._executor.execute(action, on_update)

            logger.info(
                "assistant.pending_action_confirmed",
                action_type=action.action_type.value,
                succeeded=outcome.succeeded,
            )
            response = AssistantResponse(outcome.text, executed=outcome.succeeded)
            await self._transcripts.append(session_id, _assistant_turn(response))
            return response

    async def cancel(self, session_id: str) -> AssistantResponse:
        with bound_contextvars(assistant_session_id=session_id):
            pending = await self._pending_store.take(session_id)
            if pending is None:
                return AssistantResponse(NOTHING_PENDING)
            logger.info("assistant.pending_action_cancelled", action_type=pending.action_type.value)
            response = AssistantResponse(ACTION_CANCELLED)
            await self._transcripts.append(session_id, _assistant_turn(response))
            return response

    async def edit_pending(
        self,
        session_id: str,
        *,
        field: str,
        value: Any,
        collection: str | None = None,
        index: int | None = None,
    ) -> PendingAction:
        if collection is None:
            return await self._pending_store.edit_field(session_id, field, value)
        if index is None:
            msg = f"Editing '{collection}' needs a row index"
            raise PendingActionEditError(msg)
        return await self._pending_store.edit_item(session_id, collection, index, field, value)

    async def suggest_from_conversation(
        self,
        *,
        session_id: str,
        user: UserContext,
        members: list[FamilyMember],
        messages: list[tuple[str, str]],
    ) -> AssistantResponse:
        with bound_contextvars(assistant_session_id=session_id):
            async with self._guard.hold(session_id) as acquired:
                if not acquired:
                    return AssistantResponse(STILL_PROCESSING)
                history = await self._transcripts.load(session_id)
                await self._discard_pending(session_id, history)
                if not user.family_id:
                    response = AssistantResponse(NO_FAMILY_CONTEXT)
                else:
                    try:
                        response = await self._suggestions.suggest(
                            session_id=session_id,
                            family_id=user.family_id,
                            members=members,
                            messages=messages,
                            now=self._clock(),
                            language=user.language,
                        )
                    except Exception:
                        logger.exception("assistant.suggestions_failed")
                        response = AssistantResponse(GENERIC_FAILURE)
                await self._transcripts.save(session_id, [*history, _assistant_turn(response)])
                return response

    async def pending(self, session_id: str) -> PendingAction | None:
        return await self._pending_store.get(session_id)

    async def transcript(self, session_id: str) -> list[ConversationTurn]:
        return await self._transcripts.load(session_id)

    async def clear(self, session_id: str) -> None:
        await self._pending_store.clear(session_id)
        await self._transcripts.clear(session_id)
        logger.info("assistant.session_cleared", assistant_session_id=session_id)

    async def _discard_pending(self, session_id: str, history: list[ConversationTurn]) -> None:
        # A new turn may only start once the previous proposal has been resolved.
        pending = await self._pending_store.get(session_id)
        if pending is None:
            return
        await self._pending_store.clear(session_id)
        logger.info("assistant.pending_action_discarded", action_type=pending.action_type.value)
        history.append(ConversationTurn(role=Role.ASSISTANT, content=PREVIOUS_PROPOSAL_DISCARDED))
