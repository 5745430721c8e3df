from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from famly.domain.actions import (
    AddMultipleToWishlistAction,
    AddToWishlistAction,
    AssistantReply,
    ConvertEventToTaskAction,
    ConvertTaskToEventAction,
    CreateEventAction,
    CreateMultipleEventsAction,
    CreateTaskAction,
    PendingAction,
    UpdateTaskStatusAction,
    is_complete,
)
from famly.domain.enums import ActionType
from famly.domain.family import ConversationContext, FamilyMember
from famly.services.assistant.action_executor import ActionExecutor, OnUpdateFn
from famly.services.assistant.assistant_response import GENERIC_FAILURE, AssistantResponse
from famly.services.assistant.chat_relay_service import ChatRelayService
from famly.services.assistant.member_resolver import resolve_target_member
from famly.services.assistant.query_service import QueryService
from famly.services.stores.pending_action_store import PendingActionStore

logger = structlog.get_logger(__name__)

DEFAULT_CONFIRMATION = "Shall I go ahead with this?"


@dataclass(frozen=True, slots=True)
class _Proposal:
    action: type[BaseModel]
    always_review: bool = False


# Proposal tag -> executable action. Batch proposals are always reviewed per row.
_PROPOSALS: dict[str, _Proposal] = {
    ActionType.PROPOSE_TASK: _Proposal(CreateTaskAction),
    ActionType.PROPOSE_EVENT: _Proposal(CreateEventAction),
    ActionType.PROPOSE_WISHLIST_ITEM: _Proposal(AddToWishlistAction),
    ActionType.UPDATE_TASK_STATUS: _Proposal(UpdateTaskStatusAction),
    ActionType.PROPOSE_MULTIPLE_EVENTS: _Proposal(CreateMultipleEventsAction, always_review=True),
    ActionType.PROPOSE_MULTIPLE_EVENTS_FROM_CHAT: _Proposal(CreateMultipleEventsAction, always_review=True),
    ActionType.PROPOSE_MULTIPLE_WISHLIST_ITEMS: _Proposal(AddMultipleToWishlistAction, always_review=True),
}

_CONVERSIONS: dict[str, tuple[type[BaseModel], str]] = {
    ActionType.CONVERT_EVENT_TO_TASK: (ConvertEventToTaskAction, "Which event should I turn into a task?"),
    ActionType.CONVERT_TASK_TO_EVENT: (ConvertTaskToEventAction, "Which task should I put on the calendar?"),
}


@dataclass(slots=True)
class TurnContext:
    session_id: str
    message: str
    family_id: str
    members: list[FamilyMember] = field(default_factory=list)
    self_member: FamilyMember | None = None
    conversation: ConversationContext | None = None
    on_update: OnUpdateFn | None = None


class ResponseInterpreter:
    """Turns one LLM reply into exactly one outcome.

    The outcome is an immediate execution, a new pending action with a
    confirmation question, or a plain assistant message.
    """

    def __init__(
        self,
        *,
        executor: ActionExecutor,
        queries: QueryService,
        chat_relay: ChatRelayService,
        pending_store: PendingActionStore,
    ) -> None:
        self._executor = executor
        self._queries = queries
        self._chat_relay = chat_relay
        self._pending_store = pending_store

    async def interpret(self, reply: AssistantReply, ctx: TurnContext) -> AssistantResponse:
        tag = reply.action_type
        log = logger.bind(session_id=ctx.session_id, action_type=tag)

        proposal = _PROPOSALS.get(tag)
        if proposal is not None:
            return await self._handle_proposal(reply, proposal, ctx, log)

        conversion = _CONVERSIONS.get(tag)
        if conversion is not None:
            action_cls, question = conversion
            action = self._build(action_cls, reply.action_payload, log)
            if action is None:
                return AssistantResponse(GENERIC_FAILURE)
            if not is_complete(action):
                log.info("interpreter.conversion_missing_id")
                return AssistantResponse(question)
            return await self._execute(action, ctx, log)

        if tag == ActionType.SHOW_WISHLIST:
            member = resolve_target_member(ctx.message, ctx.members, ctx.self_member)
            log.info("interpreter.show_wishlist", member_id=member.id if member else None)
            return AssistantResponse(await self._queries.show_wishlist(member))
        if tag == ActionType.SHOW_UPCOMING_EVENTS:
            return AssistantResponse(await self._queries.show_upcoming_events(ctx.family_id))
        if tag == ActionType.SHOW_TASKS:
            return AssistantResponse(await self._queries.show_tasks(ctx.family_id))

        if tag == ActionType.CLARIFY:
            return AssistantResponse(reply.clarification_question or GENERIC_FAILURE)

        if tag != ActionType.CHAT:
            log.warning("interpreter.unknown_action_type")
        text = reply.response
        if not text:
            return AssistantResponse(GENERIC_FAILURE)
        await self._relay(text, ctx, log)
        return AssistantResponse(text)

    async def _handle_proposal(
        self,
        reply: AssistantReply,
        proposal: _Proposal,
        ctx: TurnContext,
        log: Any,
    ) -> AssistantResponse:
        action = self._build(proposal.action, reply.action_payload, log)
        if action is None:
            return AssistantResponse(GENERIC_FAILURE)

        if not proposal.always_review and is_complete(action):
            log.info("interpreter.auto_applied")
            return await self._execute(action, ctx, log)

        # put() refuses to overwrite a proposal nobody confirmed or cancelled
        await self._pending_store.put(ctx.session_id, action)
        log.info("interpreter.pending_action_set", executable=action.action_type.value)
        return AssistantResponse(reply.confirmation_message or DEFAULT_CONFIRMATION, pending_action=action)

    async def _execute(self, action: PendingAction, ctx: TurnContext, log: Any) -> AssistantResponse:
        outcome = await self._executor.execute(action, ctx.on_update)
        if not outcome.succeeded:
            log.warning("interpreter.execution_failed")
        return AssistantResponse(outcome.text, executed=outcome.succeeded)

    def _build(self, action_cls: type[BaseModel], payload: dict[str, Any], log: Any) -> PendingAction | None:
        try:
            return action_cls.model_validate({"action_payload": payload})  # type: ignore[return-value]
        except ValidationError:
            log.warning("interpreter.invalid_payload", exc_info=True)
            return None

    async def _relay(self, text: str, ctx: TurnContext, log: Any) -> None:
        try:
            await self._chat_relay.relay(conversation=ctx.conversation, members=ctx.members, text=text)
        except Exception:
            log.exception("interpreter.chat_relay_failed")
