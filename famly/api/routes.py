from __future__ import annotations

import inspect

import structlog
from fastapi import APIRouter, Depends, HTTPException

from famly.api.deps import get_assistant_service, get_container
from famly.api.schemas import (
    AssistantReplyOut,
    EditPendingRequest,
    PendingActionOut,
    SendMessageRequest,
    SuggestionsRequest,
    TranscriptOut,
)
from famly.core.container import AppContainer
from famly.domain.errors import NothingPendingError, PendingActionEditError
from famly.services.assistant.assistant_service import AssistantService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/health/live")
async def health_live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
async def health_ready(container: AppContainer = Depends(get_container)) -> dict[str, str]:
    try:
        ping_result = container.redis.ping()
        if inspect.isawaitable(ping_result):
            await ping_result
    except Exception as exc:
        logger.exception("health.ready_failed", error=str(exc))
        raise HTTPException(status_code=503, detail="dependencies unavailable") from exc
    return {"status": "ready"}


@router.post("/assistant/{session_id}/messages")
async def send_message(
    session_id: str,
    body: SendMessageRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> AssistantReplyOut:
    response = await service.send_message(
        session_id=session_id,
        user=body.user,
        members=body.family_members,
        text=body.text,
        conversation=body.conversation,
    )
    return AssistantReplyOut.build(response, await service.transcript(session_id))


@router.post("/assistant/{session_id}/confirm")
async def confirm_pending(
    session_id: str,
    service: AssistantService = Depends(get_assistant_service),
) -> AssistantReplyOut:
    response = await service.confirm(session_id)
    return AssistantReplyOut.build(response, await service.transcript(session_id))


@router.post("/assistant/{session_id}/cancel")
async def cancel_pending(
    session_id: str,
    service: AssistantService = Depends(get_assistant_service),
) -> AssistantReplyOut:
    response = await service.cancel(session_id)
    return AssistantReplyOut.build(response, await service.transcript(session_id))


@router.patch("/assistant/{session_id}/pending")
async def edit_pending(
    session_id: str,
    body: EditPendingRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> PendingActionOut:
    try:
        action = await service.edit_pending(
            session_id,
            field=body.field,
            value=body.value,
            collection=body.collection,
            index=body.index,
        )
    except NothingPendingError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PendingActionEditError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return PendingActionOut(pending_action=action)


@router.post("/assistant/{session_id}/suggestions")
async def suggest_from_conversation(
    session_id: str,
    body: SuggestionsRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> AssistantReplyOut:
    response = await service.suggest_from_conversation(
        session_id=session_id,
        user=body.user,
        members=body.family_members,
        messages=[(message.sender, message.content) for message in body.messages],
    )
    return AssistantReplyOut.build(response, await service.transcript(session_id))


@router.get("/assistant/{session_id}/transcript")
async def get_transcript(
    session_id: str,
    service: AssistantService = Depends(get_assistant_service),
) -> TranscriptOut:
    return TranscriptOut(
        transcript=await service.transcript(session_id),
        pending_action=await service.pending(session_id),
    )


@router.delete("/assistant/{session_id}/transcript")
async def clear_transcript(
    session_id: str,
    service: AssistantService = Depends(get_assistant_service),
) -> dict[str, str]:
    await service.clear(session_id)
    return {"status": "cleared"}
