from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from famly.domain.actions import ConversationTurn, PendingAction
from famly.domain.family import ConversationContext, FamilyMember, UserContext
from famly.services.assistant.assistant_response import AssistantResponse


class SendMessageRequest(BaseModel):
    text: str = Field(min_length=1)
    user: UserContext
    family_members: list[FamilyMember] = Field(default_factory=list)
    conversation: ConversationContext | None = None


class ChatMessageIn(BaseModel):
    sender: str
    content: str


class SuggestionsRequest(BaseModel):
    user: UserContext
    family_members: list[FamilyMember] = Field(default_factory=list)
    messages: list[ChatMessageIn] = Field(min_length=1)


class EditPendingRequest(BaseModel):
    field: str = Field(min_length=1)
    value: Any = None
    collection: str | None = None
    index: int | None = None


class AssistantReplyOut(BaseModel):
    reply: str
    has_action: bool
    executed: bool = False
    pending_action: PendingAction | None = None
    transcript: list[ConversationTurn] = Field(default_factory=list)

    @classmethod
    def build(cls, response: AssistantResponse, transcript: list[ConversationTurn]) -> AssistantReplyOut:
        return cls(
            reply=response.text,
            has_action=response.has_action,
            executed=response.executed,
            pending_action=response.pending_action,
            transcript=transcript,
        )


class PendingActionOut(BaseModel):
    pending_action: PendingAction | None = None


class TranscriptOut(BaseModel):
    transcript: list[ConversationTurn]
    pending_action: PendingAction | None = None
