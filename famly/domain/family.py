from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from famly.domain.enums import ConversationType

AI_ASSISTANT_ROLE = "ai_assistant"


class FamilyMember(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    user_id: str | None = None
    role: str | None = None


class UserContext(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    family_id: str | None = None
    language: str = "en"


class ConversationContext(BaseModel):
    type: str = ConversationType.ASSISTANT.value
    conversation_id: str | None = None

    @property
    def is_direct(self) -> bool:
        return self.type == ConversationType.DIRECT.value and bool(self.conversation_id)


def find_self_member(user: UserContext, members: list[FamilyMember]) -> FamilyMember | None:
    if user.id is None:
        return None
    return next((member for member in members if member.user_id == user.id), None)


def find_ai_member(members: list[FamilyMember]) -> FamilyMember | None:
    return next((member for member in members if member.role == AI_ASSISTANT_ROLE), None)
