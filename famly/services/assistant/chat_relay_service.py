from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import structlog

from famly.core.datetime_utils import utc_now
from famly.domain.family import ConversationContext, FamilyMember, find_ai_member
from famly.integrations.entities.base import EntityGateway

logger = structlog.get_logger(__name__)

_PREVIEW_CHARS = 100


class ChatRelayService:
    """Posts assistant replies into a family direct-message conversation."""

    def __init__(self, *, entities: EntityGateway, clock: Callable[[], datetime] = utc_now) -> None:
        self._entities = entities
        self._clock = clock

    async def relay(
        self,
        *,
        conversation: ConversationContext | None,
        members: list[FamilyMember],
        text: str,
    ) -> bool:
        if conversation is None or not conversation.is_direct or not text:
            return False
        ai_member = find_ai_member(members)
        if ai_member is None:
            logger.warning("chat_relay.ai_member_missing", conversation_id=conversation.conversation_id)
            return False

        conversation_id = str(conversation.conversation_id)
        await self._entities.chat_messages.create(
            {
                "conversation_id": conversation_id,
                "sender_id": ai_member.id,
                "content": text,
                "message_type": "ai_suggestion",
            }
        )
        await self._entities.conversations.update(
            conversation_id,
            {
                "last_message_preview": text[:_PREVIEW_CHARS],
                "last_message_timestamp": self._clock().isoformat(),
            },
        )
        logger.info("chat_relay.reply_saved", conversation_id=conversation_id)
        return True
