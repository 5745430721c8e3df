from __future__ import annotations

from dataclasses import dataclass

from redis.asyncio import Redis

from famly.core.config import Settings
from famly.integrations.entities.base import EntityGateway
from famly.integrations.llm.base import CompletionClient
from famly.services.assistant.action_executor import ActionExecutor
from famly.services.assistant.assistant_service import AssistantService
from famly.services.assistant.chat_relay_service import ChatRelayService
from famly.services.assistant.query_service import QueryService
from famly.services.assistant.response_interpreter import ResponseInterpreter
from famly.services.assistant.suggestion_service import SuggestionService
from famly.services.stores.pending_action_store import PendingActionStore
from famly.services.stores.processing_guard import ProcessingGuard
from famly.services.stores.transcript_store import TranscriptStore


@dataclass(slots=True)
class AppContainer:
    settings: Settings
    redis: Redis
    completion_client: CompletionClient
    entities: EntityGateway

    def create_pending_action_store(self) -> PendingActionStore:
        return PendingActionStore(self.redis, ttl_seconds=self.settings.pending_action_ttl_seconds)

    def create_assistant_service(self) -> AssistantService:
        pending_store = self.create_pending_action_store()
        executor = ActionExecutor(entities=self.entities)
        interpreter = ResponseInterpreter(
            executor=executor,
            queries=QueryService(
                entities=self.entities,
                upcoming_limit=self.settings.upcoming_events_limit,
            ),
            chat_relay=ChatRelayService(entities=self.entities),
            pending_store=pending_store,
        )
        return AssistantService(
            completion=self.completion_client,
            interpreter=interpreter,
            executor=executor,
            suggestions=SuggestionService(
                completion=self.completion_client,
                pending_store=pending_store,
            ),
            pending_store=pending_store,
            transcripts=TranscriptStore(
                self.redis,
                ttl_seconds=self.settings.transcript_ttl_seconds,
                max_turns=self.settings.transcript_max_turns,
            ),
            guard=ProcessingGuard(self.redis, ttl_seconds=self.settings.processing_guard_ttl_seconds),
            history_window=self.settings.assistant_history_window,
            temperature=self.settings.llm_temperature,
        )
