from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from famly.domain.actions import PendingAction

GENERIC_FAILURE = "Sorry, I couldn't complete that. Could you try again or phrase it differently?"
EXECUTION_FAILURE = "I couldn't complete that action. Please try again."
NO_FAMILY_CONTEXT = "I can't do that without a family context. Please set up or join a family first."
ACTION_CANCELLED = "Okay, I won't do that."
NOTHING_PENDING = "There is nothing waiting for confirmation."
STILL_PROCESSING = "I'm still working on your previous message."
TARGET_MISSING = "I couldn't find that item any more. It may have been removed."
PREVIOUS_PROPOSAL_DISCARDED = "I dropped the earlier suggestion you didn't confirm."


@dataclass(slots=True)
class AssistantResponse:
    text: str
    pending_action: PendingAction | None = None
    executed: bool = False

    @property
    def has_action(self) -> bool:
        return self.pending_action is not None


@dataclass(slots=True)
class ExecutionOutcome:
    text: str
    succeeded: bool
    created: list[dict[str, Any]] = field(default_factory=list)
