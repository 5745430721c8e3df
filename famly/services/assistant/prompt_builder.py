from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from famly.domain.actions import ConversationTurn
from famly.domain.enums import LLM_ACTION_TYPES, EventCategory, Role, TaskStatus
from famly.domain.family import FamilyMember

SYSTEM_PROMPT = (
    "You are famly.ai, a helpful family organizer assistant. "
    "You turn chat messages into structured proposals for tasks, calendar events and wishlist items. "
    "Answer with exactly one JSON object and nothing else."
)

EVENT_CATEGORIES: tuple[str, ...] = tuple(category.value for category in EventCategory)

_ROLE_LABELS = {Role.USER: "User", Role.ASSISTANT: "Assistant"}


def format_history(turns: list[ConversationTurn], window: int) -> str:
    recent = turns[-window:] if window > 0 else []
    return "\n".join(f"{_ROLE_LABELS[turn.role]}: {turn.content}" for turn in recent)


def _roster_block(members: list[FamilyMember]) -> str:
    return json.dumps([{"id": member.id, "name": member.name} for member in members], ensure_ascii=False)


def build_assistant_prompt(
    *,
    message: str,
    history: list[ConversationTurn],
    members: list[FamilyMember],
    self_member: FamilyMember | None,
    family_id: str,
    now: datetime,
    language: str | None = None,
    history_window: int = 6,
) -> str:
    """Render the instruction for one assistant turn.

    ``history`` is the transcript before ``message``; the new message is added as
    the last history line and repeated in the analysis instruction.
    """
    self_name = self_member.name if self_member and self_member.name else "a family member"
    self_id = self_member.id if self_member else "unknown"
    turns = [*history, ConversationTurn(role=Role.USER, content=message)]
    statuses = ", ".join(status.value for status in TaskStatus)

    return (
        f"The user is {self_name}. Their member ID is {self_id}. "
        'When they say "I", "me", "my" or "mine" you MUST use that ID.\n'
        f"Current time (UTC): {now.isoformat()}.\n"
        f"Preferred language of the user: {language or 'en'}. Write every message in that language.\n"
        f"Family members: {_roster_block(members)}.\n"
        f"Family ID: {family_id}.\n"
        f"Event categories: {', '.join(EVENT_CATEGORIES)}.\n"
        f"Task statuses: {statuses}.\n\n"
        "CONVERSATION HISTORY:\n"
        f"{format_history(turns, history_window)}\n\n"
        f'Analyse the latest user message "{message}" in the context above and answer with ONE of these shapes:\n'
        "1. Several activities in one message (e.g. 'school visit in the morning and a party in the afternoon'): "
        "parse each activity into its own event. Morning is 09:00-12:00, afternoon 13:00-17:00, evening 18:00-22:00.\n"
        '   {"action_type": "propose_multiple_events_from_chat", "confirmation_message": "...", '
        f'"action_payload": {{"events": [{{"title": "...", "start_time": "YYYY-MM-DDTHH:MM:SS", '
        f'"end_time": "...", "family_member_ids": ["..."], "family_id": "{family_id}", "category": "..."}}]}}}}\n'
        "2. A pasted block of dates such as a school holiday schedule: parse ALL dates. "
        "'20 to 24 October 2025' -> start 2025-10-20T00:00:00, end 2025-10-24T23:59:59. "
        "Use category 'holiday' for holidays and 'studyday' for study days.\n"
        '   {"action_type": "propose_multiple_events", "confirmation_message": "...", '
        '"action_payload": {"events": [...]}}\n'
        "3. A single task:\n"
        '   {"action_type": "propose_task", "confirmation_message": "...", "action_payload": '
        f'{{"title": "...", "description": "...", "assigned_to": ["member_id"], "due_date": "YYYY-MM-DDTHH:MM:SS", '
        f'"family_id": "{family_id}", "status": "todo"}}}}\n'
        "4. A single appointment:\n"
        '   {"action_type": "propose_event", "confirmation_message": "...", "action_payload": '
        '{"title": "...", "start_time": "YYYY-MM-DDTHH:MM:SS", "end_time": "...", '
        f'"family_member_ids": ["member_id"], "family_id": "{family_id}", "location": "...", "category": "..."}}}}\n'
        "5. One wishlist item:\n"
        '   {"action_type": "propose_wishlist_item", "confirmation_message": "...", '
        '"action_payload": {"name": "...", "url": "...", "family_member_id": "member_id"}}\n'
        "6. Several wishlist items:\n"
        '   {"action_type": "propose_multiple_wishlist_items", "confirmation_message": "...", '
        '"action_payload": {"items": [{"name": "...", "url": "...", "family_member_id": "member_id"}]}}\n'
        "7. The user wants to see a wishlist, the upcoming events or the open tasks:\n"
        '   {"action_type": "show_wishlist"} | {"action_type": "show_upcoming_events"} | {"action_type": "show_tasks"}\n'
        "8. The user changes the status of an existing task:\n"
        '   {"action_type": "update_task_status", "confirmation_message": "...", '
        '"action_payload": {"id": "task_id", "status": "todo|in_progress|done"}}\n'
        "9. The user turns an event into a task or a task into an event:\n"
        '   {"action_type": "convert_event_to_task", "action_payload": {"event_id": "..."}} | '
        '{"action_type": "convert_task_to_event", "action_payload": {"task_id": "..."}}\n'
        "10. Information is missing for any action:\n"
        '   {"action_type": "clarify", "clarification_question": "..."}\n'
        "11. Plain conversation:\n"
        '   {"action_type": "chat", "response": "..."}\n\n'
        "Output ONLY the JSON."
    )


def _event_item_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "description": {"type": "string"},
            "start_time": {"type": "string"},
            "end_time": {"type": "string"},
            "family_member_ids": {"type": "array", "items": {"type": "string"}},
            "family_id": {"type": "string"},
            "location": {"type": "string"},
            "category": {"type": "string", "enum": list(EVENT_CATEGORIES)},
        },
    }


def _wishlist_item_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "url": {"type": "string"},
            "family_member_id": {"type": "string"},
        },
    }


def _task_item_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "description": {"type": "string"},
            "assigned_to": {"type": "array", "items": {"type": "string"}},
            "due_date": {"type": "string"},
            "family_id": {"type": "string"},
            "status": {"type": "string", "enum": [status.value for status in TaskStatus]},
        },
    }


def build_response_schema() -> dict[str, Any]:
    # Only action_type is required; payload completeness is judged in code.
    payload_properties: dict[str, Any] = {}
    for schema in (_task_item_schema(), _event_item_schema(), _wishlist_item_schema()):
        payload_properties.update(schema["properties"])
    payload_properties.update(
        {
            "id": {"type": "string"},
            "event_id": {"type": "string"},
            "task_id": {"type": "string"},
            "events": {"type": "array", "items": _event_item_schema()},
            "items": {"type": "array", "items": _wishlist_item_schema()},
        }
    )
    return {
        "type": "object",
        "properties": {
            "action_type": {"type": "string", "enum": [action.value for action in LLM_ACTION_TYPES]},
            "confirmation_message": {"type": "string"},
            "clarification_question": {"type": "string"},
            "response": {"type": "string"},
            "action_payload": {"type": "object", "properties": payload_properties},
        },
        "required": ["action_type"],
    }


def build_summary_prompt(
    *,
    messages: list[tuple[str, str]],
    members: list[FamilyMember],
    family_id: str,
    now: datetime,
    language: str | None = None,
) -> str:
    """Prompt for turning a family chat into suggested tasks, events and wishlist items.

    ``messages`` are ``(sender name, text)`` pairs, oldest first.
    """
    transcript = "\n".join(f"{sender}: {text}" for sender, text in messages)
    return (
        "Read this family conversation and extract anything the family agreed to do.\n"
        f"Current time (UTC): {now.isoformat()}.\n"
        f"Preferred language: {language or 'en'}.\n"
        f"Family members: {_roster_block(members)}.\n"
        f"Family ID: {family_id}.\n\n"
        f"CONVERSATION:\n{transcript}\n\n"
        "Respond with a JSON object:\n"
        '{"summary": "short summary of the conversation", '
        f'"tasks": [{{"title": "...", "description": "...", "assigned_to": ["member_id"], "family_id": "{family_id}", '
        '"status": "todo"}], '
        '"events": [{"title": "...", "start_time": "YYYY-MM-DDTHH:MM:SS", "end_time": "...", '
        f'"family_member_ids": ["member_id"], "family_id": "{family_id}"}}], '
        '"wishlist_items": [{"name": "...", "family_member_id": "member_id"}]}\n'
        "Return empty arrays when nothing is found. The summary is mandatory."
    )


def build_summary_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "summary": {"type": "string"},
            "tasks": {"type": "array", "items": _task_item_schema()},
            "events": {"type": "array", "items": _event_item_schema()},
            "wishlist_items": {"type": "array", "items": _wishlist_item_schema()},
        },
        "required": ["summary"],
    }
