from __future__ import annotations

import pytest

from famly.services.parser.json_recovery import recover_json_object


def test_plain_object() -> None:
    assert recover_json_object('{"action_type": "chat"}') == {"action_type": "chat"}


def test_fenced_object_with_chatter() -> None:
    raw = '```json\nSure! {"action_type": "clarify", "clarification_question": "Which {day}?"} hope that helps\n```'
    assert recover_json_object(raw) == {"action_type": "clarify", "clarification_question": "Which {day}?"}


def test_trailing_commas_are_repaired() -> None:
    raw = '{"action_type": "propose_multiple_wishlist_items", "action_payload": {"items": [{"name": "lego"},],},}'
    assert recover_json_object(raw)["action_payload"] == {"items": [{"name": "lego"}]}


def test_python_literal_fallback() -> None:
    assert recover_json_object("{'action_type': 'chat', 'response': None}") == {
        "action_type": "chat",
        "response": None,
    }


def test_non_object_is_rejected() -> None:
    with pytest.raises(ValueError):
        recover_json_object("[1, 2]")
