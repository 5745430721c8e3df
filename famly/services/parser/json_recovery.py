from __future__ import annotations

import ast
import json
import re
from typing import Any

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def _outermost_object(text: str) -> str | None:
    start = text.find("{")
    if start < 0:
        return None
    depth = 0
    in_string = False
    escaped = False
    for pos in range(start, len(text)):
        char = text[pos]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : pos + 1]
    return None


def recover_json_object(raw: str) -> dict[str, Any]:
    """Parse a model answer that should be a single JSON object.

    Tolerates markdown fences, chatter around the object, trailing commas and
    Python-style literals.
    """
    cleaned = _FENCE_RE.sub("", raw.strip())
    candidate = _outermost_object(cleaned) or cleaned

    for attempt in (candidate, _TRAILING_COMMA_RE.sub(r"\1", candidate)):
        try:
            loaded = json.loads(attempt)
        except json.JSONDecodeError:
            continue
        if not isinstance(loaded, dict):
            msg = "Expected JSON object"
            raise ValueError(msg)
        return loaded

    literal = ast.literal_eval(candidate)
    if not isinstance(literal, dict):
        msg = "Expected object from recovery"
        raise ValueError(msg)
    return literal
