from __future__ import annotations

import re

from famly.domain.family import FamilyMember

# Possessives only: "show me Max's list" is about Max, "my list" is about the caller.
SELF_REFERENCES = frozenset({"my", "mine", "myself", "mijn"})

_WORD_RE = re.compile(r"[^\W\d_]+", re.UNICODE)


def mentions_self(message: str) -> bool:
    return any(word in SELF_REFERENCES for word in _WORD_RE.findall(message.lower()))


def resolve_target_member(
    message: str,
    members: list[FamilyMember],
    self_member: FamilyMember | None,
) -> FamilyMember | None:
    """Pick the family member a message is about.

    A possessive self reference wins, then the longest name contained in the
    message, then the caller's own member, then the first member of the roster.
    """
    if self_member is not None and mentions_self(message):
        return self_member

    lowered = message.lower()
    named = [member for member in members if member.name and member.name.lower() in lowered]
    if named:
        # "Maxine" must not lose to "Max" when both match
        return max(named, key=lambda member: len(member.name))

    if self_member is not None:
        return self_member
    return members[0] if members else None
