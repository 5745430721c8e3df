from __future__ import annotations

from famly.domain.family import FamilyMember
from famly.services.assistant.member_resolver import mentions_self, resolve_target_member


def test_longest_name_wins() -> None:
    members = [FamilyMember(id="1", name="Max"), FamilyMember(id="2", name="Maxine")]
    target = resolve_target_member("show Maxine's wishlist", members, None)
    assert target is not None
    assert target.name == "Maxine"


def test_self_reference_beats_name_match(members: list[FamilyMember]) -> None:
    target = resolve_target_member("show my wishlist, not Max's", members, members[0])
    assert target is members[0]


def test_self_reference_needs_whole_word() -> None:
    assert mentions_self("what is on Mina's list") is False
    assert mentions_self("Show MY list") is True
    assert mentions_self("show me the list") is False
    assert mentions_self("laat mijn lijst zien") is True


def test_falls_back_to_self_then_first_member(members: list[FamilyMember]) -> None:
    assert resolve_target_member("show the wishlist", members, members[1]) is members[1]
    assert resolve_target_member("show the wishlist", members, None) is members[0]
    assert resolve_target_member("show the wishlist", [], None) is None


def test_name_match_is_case_insensitive() -> None:
    members = [FamilyMember(id="1", name="Alex"), FamilyMember(id="2", name="Sam")]
    target = resolve_target_member("what does SAM want", members, members[0])
    assert target is members[1]


def test_object_pronoun_does_not_hide_named_member(members: list[FamilyMember]) -> None:
    assert resolve_target_member("Show me Maxine's wishlist", members, members[0]) is members[2]
    assert resolve_target_member("Can I see Max's list?", members, members[0]) is members[1]


def test_possessive_beats_name_match(members: list[FamilyMember]) -> None:
    assert resolve_target_member("add it to my list, Max will like it", members, members[0]) is members[0]


def test_pronoun_alone_falls_back_to_caller(members: list[FamilyMember]) -> None:
    assert resolve_target_member("show me the wishlist", members, members[1]) is members[1]
