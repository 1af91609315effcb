"""Tests for the group registry."""

import string

import pytest

from standards_tracker.errors import (
    DuplicateGroupError,
    GroupNotFoundError,
    MalformedCodeError,
    MissingRequiredFieldError,
    ReferentialIntegrityError,
)
from standards_tracker.groups import GROUP_COLORS, Group, GroupRegistry, next_group_code


def test_next_group_code_picks_lowest_free_letter():
    assert next_group_code([]) == "A"
    groups = [Group("One", "A"), Group("Three", "C")]
    assert next_group_code(groups) == "B"


def test_next_group_code_exhausted():
    groups = [Group(letter, letter) for letter in string.ascii_uppercase]
    with pytest.raises(DuplicateGroupError):
        next_group_code(groups)


def test_add_group_assigns_letters_and_palette():
    registry = GroupRegistry()
    first = registry.add_group("Teaching")
    second = registry.add_group("  Management  ")
    assert (first.code, second.code) == ("A", "B")
    assert second.name == "Management"
    assert first.color == GROUP_COLORS[0]
    assert second.color == GROUP_COLORS[1]


def test_add_group_keeps_chosen_colour_and_letter():
    registry = GroupRegistry()
    group = registry.add_group("Teaching", color="#123456", code="T")
    assert group.code == "T"
    assert group.color == "#123456"


def test_add_group_rejects_duplicates_and_blank_names():
    registry = GroupRegistry()
    registry.add_group("Teaching")
    with pytest.raises(DuplicateGroupError):
        registry.add_group("Teaching")
    with pytest.raises(DuplicateGroupError):
        registry.add_group("Other", code="A")
    with pytest.raises(MissingRequiredFieldError):
        registry.add_group("   ")
    with pytest.raises(MalformedCodeError):
        registry.add_group("Other", code="AB")
    assert len(registry) == 1


def test_rename_group_code():
    registry = GroupRegistry([Group("Teaching", "A"), Group("Management", "B")])
    registry.rename_group_code("Teaching", "A", "C")
    assert registry.get("Teaching").code == "C"
    assert registry.by_code("A") is None


def test_rename_group_code_rejections():
    registry = GroupRegistry([Group("Teaching", "A"), Group("Management", "B")])
    with pytest.raises(DuplicateGroupError):
        registry.rename_group_code("Teaching", "A", "B")
    with pytest.raises(MalformedCodeError):
        registry.rename_group_code("Teaching", "Z", "C")
    with pytest.raises(GroupNotFoundError):
        registry.rename_group_code("Nope", "A", "C")
    assert registry.get("Teaching").code == "A"


def test_delete_group_blocked_while_referenced():
    registry = GroupRegistry([Group("Teaching", "A")])
    with pytest.raises(ReferentialIntegrityError, match="contains 2 standards"):
        registry.delete_group("Teaching", reference_count=2)
    assert registry.get("Teaching") is not None
    registry.delete_group("Teaching")
    assert len(registry) == 0


def test_group_from_dict_defaults():
    group = Group.from_dict({"name": "Teaching", "code": "A"})
    assert group.color == "#ffffff"
    assert group.description == ""
    assert group.collapsed is False
    assert Group.from_dict(group.to_dict()) == group


def test_sorted_by_code():
    registry = GroupRegistry([Group("Z group", "Z"), Group("A group", "A")])
    assert [g.code for g in registry.sorted_by_code()] == ["A", "Z"]
