"""Tests for the staff registry on its own, independent of the catalogue."""

import pytest

from standards_tracker.errors import (
    DuplicateStaffError,
    MissingRequiredFieldError,
    StaffNotFoundError,
)
from standards_tracker.staff import StaffMember, StaffRegistry


def test_add_applies_profile_defaults():
    registry = StaffRegistry()
    member = registry.add(" T001 ", " Sarah Johnson ", phase="Primary", department="")
    assert (member.id, member.name) == ("T001", "Sarah Johnson")
    assert member.phase == "Primary"
    assert member.year_group == "Reception"
    assert member.department == "Outclass"


def test_add_rejections_leave_registry_unchanged():
    registry = StaffRegistry([StaffMember("T001", "Sarah Johnson")])
    with pytest.raises(MissingRequiredFieldError, match="Staff ID is required"):
        registry.add("", "Nobody")
    with pytest.raises(MissingRequiredFieldError, match="Staff name is required"):
        registry.add("T002", "  ")
    with pytest.raises(DuplicateStaffError):
        registry.add("T001", "Someone Else")
    with pytest.raises(MissingRequiredFieldError, match="must be a string"):
        registry.add("T002", "Emma", year_group=3)
    assert registry.to_list() == [StaffMember("T001", "Sarah Johnson").to_dict()]


def test_edit_validates_before_changing_anything():
    registry = StaffRegistry([StaffMember("T001", "Sarah"), StaffMember("T002", "Emma")])
    with pytest.raises(DuplicateStaffError):
        registry.edit("T001", new_id="T002", name="Changed")
    with pytest.raises(MissingRequiredFieldError):
        registry.edit("T001", name="", phase="Secondary")
    assert registry.get("T001") == StaffMember("T001", "Sarah")

    member = registry.edit("T001", new_id="T010", overseas_thai="Thai")
    assert (member.id, member.name, member.overseas_thai) == ("T010", "Sarah", "Thai")
    assert registry.get("T001") is None


def test_delete_and_require():
    registry = StaffRegistry([StaffMember("T001", "Sarah")])
    registry.delete("T001")
    assert len(registry) == 0
    with pytest.raises(StaffNotFoundError, match="T001"):
        registry.require("T001")


def test_from_dict_fills_missing_fields():
    member = StaffMember.from_dict({"id": 7, "name": "Somchai", "phase": None})
    assert member == StaffMember("7", "Somchai")
