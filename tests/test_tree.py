"""Tests for the standards forest: lookups, traversal and consistency checks."""

import logging

import pytest

from standards_tracker.errors import StandardNotFoundError
from standards_tracker.tree import Standard, StandardTree


def _forest():
    """Group T (letter A) with three levels, plus one ungrouped standard."""
    return StandardTree([
        Standard("A.1", "Plan", group="T", children=["A.1.1", "A.1.2"]),
        Standard("A.1.1", "Objectives", group="T", parent_code="A.1", children=["A.1.1.1"]),
        Standard("A.1.1.1", "SMART", group="T", parent_code="A.1.1"),
        Standard("A.1.2", "Resources", group="T", parent_code="A.1"),
        Standard("A.2", "Deliver", group="T"),
        Standard("Z.1", "Loose"),
    ])


# ---------------------------------------------------------------------------
# Standard
# ---------------------------------------------------------------------------


def test_level_is_derived_from_code():
    assert Standard("A.1").level == 1
    assert Standard("A.1.2").level == 2


def test_from_dict_ignores_stored_level():
    standard = Standard.from_dict({"code": "A.1", "level": 7, "group": "", "parent_code": ""})
    assert standard.level == 1
    assert standard.group is None
    assert standard.parent_code is None
    assert standard.to_dict()["level"] == 1


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def test_find_and_require():
    tree = _forest()
    assert tree.find_by_code("A.1.2").name == "Resources"
    assert tree.find_by_code("A.9") is None
    assert tree.find_by_code(None) is None
    with pytest.raises(StandardNotFoundError):
        tree.require("A.9")


def test_is_descendant_of():
    tree = _forest()
    assert tree.is_descendant_of("A.1", "A.1.1.1")
    assert tree.is_descendant_of("A.1.1", "A.1.1.1")
    assert not tree.is_descendant_of("A.1.1.1", "A.1")
    assert not tree.is_descendant_of("A.1", "A.1")
    assert not tree.is_descendant_of("A.2", "A.1.1")
    assert not tree.is_descendant_of("A.1", None)


def test_ancestors_nearest_first():
    assert _forest().ancestors_of("A.1.1.1") == ["A.1.1", "A.1"]


def test_top_level_of_group_and_ungrouped():
    tree = _forest()
    assert [s.code for s in tree.top_level_of("T")] == ["A.1", "A.2"]
    assert [s.code for s in tree.top_level_of(None)] == ["Z.1"]


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def test_descendants_depth_first():
    tree = _forest()
    codes = [s.code for s in tree.descendants_in_order(tree.require("A.1"))]
    assert codes == ["A.1.1", "A.1.1.1", "A.1.2"]


def test_descendants_sorted_numerically():
    tree = StandardTree([
        Standard("A.1", children=["A.1.10", "A.1.9"]),
        Standard("A.1.10", parent_code="A.1"),
        Standard("A.1.9", parent_code="A.1"),
    ])
    codes = [s.code for s in tree.descendants_in_order(tree.require("A.1"))]
    assert codes == ["A.1.9", "A.1.10"]


def test_descendants_follow_parent_links_when_cache_is_stale(caplog):
    """A child missing from its parent's children list is still found and logged."""
    tree = StandardTree([
        Standard("A.1", group="T"),
        Standard("A.1.1", group="T", parent_code="A.1"),
    ])
    with caplog.at_level(logging.WARNING):
        codes = [s.code for s in tree.descendants_in_order(tree.require("A.1"))]
    assert codes == ["A.1.1"]
    assert "stale" in caplog.text


def test_flatten_and_subtree():
    tree = _forest()
    assert [s.code for s in tree.flatten("T")] == ["A.1", "A.1.1", "A.1.1.1", "A.1.2", "A.2"]
    assert tree.subtree_codes("A.1.1") == ["A.1.1", "A.1.1.1"]
    assert tree.max_depth() == 2


# ---------------------------------------------------------------------------
# Consistency
# ---------------------------------------------------------------------------


def test_rebuild_children_repairs_cache():
    """Dangling entries are dropped, valid ones keep their order, missing ones are appended."""
    tree = StandardTree([
        Standard("A.1", children=["A.1.9", "A.1.2"]),
        Standard("A.1.1", parent_code="A.1"),
        Standard("A.1.2", parent_code="A.1"),
    ])
    assert tree.rebuild_children() == 1
    assert tree.require("A.1").children == ["A.1.2", "A.1.1"]
    assert tree.rebuild_children() == 0
    assert tree.check_integrity() == []


def test_check_integrity_clean_forest():
    assert _forest().check_integrity({"T": "A"}) == []


def test_check_integrity_reports_group_prefix():
    problems = _forest().check_integrity({"T": "B"})
    assert any("A.1 does not start with group code B" in p for p in problems)
    assert any("A.2 does not start with group code B" in p for p in problems)


def test_check_integrity_reports_missing_parent_and_mixed_groups():
    tree = StandardTree([
        Standard("A.1", group="T", children=["A.1.1"]),
        Standard("A.1.1", group="Other", parent_code="A.1"),
        Standard("A.3.1", group="T", parent_code="A.3"),
    ])
    problems = tree.check_integrity()
    assert any("missing parent A.3" in p for p in problems)
    assert any("A.1.1 has group 'Other'" in p for p in problems)


def test_corrupted_cycle_does_not_hang():
    tree = StandardTree([
        Standard("X.1", parent_code="X.1.1", children=["X.1.1"]),
        Standard("X.1.1", parent_code="X.1", children=["X.1"]),
    ])
    assert not tree.is_descendant_of("Q.1", "X.1")
    assert len(tree.ancestors_of("X.1")) == 1
    assert any("own ancestor" in p for p in tree.check_integrity())
