"""Tests for collapse state on its own, independent of the catalogue."""

from standards_tracker.codes import replace_prefix
from standards_tracker.collapse import CollapseState
from standards_tracker.tree import Standard, StandardTree


def _tree():
    return StandardTree([
        Standard("A.1", children=["A.1.1"]),
        Standard("A.1.1", parent_code="A.1", children=["A.1.1.1"]),
        Standard("A.1.1.1", parent_code="A.1.1"),
        Standard("A.10"),
    ])


def test_toggle_round_trip():
    state = CollapseState()
    assert state.toggle("A.1") is True
    assert "A.1" in state
    assert state.toggle("A.1") is False
    assert len(state) == 0


def test_listing_is_sorted_numerically():
    state = CollapseState(["A.10", "A.9", "A.1.1", ""])
    assert state.to_list() == ["A.1.1", "A.9", "A.10"]
    assert list(state) == state.to_list()


def test_remap_moves_subtree_entries_only():
    state = CollapseState(["A.1", "A.1.1", "A.10"])
    mapping = {c: replace_prefix(c, "A.1", "B.2") for c in ("A.1", "A.1.1", "A.10")}
    assert state.remap(mapping) == 2
    assert state.to_list() == ["A.10", "B.2", "B.2.1"]


def test_remap_ignores_unmapped_codes():
    state = CollapseState(["A.1", "C.4"])
    assert state.remap({"A.1": "B.1", "A.1.1": "B.1.1"}) == 1
    assert state.to_list() == ["B.1", "C.4"]


def test_hidden_when_any_ancestor_collapsed():
    tree = _tree()
    state = CollapseState(["A.1"])
    assert state.is_hidden("A.1.1.1", tree)
    assert state.is_hidden("A.1.1", tree)
    assert not state.is_hidden("A.1", tree)
    assert not state.is_hidden("A.10", tree)


def test_ensure_ancestors_expanded_leaves_node_itself():
    tree = _tree()
    state = CollapseState(["A.1", "A.1.1", "A.1.1.1"])
    assert state.ensure_ancestors_expanded("A.1.1.1", tree) == ["A.1.1", "A.1"]
    assert state.to_list() == ["A.1.1.1"]
