"""Tests for the key-value stores the catalogue persists through."""

import pytest

from standards_tracker.catalogue import Catalogue
from standards_tracker.models import StoredValue, db
from standards_tracker.storage import (
    GROUPS_KEY,
    STAFF_KEY,
    STANDARDS_KEY,
    DatabaseStore,
    MemoryStore,
)


# ---------------------------------------------------------------------------
# MemoryStore
# ---------------------------------------------------------------------------


def test_memory_store_default_is_a_copy():
    store = MemoryStore()
    default = []
    loaded = store.load("missing", default)
    loaded.append("x")
    assert default == []
    assert store.load("missing") is None


def test_memory_store_does_not_alias_saved_values():
    store = MemoryStore()
    value = [{"code": "A.1"}]
    store.save(STANDARDS_KEY, value)
    value[0]["code"] = "Z.9"
    assert store.load(STANDARDS_KEY) == [{"code": "A.1"}]


def test_memory_store_save_many_and_delete():
    store = MemoryStore({GROUPS_KEY: []})
    saved = store.save_many({GROUPS_KEY: [{"name": "Teaching"}], STAFF_KEY: [{"id": "S1"}]})
    assert saved[STAFF_KEY] == [{"id": "S1"}]
    assert store.load(GROUPS_KEY) == [{"name": "Teaching"}]
    assert store.delete(GROUPS_KEY) is True
    assert store.delete(GROUPS_KEY) is False


def test_memory_store_save_many_is_all_or_nothing():
    store = MemoryStore({"a": 0})
    with pytest.raises(TypeError):
        store.save_many({"a": 1, "b": object()})
    assert store.load("a") == 0
    assert store.load("b") is None


# ---------------------------------------------------------------------------
# DatabaseStore
# ---------------------------------------------------------------------------


def test_database_store_round_trip(app):
    with app.app_context():
        store = DatabaseStore()
        assert store.load("missing", []) == []
        store.save("example", {"a": [1, 2]})
        assert store.load("example") == {"a": [1, 2]}
        store.save("example", {"a": [3]})
        assert store.load("example") == {"a": [3]}
        assert db.session.get(StoredValue, "example").value == {"a": [3]}
        assert store.delete("example") is True
        assert store.delete("example") is False


def test_database_store_save_many_commits_together(app):
    with app.app_context():
        store = DatabaseStore()
        store.save_many({"one": 1, "two": [2]})
        db.session.expire_all()
        assert store.load("one") == 1
        assert store.load("two") == [2]


def test_database_store_save_many_rolls_back_on_failure(app):
    with app.app_context():
        store = DatabaseStore()
        store.save("a", 0)
        with pytest.raises(TypeError):
            store.save_many({"a": 1, "b": object()})
        assert store.load("a") == 0
        assert store.load("b") is None


def test_catalogue_persists_through_database(app):
    with app.app_context():
        catalogue = Catalogue.load(DatabaseStore())
        catalogue.add_group("Teaching")
        catalogue.add_standard("Plan Lessons", group_name="Teaching")
        catalogue.add_standard("Set Objectives", parent_code="A.1")

        reloaded = Catalogue.load(DatabaseStore())
        assert reloaded.snapshot() == catalogue.snapshot()
        assert reloaded.get_standard("A.1").children == ["A.1.1"]
