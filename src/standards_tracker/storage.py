"""Key-value persistence for catalogue data.

The catalogue only needs ``load(key, default)``, ``save(key, value)``,
``save_many(values)`` and ``delete(key)``.  ``DatabaseStore`` keeps values in
the ``stored_value`` table and must be used inside a Flask application
context; ``MemoryStore`` keeps JSON-encoded copies in a dict.
"""

import copy
import json
import logging

from standards_tracker.models import StoredValue, db

logger = logging.getLogger(__name__)

STANDARDS_KEY = "standards"
GROUPS_KEY = "groups"
COLLAPSED_KEY = "collapsed_standards"
ASSIGNMENTS_KEY = "assignments"
STAFF_KEY = "staff"


class MemoryStore:
    """In-process store.  Values are JSON round-tripped so callers never share state."""

    def __init__(self, initial=None):
        self._data: dict[str, str] = {}
        if initial:
            self.save_many(initial)

    def load(self, key: str, default=None):
        logger.debug("Loading data for key: %s", key)
        raw = self._data.get(key)
        if raw is None:
            return copy.deepcopy(default)
        return json.loads(raw)

    def save(self, key: str, value):
        return self.save_many({key: value})[key]

    def save_many(self, values: dict) -> dict:
        """Store every key or none of them."""
        logger.debug("Saving data for keys: %s", ", ".join(values))
        encoded = {key: json.dumps(value) for key, value in values.items()}
        self._data.update(encoded)
        return values

    def delete(self, key: str) -> bool:
        logger.debug("Deleting data for key: %s", key)
        return self._data.pop(key, None) is not None


class DatabaseStore:
    """Store backed by the ``StoredValue`` table."""

    def load(self, key: str, default=None):
        logger.debug("Loading data for key: %s", key)
        row = db.session.get(StoredValue, key)
        if row is None or row.value is None:
            return copy.deepcopy(default)
        return row.value

    def save(self, key: str, value):
        return self.save_many({key: value})[key]

    def save_many(self, values: dict) -> dict:
        """Upsert every key in one commit; on failure nothing is written."""
        logger.debug("Saving data for keys: %s", ", ".join(values))
        try:
            for key, value in values.items():
                row = db.session.get(StoredValue, key)
                if row is None:
                    row = StoredValue(key=key)
                    db.session.add(row)
                # Round-trip so the row never aliases the caller's live objects
                row.value = json.loads(json.dumps(value))
            db.session.commit()
        except Exception as exc:
            db.session.rollback()
            logger.error("Save failed for keys %s: %s", ", ".join(values), exc)
            raise
        return values

    def delete(self, key: str) -> bool:
        logger.debug("Deleting data for key: %s", key)
        row = db.session.get(StoredValue, key)
        if row is None:
            return False
        db.session.delete(row)
        db.session.commit()
        return True
