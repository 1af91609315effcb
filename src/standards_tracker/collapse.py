"""Collapsed-standard state for hierarchical displays.

The set is keyed by standard code.  Codes are rewritten when standards move,
so every cascade must pass its code mapping to ``remap``; otherwise the state
would attach to whichever standard later receives the old code.
"""

from standards_tracker.codes import code_sort_key


class CollapseState:
    def __init__(self, codes=None):
        self._codes: set[str] = {c for c in (codes or []) if c}

    def __contains__(self, code):
        return code in self._codes

    def __iter__(self):
        return iter(self.to_list())

    def __len__(self):
        return len(self._codes)

    def is_collapsed(self, code) -> bool:
        return code in self._codes

    def collapse(self, code):
        self._codes.add(code)

    def expand(self, code):
        self._codes.discard(code)

    def toggle(self, code) -> bool:
        """Flip *code*'s state and return True if it is now collapsed."""
        if code in self._codes:
            self._codes.discard(code)
            return False
        self._codes.add(code)
        return True

    def discard_many(self, codes):
        self._codes.difference_update(codes)

    def remap(self, mapping: dict) -> int:
        """Rewrite entries through an old-code → new-code *mapping*; return how many moved."""
        moved = {c for c in self._codes if mapping.get(c, c) != c}
        self._codes = {mapping.get(c, c) for c in self._codes}
        return len(moved)

    def is_hidden(self, code, tree) -> bool:
        """Return True if any ancestor of *code* is collapsed."""
        return any(a in self._codes for a in tree.ancestors_of(code))

    def ensure_ancestors_expanded(self, code, tree) -> list[str]:
        """Expand every collapsed ancestor of *code* so it becomes visible.

        Returns the codes that were expanded, nearest ancestor first.
        """
        expanded = [a for a in tree.ancestors_of(code) if a in self._codes]
        self._codes.difference_update(expanded)
        return expanded

    def to_list(self) -> list[str]:
        return sorted(self._codes, key=code_sort_key)
