"""The standards forest: nodes, parent/child links and structural queries.

``parent_code`` is the source of truth for the hierarchy.  Each node also keeps
an ordered ``children`` list for traversal convenience; ``rebuild_children`` is
the one place that re-derives that cache from the back-references.
"""

import logging
from dataclasses import dataclass, field

from standards_tracker.codes import (
    code_sort_key,
    group_letter_of,
    is_valid_code,
    level_of,
)
from standards_tracker.errors import StandardNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class Standard:
    """A single competency node in the classification forest."""

    code: str
    name: str = ""
    description: str = ""
    group: str | None = None  # group name, None when ungrouped
    parent_code: str | None = None  # None for a top-level standard
    children: list[str] = field(default_factory=list)

    @property
    def level(self) -> int:
        """Hierarchy depth, always derived from the code."""
        return level_of(self.code)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "group": self.group,
            "parent_code": self.parent_code,
            "children": list(self.children),
            "level": self.level,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Standard":
        # Stored level is ignored; it is recomputed from the code.
        return cls(
            code=data.get("code") or "",
            name=data.get("name") or "",
            description=data.get("description") or "",
            group=data.get("group") or None,
            parent_code=data.get("parent_code") or None,
            children=[c for c in (data.get("children") or []) if c],
        )


class StandardTree:
    """Indexed collection of standards with read-only structural queries.

    The mutating helpers (``insert``, ``remove``, ``reindex``) are used by the
    catalogue, which validates every change before calling them.
    """

    def __init__(self, standards=None):
        self._standards: list[Standard] = list(standards or [])
        self._by_code: dict[str, Standard] = {}
        self._by_parent: dict[str | None, list[Standard]] = {}
        self.reindex()

    def __iter__(self):
        return iter(self._standards)

    def __len__(self):
        return len(self._standards)

    def __contains__(self, code):
        return code in self._by_code

    @property
    def standards(self) -> list[Standard]:
        return list(self._standards)

    def codes(self) -> set[str]:
        return set(self._by_code)

    def reindex(self):
        """Rebuild the code and parent lookups after a structural change."""
        self._by_code = {s.code: s for s in self._standards}
        by_parent: dict[str | None, list[Standard]] = {}
        for s in self._standards:
            by_parent.setdefault(s.parent_code, []).append(s)
        for siblings in by_parent.values():
            siblings.sort(key=lambda s: code_sort_key(s.code))
        self._by_parent = by_parent

    def insert(self, standard: Standard):
        self._standards.append(standard)
        self.reindex()

    def remove(self, code: str) -> Standard:
        standard = self.require(code)
        self._standards.remove(standard)
        self.reindex()
        return standard

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_by_code(self, code) -> Standard | None:
        if not code:
            return None
        return self._by_code.get(code)

    def require(self, code) -> Standard:
        standard = self.find_by_code(code)
        if standard is None:
            raise StandardNotFoundError(code)
        return standard

    def children_of(self, code: str) -> list[Standard]:
        """Live children of *code*, derived from ``parent_code`` and sorted by code."""
        return list(self._by_parent.get(code, []))

    def ancestors_of(self, code: str) -> list[str]:
        """Codes of *code*'s ancestors, nearest first.

        The walk is iterative and stops after as many hops as there are
        standards, so a corrupted ``parent_code`` loop cannot hang it.
        """
        ancestors = []
        seen = {code}
        current = self.find_by_code(code)
        hops = 0
        while current is not None and current.parent_code and hops <= len(self._standards):
            parent_code = current.parent_code
            if parent_code in seen:
                logger.warning("Cycle detected in parent links at %s", parent_code)
                break
            ancestors.append(parent_code)
            seen.add(parent_code)
            current = self.find_by_code(parent_code)
            hops += 1
        return ancestors

    def is_descendant_of(self, candidate_ancestor_code, node_code) -> bool:
        """Return True if *candidate_ancestor_code* lies on *node_code*'s parent chain."""
        if not candidate_ancestor_code or not node_code:
            return False
        return candidate_ancestor_code in self.ancestors_of(node_code)

    def top_level_of(self, group=None) -> list[Standard]:
        """Top-level standards of *group*, or the ungrouped ones when *group* is None."""
        return [
            s for s in self._by_parent.get(None, [])
            if (s.group == group if group else not s.group)
        ]

    def descendants_in_order(self, standard: Standard) -> list[Standard]:
        """Strict descendants of *standard*, depth-first with children sorted by code.

        Membership comes from the live ``parent_code`` links.  A ``children``
        cache that disagrees is logged and ignored rather than trusted.
        """
        result = []
        visited = {standard.code}
        stack = [standard]
        while stack:
            node = stack.pop()
            live = self.children_of(node.code)
            if set(node.children) != {c.code for c in live}:
                logger.warning(
                    "Children cache for %s is stale (cached=%s, live=%s)",
                    node.code, node.children, [c.code for c in live],
                )
            if node is not standard:
                result.append(node)
            for child in reversed(live):
                if child.code in visited:
                    logger.warning("Skipping %s: already visited under %s", child.code, node.code)
                    continue
                visited.add(child.code)
                stack.append(child)
        return result

    def flatten(self, group=None) -> list[Standard]:
        """Hierarchical listing of a group: each top-level standard then its descendants."""
        result = []
        for top in self.top_level_of(group):
            result.append(top)
            result.extend(self.descendants_in_order(top))
        return result

    def subtree_codes(self, code: str) -> list[str]:
        """*code* followed by the codes of all its descendants."""
        standard = self.require(code)
        return [code] + [s.code for s in self.descendants_in_order(standard)]

    def max_depth(self) -> int:
        return max((len(self.ancestors_of(s.code)) for s in self._standards), default=0)

    def _on_cycle(self, code: str) -> bool:
        """Return True if following parent links from *code* leads back to *code*."""
        seen = set()
        current = self.find_by_code(code)
        while current is not None and current.parent_code:
            if current.parent_code == code:
                return True
            if current.parent_code in seen:
                return False
            seen.add(current.parent_code)
            current = self.find_by_code(current.parent_code)
        return False

    # ------------------------------------------------------------------
    # Consistency
    # ------------------------------------------------------------------

    def rebuild_children(self) -> int:
        """Re-derive every ``children`` cache from ``parent_code``.

        Still-valid entries keep their order; missing ones are appended in code
        order.  Returns the number of nodes whose cache changed.
        """
        repaired = 0
        for s in self._standards:
            live = [c.code for c in self.children_of(s.code)]
            live_set = set(live)
            rebuilt = [c for c in dict.fromkeys(s.children) if c in live_set]
            rebuilt += [c for c in live if c not in rebuilt]
            if rebuilt != s.children:
                logger.warning("Rebuilt children of %s: %s -> %s", s.code, s.children, rebuilt)
                s.children = rebuilt
                repaired += 1
        return repaired

    def check_integrity(self, groups=None) -> list[str]:
        """Return a description of every violated structural invariant.

        *groups* maps group name to letter; when given, group references and
        top-level prefixes are checked too.
        """
        problems = []
        seen = set()
        for s in self._standards:
            if s.code in seen:
                problems.append(f"Duplicate code {s.code}")
            seen.add(s.code)
            if not is_valid_code(s.code):
                problems.append(f"Malformed code {s.code!r}")

        for s in self._standards:
            if s.parent_code:
                parent = self.find_by_code(s.parent_code)
                if parent is None:
                    problems.append(f"{s.code} references missing parent {s.parent_code}")
                elif parent.group != s.group:
                    problems.append(
                        f"{s.code} has group {s.group!r} but its parent has {parent.group!r}"
                    )
                if not s.code.startswith(s.parent_code + "."):
                    problems.append(f"{s.code} does not start with parent code {s.parent_code}.")
                if self._on_cycle(s.code):
                    problems.append(f"{s.code} is its own ancestor")
            elif groups is not None and s.group:
                letter = groups.get(s.group)
                if letter is None:
                    problems.append(f"{s.code} references missing group {s.group}")
                elif group_letter_of(s.code) != letter:
                    problems.append(f"{s.code} does not start with group code {letter}")

            live = {c.code for c in self.children_of(s.code)}
            if set(s.children) != live or len(s.children) != len(live):
                problems.append(f"Children of {s.code} {s.children} do not match {sorted(live)}")
        return problems

    def to_list(self) -> list[dict]:
        return [s.to_dict() for s in self._standards]
