"""The standards catalogue: the only writer of standards, groups and collapse state.

Every mutation validates its whole plan first (required fields, grammar,
cycles, and a collision check for every code a cascade would produce) and only
then touches state, so a rejected operation leaves nothing behind.  Successful
mutations are saved through the store.
"""

import logging
from dataclasses import replace

from standards_tracker.assignments import Assignment, AssignmentBook
from standards_tracker.codes import (
    clean_text,
    generate_new_code,
    group_letter_of,
    has_children,
    is_valid_code,
    level_of,
    replace_prefix,
)
from standards_tracker.collapse import CollapseState
from standards_tracker.errors import (
    CycleError,
    DuplicateCodeError,
    MalformedCodeError,
    MissingRequiredFieldError,
    ReferentialIntegrityError,
)
from standards_tracker.groups import Group, GroupRegistry
from standards_tracker.staff import StaffMember, StaffRegistry
from standards_tracker.storage import (
    ASSIGNMENTS_KEY,
    COLLAPSED_KEY,
    GROUPS_KEY,
    STAFF_KEY,
    STANDARDS_KEY,
)
from standards_tracker.tree import Standard, StandardTree

logger = logging.getLogger(__name__)

_UNSET = object()


def _copy_standard(standard: Standard) -> Standard:
    return replace(standard, children=list(standard.children))


class Catalogue:
    """Owns the standards tree, the group registry, the collapse set and staff records.

    Read methods return copies; all changes go through the mutation methods.
    """

    def __init__(self, store, standards=None, groups=None, collapsed=None, assignments=None,
                 staff=None):
        self._store = store
        self._tree = StandardTree(standards)
        self._groups = GroupRegistry(groups)
        self._collapsed = CollapseState(collapsed)
        self._assignments = AssignmentBook(assignments)
        self._staff = StaffRegistry(staff)

    @classmethod
    def load(cls, store) -> "Catalogue":
        """Hydrate a catalogue from *store*, repairing stale ``children`` caches."""
        catalogue = cls(
            store,
            standards=[Standard.from_dict(d) for d in store.load(STANDARDS_KEY, []) if d],
            groups=[Group.from_dict(d) for d in store.load(GROUPS_KEY, []) if d],
            collapsed=store.load(COLLAPSED_KEY, []),
            assignments=[Assignment.from_dict(d) for d in store.load(ASSIGNMENTS_KEY, []) if d],
            staff=[StaffMember.from_dict(d) for d in store.load(STAFF_KEY, []) if d],
        )
        repaired = catalogue._tree.rebuild_children()
        stale = [c for c in catalogue._collapsed if c not in catalogue._tree]
        if stale:
            logger.warning("Dropping collapse state for unknown standards: %s", stale)
            catalogue._collapsed.discard_many(stale)
        for problem in catalogue.check_integrity():
            logger.warning("Catalogue integrity: %s", problem)
        logger.info(
            "Loaded catalogue: standards=%d groups=%d collapsed=%d staff=%d assignments=%d repaired=%d",
            len(catalogue._tree), len(catalogue._groups), len(catalogue._collapsed),
            len(catalogue._staff), len(catalogue._assignments), repaired,
        )
        return catalogue

    def save(self):
        """Persist every key in one batch so a failed write leaves the old state."""
        self._store.save_many({
            STANDARDS_KEY: self._tree.to_list(),
            GROUPS_KEY: self._groups.to_list(),
            COLLAPSED_KEY: self._collapsed.to_list(),
            STAFF_KEY: self._staff.to_list(),
            ASSIGNMENTS_KEY: self._assignments.to_list(),
        })

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def standards(self) -> list[Standard]:
        return [_copy_standard(s) for s in self._tree]

    def groups(self) -> list[Group]:
        return [replace(g) for g in self._groups.sorted_by_code()]

    def get_standard(self, code) -> Standard:
        return _copy_standard(self._tree.require(code))

    def find_by_code(self, code) -> Standard | None:
        standard = self._tree.find_by_code(code)
        return _copy_standard(standard) if standard else None

    def get_group(self, name) -> Group:
        return replace(self._groups.require(name))

    def collapsed(self) -> list[str]:
        return self._collapsed.to_list()

    def is_collapsed(self, code) -> bool:
        return self._collapsed.is_collapsed(code)

    def is_hidden(self, code) -> bool:
        return self._collapsed.is_hidden(code, self._tree)

    def is_descendant_of(self, candidate_ancestor_code, node_code) -> bool:
        return self._tree.is_descendant_of(candidate_ancestor_code, node_code)

    def top_level_of(self, group=None) -> list[Standard]:
        return [_copy_standard(s) for s in self._tree.top_level_of(group)]

    def descendants_in_order(self, code) -> list[Standard]:
        standard = self._tree.require(code)
        return [_copy_standard(s) for s in self._tree.descendants_in_order(standard)]

    def count_standards(self, group_name) -> int:
        return sum(1 for s in self._tree if s.group == group_name)

    def max_depth(self) -> int:
        return self._tree.max_depth()

    def suggest_code(self, parent_code=None, group_name=None) -> str:
        """Code a new standard would receive under *parent_code* or in *group_name*."""
        if parent_code:
            self._tree.require(parent_code)
            return generate_new_code(self._tree, parent_code, None)
        if group_name:
            return generate_new_code(self._tree, None, self._groups.require(group_name).code)
        return ""

    def outline(self, group=None) -> list[dict]:
        """Flattened hierarchy of a group with display state for each row."""
        rows = []
        for s in self._tree.flatten(group):
            rows.append({
                **s.to_dict(),
                "depth": len(self._tree.ancestors_of(s.code)),
                "has_children": has_children(s),
                "collapsed": self._collapsed.is_collapsed(s.code),
                "hidden": self._collapsed.is_hidden(s.code, self._tree),
            })
        return rows

    def staff(self) -> list[StaffMember]:
        return [replace(m) for m in sorted(self._staff, key=lambda m: m.id)]

    def get_staff(self, staff_id) -> StaffMember:
        return replace(self._staff.require(staff_id))

    def assignments(self) -> list[Assignment]:
        return [replace(a) for a in self._assignments]

    def assignments_for_standard(self, code) -> list[Assignment]:
        self._tree.require(code)
        return [replace(a) for a in self._assignments.for_standard(code)]

    def check_integrity(self) -> list[str]:
        return self._tree.check_integrity({g.name: g.code for g in self._groups})

    def snapshot(self) -> dict:
        return {
            "standards": self._tree.to_list(),
            "groups": [g.to_dict() for g in self._groups.sorted_by_code()],
            "collapsed": self._collapsed.to_list(),
            "staff": self._staff.to_list(),
            "assignments": self._assignments.to_list(),
        }

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _validate_explicit_code(self, code, parent_code=None, group_name=None):
        """Check a caller-supplied code against the grammar and its position."""
        if not is_valid_code(code):
            raise MalformedCodeError(
                "Standard code must follow the pattern: Letter.Number or Parent.Number "
                "(example: A.1 or A.1.2)"
            )
        if parent_code:
            if not code.startswith(parent_code + ".") or level_of(code) != level_of(parent_code) + 1:
                raise MalformedCodeError(
                    f"Child standard code must be {parent_code}.<number>"
                )
            return
        if level_of(code) != 1:
            raise MalformedCodeError(
                "Top-level standard code must be Letter.Number (example: A.1)"
            )
        if group_name:
            letter = self._groups.require(group_name).code
            if group_letter_of(code) != letter:
                raise MalformedCodeError(
                    f"Top-level standard code must start with group code ({letter})"
                )

    def _check_no_cycle(self, code, new_parent_code):
        if new_parent_code == code or self._tree.is_descendant_of(code, new_parent_code):
            raise CycleError(code, new_parent_code)

    def _plan_relocation(self, standard: Standard, new_code: str) -> dict:
        """Map every code in *standard*'s subtree to its code under *new_code*.

        Raises DuplicateCodeError if any rewritten code is already taken by a
        standard outside the subtree.
        """
        old_code = standard.code
        subtree = [
            s.code for s in self._tree
            if s.code == old_code or s.code.startswith(old_code + ".")
        ]
        mapping = {c: replace_prefix(c, old_code, new_code) for c in subtree}
        others = self._tree.codes() - set(subtree)
        for new in mapping.values():
            if new in others:
                raise DuplicateCodeError(new)
        return mapping

    # ------------------------------------------------------------------
    # Structural primitives (called only after validation)
    # ------------------------------------------------------------------

    def _apply_mapping(self, mapping: dict):
        """Rewrite codes, parent links, children caches and code-keyed state."""
        if all(old == new for old, new in mapping.items()):
            return
        for s in self._tree:
            if s.code in mapping:
                s.code = mapping[s.code]
            if s.parent_code in mapping:
                s.parent_code = mapping[s.parent_code]
            s.children = [mapping.get(c, c) for c in s.children]
        self._collapsed.remap(mapping)
        self._assignments.remap(mapping)
        self._tree.reindex()
        for old, new in mapping.items():
            if old != new:
                logger.info("Updating code: %s -> %s", old, new)

    def _relocate(self, standard: Standard, mapping: dict, new_parent_code, new_group):
        """Detach, recode, regroup and re-attach *standard* with its whole subtree."""
        old_code = standard.code
        new_code = mapping[old_code]

        old_parent = self._tree.find_by_code(standard.parent_code)
        if old_parent is not None:
            old_parent.children = [c for c in old_parent.children if c != old_code]

        subtree_codes = set(mapping.values())
        self._apply_mapping(mapping)

        standard.parent_code = new_parent_code or None
        for s in self._tree:
            if s.code in subtree_codes:
                s.group = new_group or None

        new_parent = self._tree.find_by_code(new_parent_code)
        if new_parent is not None and new_code not in new_parent.children:
            new_parent.children.append(new_code)
        self._tree.reindex()

    def _remove(self, code):
        standard = self._tree.require(code)
        parent = self._tree.find_by_code(standard.parent_code)
        if parent is not None:
            parent.children = [c for c in parent.children if c != code]
        self._tree.remove(code)
        self._collapsed.expand(code)
        self._assignments.discard_standards([code])

    # ------------------------------------------------------------------
    # Standard mutations
    # ------------------------------------------------------------------

    def add_standard(self, name, description="", parent_code=None, group_name=None, code=None) -> Standard:
        """Create a standard under *parent_code*, or top-level in *group_name*.

        A parent takes precedence and supplies the group.  Without either, an
        explicit *code* is required and the standard is ungrouped.
        """
        name = clean_text(name, "Standard name")
        code = clean_text(code, "Standard code", MalformedCodeError) or None
        description = clean_text(description, "Standard description")
        parent_code = clean_text(parent_code, "Parent code", MalformedCodeError) or None
        group_name = clean_text(group_name, "Group name") or None
        if not name:
            raise MissingRequiredFieldError("Standard name is required")

        if parent_code:
            parent = self._tree.require(parent_code)
            group = parent.group
            if code:
                self._validate_explicit_code(code, parent_code=parent_code)
            else:
                code = generate_new_code(self._tree, parent_code, None)
        elif group_name:
            group_obj = self._groups.require(group_name)
            group = group_obj.name
            if code:
                self._validate_explicit_code(code, group_name=group)
            else:
                code = generate_new_code(self._tree, None, group_obj.code)
        elif code:
            parent, group = None, None
            self._validate_explicit_code(code)
        else:
            raise MissingRequiredFieldError(
                "Standard code is required. Please select a group or parent standard."
            )

        if code in self._tree:
            raise DuplicateCodeError(code)

        standard = Standard(
            code=code,
            name=name,
            description=description,
            group=group,
            parent_code=parent_code,
        )
        self._tree.insert(standard)
        if parent_code:
            parent.children.append(code)
        self.save()
        logger.info("Added new standard %s", code)
        return _copy_standard(standard)

    def edit_standard(self, code, *, name=_UNSET, description=_UNSET, group=_UNSET,
                      parent_code=_UNSET, new_code=_UNSET) -> Standard:
        """Update fields of a standard, moving and recoding it when required.

        Setting a parent forces the parent's group.  Changing the parent
        regenerates the code under it; regrouping a top-level standard
        regenerates the code under the new letter; an explicit *new_code*
        is validated instead.  Descendants follow any code change.
        """
        standard = self._tree.require(code)

        if name is not _UNSET:
            name = clean_text(name, "Standard name")
            if not name:
                raise MissingRequiredFieldError("Standard name is required")
        if description is not _UNSET:
            description = clean_text(description, "Standard description")
        if parent_code is not _UNSET:
            parent_code = clean_text(parent_code, "Parent code", MalformedCodeError) or None
        if group is not _UNSET:
            group = clean_text(group, "Group name") or None

        target_parent = standard.parent_code if parent_code is _UNSET else parent_code
        parent_changed = target_parent != standard.parent_code
        if target_parent:
            parent = self._tree.require(target_parent)
            self._check_no_cycle(code, target_parent)
            target_group = parent.group
        else:
            target_group = standard.group if group is _UNSET else group
            if target_group:
                self._groups.require(target_group)

        explicit = clean_text(new_code, "Standard code", MalformedCodeError) if new_code is not _UNSET else ""
        if explicit and explicit != code:
            self._validate_explicit_code(explicit, target_parent, target_group)
            target_code = explicit
        elif target_parent:
            target_code = (
                generate_new_code(self._tree, target_parent, None) if parent_changed else code
            )
        elif target_group:
            letter = self._groups.require(target_group).code
            if parent_changed or group_letter_of(code) != letter:
                target_code = generate_new_code(self._tree, None, letter)
            else:
                target_code = code
        elif parent_changed:
            raise MissingRequiredFieldError(
                "Standard code is required for an ungrouped top-level standard"
            )
        else:
            target_code = code

        mapping = self._plan_relocation(standard, target_code)

        if name is not _UNSET:
            standard.name = name
        if description is not _UNSET:
            standard.description = description
        if parent_changed or target_code != code or target_group != standard.group:
            self._relocate(standard, mapping, target_parent, target_group)
        self.save()
        logger.info("Updated standard %s", standard.code)
        return _copy_standard(standard)

    def delete_standard(self, code):
        """Delete a leaf standard.  Standards with children need the cascade variant."""
        standard = self._tree.require(code)
        children = self._tree.children_of(code)
        if children or has_children(standard):
            count = max(len(children), len(standard.children))
            raise ReferentialIntegrityError(
                f"Standard {code} has {count} sub-standards. "
                "Delete it together with its sub-standards or move them first."
            )
        self._remove(code)
        self.save()
        logger.info("Deleted standard %s", code)

    def delete_standard_and_descendants(self, code) -> list[str]:
        """Delete a standard and its whole subtree, children before parents.

        Returns the deleted codes in deletion order.
        """
        order = list(reversed(self._tree.subtree_codes(code)))
        for c in order:
            self._remove(c)
        self.save()
        logger.info("Deleted standard %s and %d descendants", code, len(order) - 1)
        return order

    def move_standard_to_group(self, code, group_name) -> Standard:
        """Make a standard top-level in *group_name*, recoding its subtree."""
        group_name = clean_text(group_name, "Group name")
        standard = self._tree.require(code)
        group = self._groups.require(group_name)
        if standard.group == group.name and not standard.parent_code:
            return _copy_standard(standard)

        old_code = standard.code
        new_code = generate_new_code(self._tree, None, group.code)
        mapping = self._plan_relocation(standard, new_code)
        self._relocate(standard, mapping, None, group.name)
        self.save()
        logger.info("Moved standard %s to group %s as %s", old_code, group.name, standard.code)
        return _copy_standard(standard)

    def move_standard_to_parent(self, code, new_parent_code) -> Standard:
        """Make a standard a child of *new_parent_code*, recoding its subtree."""
        new_parent_code = clean_text(new_parent_code, "Parent code", MalformedCodeError)
        standard = self._tree.require(code)
        parent = self._tree.require(new_parent_code)
        self._check_no_cycle(code, new_parent_code)
        if standard.parent_code == new_parent_code:
            return _copy_standard(standard)

        old_code = standard.code
        new_code = generate_new_code(self._tree, new_parent_code, None)
        mapping = self._plan_relocation(standard, new_code)
        self._relocate(standard, mapping, new_parent_code, parent.group)
        self.save()
        logger.info("Moved standard %s under %s as %s", old_code, new_parent_code, standard.code)
        return _copy_standard(standard)

    # ------------------------------------------------------------------
    # Group mutations
    # ------------------------------------------------------------------

    def add_group(self, name, description="", color=None, code=None) -> Group:
        code = clean_text(code, "Group code", MalformedCodeError).upper() or None
        group = self._groups.add_group(
            name,
            description=clean_text(description, "Group description"),
            color=clean_text(color, "Group colour") or None,
            code=code,
        )
        self.save()
        return replace(group)

    def _plan_group_code_change(self, name, old_code, new_code) -> dict:
        self._groups.check_code_change(name, old_code, new_code)
        affected = [
            s.code for s in self._tree
            if s.group == name and s.code.startswith(old_code + ".")
        ]
        mapping = {c: new_code + c[len(old_code):] for c in affected}
        others = self._tree.codes() - set(affected)
        for new in mapping.values():
            if new in others:
                raise DuplicateCodeError(new)
        return mapping

    def rename_group_code(self, name, old_code, new_code) -> Group:
        """Change a group's letter and recode every standard of the group."""
        new_code = clean_text(new_code, "Group code", MalformedCodeError).upper()
        mapping = self._plan_group_code_change(name, old_code, new_code)
        group = self._groups.rename_group_code(name, old_code, new_code)
        self._apply_mapping(mapping)
        self.save()
        logger.info("Updated standard codes for group %s: %s -> %s", name, old_code, new_code)
        return replace(group)

    def edit_group(self, name, *, new_name=None, code=None, description=None, color=None) -> Group:
        """Update a group's name, letter, description or colour."""
        group = self._groups.require(name)
        new_name = clean_text(new_name, "Group name") or name
        code = clean_text(code, "Group code", MalformedCodeError).upper() or group.code
        if description is not None:
            description = clean_text(description, "Group description")
        if color is not None:
            color = clean_text(color, "Group colour")

        self._groups.check_rename(name, new_name)
        mapping = self._plan_group_code_change(name, group.code, code)

        if code != group.code:
            self._groups.rename_group_code(name, group.code, code)
            self._apply_mapping(mapping)
        if new_name != name:
            self._groups.rename_group(name, new_name)
            for s in self._tree:
                if s.group == name:
                    s.group = new_name
        if description is not None:
            group.description = description
        if color is not None:
            group.color = color
        self.save()
        logger.info("Updated group: %s (%s)", group.name, group.code)
        return replace(group)

    def delete_group(self, name):
        """Delete a group; rejected while any standard still references it."""
        self._groups.delete_group(name, reference_count=self.count_standards(name))
        self.save()

    def toggle_group_collapsed(self, name) -> bool:
        group = self._groups.require(name)
        group.collapsed = not group.collapsed
        self.save()
        logger.info("%s group %s", "Collapsed" if group.collapsed else "Expanded", name)
        return group.collapsed

    # ------------------------------------------------------------------
    # Collapse state and assignments
    # ------------------------------------------------------------------

    def toggle_collapsed(self, code) -> bool:
        """Collapse or expand a standard; returns True if it is now collapsed.

        Collapsing also collapses every descendant that has children, so they
        stay folded when the parent is expanded again.
        """
        standard = self._tree.require(code)
        collapsed = self._collapsed.toggle(code)
        if collapsed:
            for s in self._tree.descendants_in_order(standard):
                if self._tree.children_of(s.code):
                    self._collapsed.collapse(s.code)
        self.save()
        logger.info("%s standard %s", "Collapsed" if collapsed else "Expanded", code)
        return collapsed

    def reveal(self, code) -> list[str]:
        """Expand every collapsed ancestor of *code*; returns the expanded codes."""
        self._tree.require(code)
        expanded = self._collapsed.ensure_ancestors_expanded(code, self._tree)
        if expanded:
            self.save()
            logger.info("Expanded ancestors: %s", ", ".join(expanded))
        return expanded

    def set_assignment(self, staff_id, standard_code, achieved, date_achieved=None) -> Assignment:
        """Record whether a staff member has achieved a standard."""
        staff_id = clean_text(staff_id, "Staff ID")
        if not staff_id:
            raise MissingRequiredFieldError("Staff ID is required")
        standard_code = clean_text(standard_code, "Standard code", MalformedCodeError)
        date_achieved = clean_text(date_achieved, "Date achieved") or None
        self._staff.require(staff_id)
        self._tree.require(standard_code)
        assignment = self._assignments.set(staff_id, standard_code, bool(achieved), date_achieved)
        self.save()
        return replace(assignment)

    # ------------------------------------------------------------------
    # Staff
    # ------------------------------------------------------------------

    def add_staff(self, staff_id, name, **profile) -> StaffMember:
        member = self._staff.add(staff_id, name, **profile)
        self.save()
        return replace(member)

    def edit_staff(self, staff_id, *, new_id=None, name=None, **profile) -> StaffMember:
        """Update a staff profile; a new id is carried over to its assignments."""
        member = self._staff.edit(staff_id, new_id=new_id, name=name, **profile)
        if member.id != staff_id:
            moved = self._assignments.rename_staff(staff_id, member.id)
            logger.info("Moved %d assignments from %s to %s", moved, staff_id, member.id)
        self.save()
        return replace(member)

    def delete_staff(self, staff_id) -> int:
        """Delete a staff member and their assignments; returns how many were dropped."""
        self._staff.delete(staff_id)
        dropped = self._assignments.discard_staff(staff_id)
        self.save()
        logger.info("Deleted staff %s and %d assignments", staff_id, dropped)
        return dropped
