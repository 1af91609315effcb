"""Group registry: the lettered top-level namespaces of the catalogue."""

import logging
import string
from dataclasses import asdict, dataclass

from standards_tracker.codes import clean_text, is_valid_group_code
from standards_tracker.errors import (
    DuplicateGroupError,
    GroupNotFoundError,
    MalformedCodeError,
    MissingRequiredFieldError,
    ReferentialIntegrityError,
)

logger = logging.getLogger(__name__)

# Palette offered for new groups, assigned in order when no colour is chosen
GROUP_COLORS = [
    "#f44336",  # Red
    "#e91e63",  # Pink
    "#9c27b0",  # Purple
    "#673ab7",  # Deep Purple
    "#3f51b5",  # Indigo
    "#2196f3",  # Blue
    "#03a9f4",  # Light Blue
    "#00bcd4",  # Cyan
    "#009688",  # Teal
    "#4caf50",  # Green
    "#8bc34a",  # Light Green
    "#cddc39",  # Lime
    "#ffeb3b",  # Yellow
    "#ffc107",  # Amber
    "#ff9800",  # Orange
    "#ff5722",  # Deep Orange
]


@dataclass
class Group:
    """A named, single-letter namespace for top-level standards."""

    name: str
    code: str
    color: str = "#ffffff"
    description: str = ""
    collapsed: bool = False  # UI state, persisted but not interpreted

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Group":
        return cls(
            name=data.get("name") or "",
            code=data.get("code") or "",
            color=data.get("color") or "#ffffff",
            description=data.get("description") or "",
            collapsed=bool(data.get("collapsed", False)),
        )


def next_group_code(existing_groups) -> str:
    """Return the first letter in A..Z not used by *existing_groups*.

    Raises DuplicateGroupError when all 26 letters are taken.
    """
    used = {g.code for g in existing_groups}
    for letter in string.ascii_uppercase:
        if letter not in used:
            return letter
    raise DuplicateGroupError("All group codes A-Z are already in use")


class GroupRegistry:
    """Owns the groups list and the group-level invariants.

    Group names and letters are unique.  Checks that involve standards (which
    letters they use, which groups they reference) are made by the caller and
    passed in, so the registry never needs to see the standards tree.
    """

    def __init__(self, groups=None):
        self._groups: list[Group] = list(groups or [])

    def __iter__(self):
        return iter(self._groups)

    def __len__(self):
        return len(self._groups)

    @property
    def groups(self) -> list[Group]:
        return list(self._groups)

    def get(self, name) -> Group | None:
        return next((g for g in self._groups if g.name == name), None)

    def require(self, name) -> Group:
        group = self.get(name)
        if group is None:
            raise GroupNotFoundError(name)
        return group

    def by_code(self, code) -> Group | None:
        return next((g for g in self._groups if g.code == code), None)

    def sorted_by_code(self) -> list[Group]:
        return sorted(self._groups, key=lambda g: g.code)

    def next_group_code(self) -> str:
        return next_group_code(self._groups)

    # ------------------------------------------------------------------
    # Validation (no mutation)
    # ------------------------------------------------------------------

    def check_new_group(self, name: str, code: str | None = None) -> str:
        """Validate a new group and return the letter it will receive."""
        if not name:
            raise MissingRequiredFieldError("Group name is required")
        if self.get(name) is not None:
            raise DuplicateGroupError(f'A group named "{name}" already exists')
        if code:
            self._check_free_letter(code)
            return code
        return self.next_group_code()

    def check_code_change(self, name: str, old_code: str, new_code: str) -> Group:
        group = self.require(name)
        if group.code != old_code:
            raise MalformedCodeError(
                f'Group "{name}" has code {group.code}, not {old_code}'
            )
        if new_code != old_code:
            self._check_free_letter(new_code)
        return group

    def check_rename(self, name: str, new_name: str) -> Group:
        group = self.require(name)
        if not new_name:
            raise MissingRequiredFieldError("Group name is required")
        if new_name != name and self.get(new_name) is not None:
            raise DuplicateGroupError(f'A group named "{new_name}" already exists')
        return group

    def _check_free_letter(self, code: str):
        if not is_valid_group_code(code):
            raise MalformedCodeError("Group code must be a single uppercase letter (A-Z)")
        if self.by_code(code) is not None:
            raise DuplicateGroupError(
                f"Group code '{code}' is already in use. Please choose another."
            )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_group(self, name: str, description: str = "", color: str | None = None,
                  code: str | None = None) -> Group:
        name = clean_text(name, "Group name")
        letter = self.check_new_group(name, code)
        group = Group(
            name=name,
            code=letter,
            color=color or GROUP_COLORS[len(self._groups) % len(GROUP_COLORS)],
            description=description or "",
        )
        self._groups.append(group)
        logger.info("Added group %s (%s)", name, letter)
        return group

    def rename_group_code(self, name: str, old_code: str, new_code: str) -> Group:
        """Change a group's letter.  Rewriting standard codes is the caller's job."""
        group = self.check_code_change(name, old_code, new_code)
        group.code = new_code
        return group

    def rename_group(self, name: str, new_name: str) -> Group:
        group = self.check_rename(name, new_name)
        group.name = new_name
        return group

    def delete_group(self, name: str, reference_count: int = 0) -> Group:
        """Remove a group; rejected while *reference_count* standards use it."""
        group = self.require(name)
        if reference_count > 0:
            raise ReferentialIntegrityError(
                f'Cannot delete group "{name}" because it contains {reference_count} '
                "standards. Please reassign or delete those standards first."
            )
        self._groups.remove(group)
        logger.info("Deleted group %s", name)
        return group

    def to_list(self) -> list[dict]:
        return [g.to_dict() for g in self._groups]
