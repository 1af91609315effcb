"""Staff-to-standard assignments.

Assignments reference standards by code, so they follow the same prefix
rewrites as the standards themselves.
"""

from dataclasses import asdict, dataclass
from datetime import date

from standards_tracker.codes import clean_text, code_sort_key
from standards_tracker.errors import MissingRequiredFieldError


@dataclass
class Assignment:
    staff_id: str
    standard_code: str
    achieved: bool = False
    date_achieved: str | None = None  # ISO date

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Assignment":
        return cls(
            staff_id=str(data.get("staff_id") or ""),
            standard_code=data.get("standard_code") or "",
            achieved=bool(data.get("achieved", False)),
            date_achieved=data.get("date_achieved") or None,
        )


class AssignmentBook:
    def __init__(self, assignments=None):
        self._assignments: list[Assignment] = list(assignments or [])

    def __iter__(self):
        return iter(self._assignments)

    def __len__(self):
        return len(self._assignments)

    def find(self, staff_id, standard_code) -> Assignment | None:
        return next(
            (a for a in self._assignments
             if a.staff_id == staff_id and a.standard_code == standard_code),
            None,
        )

    def set(self, staff_id, standard_code, achieved: bool, date_achieved=None) -> Assignment:
        """Create or update the assignment for a staff member and standard."""
        staff_id = clean_text(staff_id, "Staff ID")
        if not staff_id:
            raise MissingRequiredFieldError("Staff ID is required")
        if achieved:
            date_achieved = date_achieved or date.today().isoformat()
        else:
            date_achieved = None

        assignment = self.find(staff_id, standard_code)
        if assignment is None:
            assignment = Assignment(staff_id=staff_id, standard_code=standard_code)
            self._assignments.append(assignment)
        assignment.achieved = achieved
        assignment.date_achieved = date_achieved
        return assignment

    def for_standard(self, standard_code) -> list[Assignment]:
        return [a for a in self._assignments if a.standard_code == standard_code]

    def remap(self, mapping: dict) -> int:
        """Rewrite standard codes through an old-code → new-code *mapping*."""
        changed = 0
        for a in self._assignments:
            new_code = mapping.get(a.standard_code, a.standard_code)
            if new_code != a.standard_code:
                a.standard_code = new_code
                changed += 1
        return changed

    def rename_staff(self, old_id, new_id) -> int:
        changed = 0
        for a in self._assignments:
            if a.staff_id == old_id:
                a.staff_id = new_id
                changed += 1
        return changed

    def discard_staff(self, staff_id) -> int:
        before = len(self._assignments)
        self._assignments = [a for a in self._assignments if a.staff_id != staff_id]
        return before - len(self._assignments)

    def discard_standards(self, codes) -> int:
        codes = set(codes)
        before = len(self._assignments)
        self._assignments = [a for a in self._assignments if a.standard_code not in codes]
        return before - len(self._assignments)

    def to_list(self) -> list[dict]:
        ordered = sorted(
            self._assignments, key=lambda a: (a.staff_id, code_sort_key(a.standard_code))
        )
        return [a.to_dict() for a in ordered]
