"""Staff profiles: the people assignments record achievements for."""

import logging
from dataclasses import asdict, dataclass

from standards_tracker.codes import clean_text
from standards_tracker.errors import (
    DuplicateStaffError,
    MissingRequiredFieldError,
    StaffNotFoundError,
)

logger = logging.getLogger(__name__)

# Suggested values; profiles may carry others
PHASE_OPTIONS = ["Foundation", "Primary", "Secondary"]
OVERSEAS_THAI_OPTIONS = ["Overseas", "Thai", "All"]
YEAR_GROUP_OPTIONS = ["Reception"] + [f"Year {n}" for n in range(1, 14)]
DEPARTMENT_OPTIONS = ["Outclass", "EAL", "LSA", "Support Staff"]

PROFILE_FIELDS = ("phase", "overseas_thai", "year_group", "department")


@dataclass
class StaffMember:
    id: str
    name: str
    phase: str = "Foundation"
    overseas_thai: str = "All"
    year_group: str = "Reception"
    department: str = "Outclass"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "StaffMember":
        defaults = cls(id="", name="")
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name") or "",
            **{f: data.get(f) or getattr(defaults, f) for f in PROFILE_FIELDS},
        )


class StaffRegistry:
    """Staff members keyed by their unique id."""

    def __init__(self, members=None):
        self._members: list[StaffMember] = list(members or [])

    def __iter__(self):
        return iter(self._members)

    def __len__(self):
        return len(self._members)

    def get(self, staff_id) -> StaffMember | None:
        return next((m for m in self._members if m.id == staff_id), None)

    def require(self, staff_id) -> StaffMember:
        member = self.get(staff_id)
        if member is None:
            raise StaffNotFoundError(staff_id)
        return member

    def _check_id(self, staff_id: str, current: str | None = None):
        if not staff_id:
            raise MissingRequiredFieldError("Staff ID is required")
        if staff_id != current and self.get(staff_id) is not None:
            raise DuplicateStaffError(f"Staff ID {staff_id} already exists")

    @staticmethod
    def _profile(fields: dict) -> dict:
        return {
            f: clean_text(v, f) for f, v in fields.items()
            if f in PROFILE_FIELDS and v is not None
        }

    def add(self, staff_id, name, **fields) -> StaffMember:
        staff_id = clean_text(staff_id, "Staff ID")
        name = clean_text(name, "Staff name")
        self._check_id(staff_id)
        if not name:
            raise MissingRequiredFieldError("Staff name is required")
        member = StaffMember(id=staff_id, name=name, **{k: v for k, v in self._profile(fields).items() if v})
        self._members.append(member)
        logger.info("Added new staff with ID %s", staff_id)
        return member

    def edit(self, staff_id, *, new_id=None, name=None, **fields) -> StaffMember:
        """Update a profile; changing the id is the caller's job to propagate."""
        member = self.require(staff_id)
        new_id = clean_text(new_id, "Staff ID") or member.id
        self._check_id(new_id, current=member.id)
        if name is not None:
            name = clean_text(name, "Staff name")
            if not name:
                raise MissingRequiredFieldError("Staff name is required")
        profile = self._profile(fields)

        member.id = new_id
        if name is not None:
            member.name = name
        for f, v in profile.items():
            setattr(member, f, v)
        logger.info("Updated staff: %s (%s)", member.name, member.id)
        return member

    def delete(self, staff_id) -> StaffMember:
        member = self.require(staff_id)
        self._members.remove(member)
        logger.info("Deleted staff with ID %s", staff_id)
        return member

    def to_list(self) -> list[dict]:
        return [m.to_dict() for m in sorted(self._members, key=lambda m: m.id)]
