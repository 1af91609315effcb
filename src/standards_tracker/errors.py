"""Exceptions raised by the catalogue engine.

Every error is a validation failure: the operation that raised it has made no
change to the catalogue, so callers can surface the message and retry with
corrected input.
"""


class CatalogueError(Exception):
    """Base class for rejected catalogue operations."""

    status_code = 422

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": type(self).__name__}


class DuplicateCodeError(CatalogueError):
    status_code = 409

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Standard with code {code} already exists")


class DuplicateGroupError(CatalogueError):
    status_code = 409


class CycleError(CatalogueError):
    status_code = 409

    def __init__(self, code: str, parent_code: str) -> None:
        self.code = code
        self.parent_code = parent_code
        super().__init__(
            f"Cannot move standard {code} under {parent_code}: "
            "a standard cannot be placed under itself or one of its descendants"
        )


class MissingRequiredFieldError(CatalogueError):
    pass


class ReferentialIntegrityError(CatalogueError):
    status_code = 409


class MalformedCodeError(CatalogueError):
    pass


class StandardNotFoundError(CatalogueError):
    status_code = 404

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Standard not found: {code}")


class GroupNotFoundError(CatalogueError):
    status_code = 404

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Group not found: {name}")


class DuplicateStaffError(CatalogueError):
    status_code = 409


class StaffNotFoundError(CatalogueError):
    status_code = 404

    def __init__(self, staff_id: str) -> None:
        self.staff_id = staff_id
        super().__init__(f"Staff member not found: {staff_id}")
