"""Staff assignment routes."""

from flask import Blueprint, jsonify

from standards_tracker.access import flag, get_catalogue, json_body, serialized

bp = Blueprint("assignments", __name__, url_prefix="/assignments")


@bp.route("/", methods=["POST"])
@serialized
def record():
    """Create or update the assignment of a staff member to a standard."""
    data = json_body()
    assignment = get_catalogue().set_assignment(
        data.get("staff_id"),
        data.get("standard_code"),
        flag(data.get("achieved", False)),
        date_achieved=data.get("date_achieved") or None,
    )
    return jsonify(assignment.to_dict())


@bp.route("/<code>")
@serialized
def for_standard(code):
    assignments = get_catalogue().assignments_for_standard(code)
    return jsonify({"code": code, "assignments": [a.to_dict() for a in assignments]})
