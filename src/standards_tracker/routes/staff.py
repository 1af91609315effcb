"""Staff profile routes."""

from flask import Blueprint, jsonify

from standards_tracker.access import get_catalogue, json_body, serialized
from standards_tracker.staff import PROFILE_FIELDS

bp = Blueprint("staff", __name__, url_prefix="/staff")


def _profile(data) -> dict:
    return {f: data[f] for f in PROFILE_FIELDS if f in data}


@bp.route("/")
@serialized
def list_staff():
    return jsonify({"staff": [m.to_dict() for m in get_catalogue().staff()]})


@bp.route("/<staff_id>")
@serialized
def detail(staff_id):
    """A staff profile with the standards recorded against it."""
    catalogue = get_catalogue()
    member = catalogue.get_staff(staff_id)
    assignments = [a.to_dict() for a in catalogue.assignments() if a.staff_id == member.id]
    return jsonify({"staff": member.to_dict(), "assignments": assignments})


@bp.route("/", methods=["POST"])
@serialized
def create():
    data = json_body()
    member = get_catalogue().add_staff(data.get("id"), data.get("name"), **_profile(data))
    return jsonify(member.to_dict()), 201


@bp.route("/<staff_id>", methods=["PATCH"])
@serialized
def edit(staff_id):
    data = json_body()
    member = get_catalogue().edit_staff(
        staff_id, new_id=data.get("id"), name=data.get("name"), **_profile(data)
    )
    return jsonify(member.to_dict())


@bp.route("/<staff_id>", methods=["DELETE"])
@serialized
def delete(staff_id):
    """Delete a staff member together with their assignments."""
    dropped = get_catalogue().delete_staff(staff_id)
    return jsonify({"deleted": staff_id, "assignments_removed": dropped})
