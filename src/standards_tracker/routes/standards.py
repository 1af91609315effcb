"""Standard CRUD, move and collapse routes."""

from flask import Blueprint, jsonify, request

from standards_tracker.access import flag, get_catalogue, json_body, serialized
from standards_tracker.errors import MissingRequiredFieldError

bp = Blueprint("standards", __name__, url_prefix="/standards")

_EDITABLE_FIELDS = ("name", "description", "group", "parent_code", "new_code")


@bp.route("/")
@serialized
def list_standards():
    """Return the full catalogue: standards, groups, collapse state and assignments."""
    return jsonify(get_catalogue().snapshot())


@bp.route("/tree")
@serialized
def tree():
    """Flattened hierarchy for one group (``?group=Name``) or the ungrouped standards."""
    catalogue = get_catalogue()
    group = request.args.get("group") or None
    if group:
        catalogue.get_group(group)
    return jsonify({"group": group, "rows": catalogue.outline(group)})


@bp.route("/suggest-code")
@serialized
def suggest_code():
    """Preview the code a new standard would receive."""
    code = get_catalogue().suggest_code(
        parent_code=request.args.get("parent_code") or None,
        group_name=request.args.get("group") or None,
    )
    return jsonify({"code": code})


@bp.route("/<code>")
@serialized
def detail(code):
    catalogue = get_catalogue()
    standard = catalogue.get_standard(code)
    return jsonify({
        "standard": standard.to_dict(),
        "descendants": [s.to_dict() for s in catalogue.descendants_in_order(code)],
        "assignments": [a.to_dict() for a in catalogue.assignments_for_standard(code)],
        "collapsed": catalogue.is_collapsed(code),
    })


@bp.route("/", methods=["POST"])
@serialized
def create():
    data = json_body()
    standard = get_catalogue().add_standard(
        name=data.get("name"),
        description=data.get("description") or "",
        parent_code=data.get("parent_code") or None,
        group_name=data.get("group") or None,
        code=data.get("code") or None,
    )
    return jsonify(standard.to_dict()), 201


@bp.route("/<code>", methods=["PATCH"])
@serialized
def edit(code):
    data = json_body()
    fields = {k: data[k] for k in _EDITABLE_FIELDS if k in data}
    standard = get_catalogue().edit_standard(code, **fields)
    return jsonify(standard.to_dict())


@bp.route("/<code>", methods=["DELETE"])
@serialized
def delete(code):
    """Delete a standard; ``?cascade=1`` also deletes its sub-standards."""
    catalogue = get_catalogue()
    if flag(request.args.get("cascade", "")):
        deleted = catalogue.delete_standard_and_descendants(code)
    else:
        catalogue.delete_standard(code)
        deleted = [code]
    return jsonify({"deleted": deleted})


@bp.route("/<code>/move", methods=["POST"])
@serialized
def move(code):
    """Move under ``parent_code`` or to the top level of ``group``."""
    data = json_body()
    catalogue = get_catalogue()
    if data.get("parent_code"):
        standard = catalogue.move_standard_to_parent(code, data["parent_code"])
    elif data.get("group"):
        standard = catalogue.move_standard_to_group(code, data["group"])
    else:
        raise MissingRequiredFieldError("A target parent_code or group is required")
    return jsonify(standard.to_dict())


@bp.route("/<code>/collapse", methods=["POST"])
@serialized
def toggle_collapse(code):
    collapsed = get_catalogue().toggle_collapsed(code)
    return jsonify({"code": code, "collapsed": collapsed})


@bp.route("/<code>/reveal", methods=["POST"])
@serialized
def reveal(code):
    """Expand the collapsed ancestors of a standard so it is visible."""
    expanded = get_catalogue().reveal(code)
    return jsonify({"code": code, "expanded": expanded})
