"""Group management routes."""

from flask import Blueprint, jsonify

from standards_tracker.access import get_catalogue, json_body, serialized

bp = Blueprint("groups", __name__, url_prefix="/groups")


def _with_count(catalogue, group) -> dict:
    return {**group.to_dict(), "standard_count": catalogue.count_standards(group.name)}


@bp.route("/")
@serialized
def list_groups():
    catalogue = get_catalogue()
    return jsonify({"groups": [_with_count(catalogue, g) for g in catalogue.groups()]})


@bp.route("/", methods=["POST"])
@serialized
def create():
    data = json_body()
    catalogue = get_catalogue()
    group = catalogue.add_group(
        data.get("name"),
        description=data.get("description") or "",
        color=data.get("color") or None,
        code=data.get("code") or None,
    )
    return jsonify(_with_count(catalogue, group)), 201


@bp.route("/<name>", methods=["PATCH"])
@serialized
def edit(name):
    """Rename a group, change its letter (recoding its standards), description or colour."""
    data = json_body()
    catalogue = get_catalogue()
    group = catalogue.edit_group(
        name,
        new_name=data.get("name"),
        code=data.get("code"),
        description=data.get("description"),
        color=data.get("color"),
    )
    return jsonify(_with_count(catalogue, group))


@bp.route("/<name>", methods=["DELETE"])
@serialized
def delete(name):
    get_catalogue().delete_group(name)
    return jsonify({"deleted": name})


@bp.route("/<name>/collapse", methods=["POST"])
@serialized
def toggle_collapse(name):
    collapsed = get_catalogue().toggle_group_collapsed(name)
    return jsonify({"name": name, "collapsed": collapsed})
