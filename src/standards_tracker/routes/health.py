"""Health-check endpoint for hosting platforms and uptime monitors."""

from flask import Blueprint, jsonify
from flask_wtf.csrf import generate_csrf
from sqlalchemy import text

from standards_tracker import __version__
from standards_tracker.access import get_catalogue, serialized
from standards_tracker.models import db

bp = Blueprint("health", __name__)


@bp.route("/healthz")
@serialized
def healthz():
    """Return application health including DB connectivity and catalogue integrity.

    Returns HTTP 200 with ``{"status": "ok"}`` when the database is reachable,
    or HTTP 503 with ``{"status": "degraded"}`` when it is not.
    """
    try:
        db.session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception:
        db_status = "error"

    status = "ok" if db_status == "connected" else "degraded"
    code = 200 if status == "ok" else 503
    catalogue = get_catalogue()
    problems = catalogue.check_integrity()
    return jsonify({
        "status": status,
        "db": db_status,
        "integrity_problems": len(problems),
        "max_depth": catalogue.max_depth(),
        "version": __version__,
    }), code


@bp.route("/csrf-token")
def csrf_token():
    """Token for the ``X-CSRFToken`` header that mutating requests must send."""
    return jsonify({"csrf_token": generate_csrf()})
