"""Request helpers: catalogue lookup, request bodies and the catalogue lock."""

from functools import wraps

from flask import current_app, request

from standards_tracker.errors import MissingRequiredFieldError


def get_catalogue():
    return current_app.extensions["catalogue"]


def serialized(f):
    """Run a view while holding the app's catalogue lock.

    Reads take it too, so a view never sees a mutation half-applied.
    """

    @wraps(f)
    def decorated(*args, **kwargs):
        with current_app.extensions["catalogue_lock"]:
            return f(*args, **kwargs)

    return decorated


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise MissingRequiredFieldError("Request body must be a JSON object")
    return data


def flag(value) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")
