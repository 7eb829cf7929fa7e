from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.enums import ErrorKind, Role
from ..core.exceptions import AuthorizationError, CheckInError, ValidationError
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

_KIND_STATUS = {
    ErrorKind.SESSION_NOT_FOUND: 404,
    ErrorKind.NOT_ENROLLED: 403,
    ErrorKind.OUTSIDE_WINDOW: 409,
    ErrorKind.SESSION_INACTIVE: 409,
}


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            if session.get("role") not in allowed:
                return jsonify({"success": False, "message": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        raise AuthorizationError("Unknown role")


def date_arg(name: str) -> Optional[date]:
    value = (request.args.get(name) or "").strip()
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"Invalid {name} date, expected YYYY-MM-DD")


def check_in_error_response(e: CheckInError):
    status = _KIND_STATUS.get(e.kind, 400)
    return jsonify({"success": False, "error": e.kind.value, "message": str(e)}), status


def error_response(e: Exception):
    """Translate a failure from a service call into a JSON error."""
    if isinstance(e, CheckInError):
        return check_in_error_response(e)
    if isinstance(e, AuthorizationError):
        return jsonify({"success": False, "message": str(e)}), 403
    if isinstance(e, ValidationError):
        return jsonify({"success": False, "message": str(e)}), 400
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"success": False, "message": "Internal server error"}), 500
