from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from .core.enums import Role
from .core.exceptions import AuthorizationError, ValidationError


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "status": "error", "code": "UNAUTHORIZED", "message": "Login required"}), 401
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "status": "error", "code": "UNAUTHORIZED", "message": "Login required"}), 401
            if session.get("role") not in allowed:
                return jsonify({"success": False, "status": "error", "code": "FORBIDDEN", "message": "Access denied"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        raise AuthorizationError("Access denied") from None


def current_facility_id() -> int:
    """Facility of the logged-in user, set in the session by the auth layer."""

    facility_id = session.get("facility_id")
    if not facility_id:
        raise ValidationError("User must be associated with a gym")
    return int(facility_id)
