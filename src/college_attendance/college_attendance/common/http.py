from __future__ import annotations

from functools import wraps

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from ..users.service import STAFF_ROLES, SessionUser

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicateError, 409),
)


def ok(status: int = 200, **data):
    return jsonify({"success": True, **data}), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def domain_error(e: DomainError):
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(e, cls):
            return fail(str(e), status)
    return fail(str(e), 400)


def payload() -> dict:
    """JSON body if one was sent, else the form fields."""

    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def current_user() -> SessionUser:
    return SessionUser.from_session(session)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please log in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def staff_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please log in to continue", 401)
        if Role(session.get("role")) not in STAFF_ROLES:
            return fail("Access denied. Teachers and HODs only.", 403)
        return view(*args, **kwargs)

    return wrapper
