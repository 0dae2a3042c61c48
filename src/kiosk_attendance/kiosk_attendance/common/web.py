from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import jsonify, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def error_response(exc: DomainError):
    """Map a domain error onto a JSON error body and HTTP status."""
    for cls, code in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return jsonify({"success": False, "message": str(exc)}), code

    if isinstance(exc, PersistenceError):
        logger.error("Record store error: %s", exc)
        return jsonify({"success": False, "message": "Could not reach attendance records, please retry"}), 503

    logger.error("Unhandled domain error: %s", exc)
    return jsonify({"success": False, "message": "System error"}), 500


def login_required(role: Optional[Role] = None):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Please sign in"}), 401
            if role is not None and session.get("role") != role.value:
                return jsonify({"success": False, "message": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator
