"""Session guards and JSON error translation shared by the controllers."""
from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Iterable

from flask import jsonify, request, session

from ..core.exceptions import AuthenticationError, AuthorizationError, DomainError
from ..geo.location import SubmittedPositionProvider

logger = logging.getLogger(__name__)

# Session roles. Hospital managers log in with the hospital account, not a user row.
SESSION_ADMIN = "ADMIN"
SESSION_HOSPITAL = "HOSPITAL"
SESSION_STAFF = "STAFF"


def ok(status: int = 200, **payload: Any):
    return jsonify({"success": True, **payload}), status


def fail(message: str, status: int = 400):
    return jsonify({"success": False, "message": message}), status


def status_for(error: DomainError) -> int:
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, AuthorizationError):
        return 403
    return 400


def api_view(view):
    """Translate domain errors into JSON; anything else is a logged 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return fail(str(e), status_for(e))
        except Exception:
            logger.exception("Unhandled error in %s", request.path)
            return fail("Internal server error", 500)

    return wrapper


def roles_required(roles: Iterable[str]):
    allowed = frozenset(roles)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            role = session.get("role")
            if role is None:
                return fail("Please log in to continue.", 401)
            if role not in allowed:
                return fail("You do not have permission to perform this action.", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def position_from_request(data: dict) -> SubmittedPositionProvider:
    """Browser geolocation arrives as ``{"position": {...}}`` or flat fields."""
    position = data.get("position")
    return SubmittedPositionProvider.from_payload(position if isinstance(position, dict) else data)


def scoped_hospital_id(requested: str | None = None) -> str | None:
    """Hospital managers and staff are pinned to their own hospital; admins choose."""
    if session.get("role") == SESSION_ADMIN:
        return requested
    return session.get("hospital_id")
