"""Shared pieces for the JSON controllers: auth guards and error mapping."""
from __future__ import annotations

from functools import wraps
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request, session

from ..core.enums import Role, ScanType
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    PersistenceConflict,
    SessionNotAccepting,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (PersistenceConflict, 409),
    (SessionNotAccepting, 422),
)


def error_status(exc: DomainError) -> int:
    for cls, code in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return code
    return 400


def error_response(message: str, code: int, **extra: Any):
    body: Dict[str, Any] = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), code


def api_view(app: Flask):
    """Wrap a view so domain errors become JSON responses and others become 500s."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except SessionNotAccepting as e:
                status = getattr(e.status, "value", e.status)
                return error_response(str(e), 422, status=status)
            except DomainError as e:
                return error_response(str(e), error_status(e))
            except Exception:
                app.logger.exception("Unhandled error in %s", request.path)
                return error_response("Internal server error", 500)

        return wrapper

    return decorator


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "organizer_id" not in session:
            return error_response("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "organizer_id" not in session:
            return error_response("Please sign in to continue", 401)
        if session.get("role") != Role.ADMIN.value:
            return error_response("Admin access required", 403)
        return view(*args, **kwargs)

    return wrapper


def current_role() -> Role:
    return Role(session.get("role", Role.ORGANIZER.value))


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_scan_type(value: Optional[str]) -> Optional[ScanType]:
    if value is None or value == "":
        return None
    try:
        return ScanType(str(value).strip().lower())
    except ValueError:
        raise ValidationError("scan_type must be 'time_in' or 'time_out'")


def client_ip() -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr




def json_bool(value: Any, field_name: str) -> bool:
    """Only real JSON booleans; `bool("false")` would be True."""
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value
