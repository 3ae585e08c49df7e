from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AttendanceError,
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .serialization import to_json

logger = logging.getLogger(__name__)


def ok(message: Optional[str] = None, status: int = 200, **data: Any):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    body.update({k: to_json(v) for k, v in data.items()})
    return jsonify(body), status


def fail(message: str, status: int = 400, *, code: Optional[str] = None):
    body: dict[str, Any] = {"success": False, "message": message}
    if code:
        body["code"] = code
    return jsonify(body), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "institute_id" not in session:
            return fail("Please log in to continue!", 401)
        return view(*args, **kwargs)

    return wrapper


def current_institute_id() -> int:
    return int(session["institute_id"])


def request_data() -> dict:
    """JSON body, falling back to form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def optional_int(value, field_name: str) -> Optional[int]:
    if value is None or str(value).strip() == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def optional_text(value, field_name: str) -> Optional[str]:
    """JSON numbers are taken as their text; objects and lists are rejected."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValidationError(f"{field_name} must be text")


def flag(value, default: bool = False) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def register_error_handlers(app: Flask) -> None:
    """Turn service exceptions into ``{"success": false, "message": ...}`` responses."""

    @app.errorhandler(AttendanceError)
    def _attendance_error(e: AttendanceError):
        return fail(str(e), 400, code=e.code)

    @app.errorhandler(ValidationError)
    def _validation_error(e: ValidationError):
        return fail(str(e), 400)

    @app.errorhandler(AuthenticationError)
    def _authentication_error(e: AuthenticationError):
        return fail(str(e), 401)

    @app.errorhandler(AuthorizationError)
    def _authorization_error(e: AuthorizationError):
        return fail(str(e), 403)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return fail(str(e), 404)

    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        return fail(str(e), 400)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if app.config.get("DEBUG"):
            return fail(f"Internal server error: {e}", 500)
        return fail("Internal server error", 500)
