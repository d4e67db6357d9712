"""Domain exceptions and their JSON rendering."""

from __future__ import annotations

from flask import Flask, jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException


class HabitLoopError(Exception):
    """Base class for errors a request handler should turn into a response."""

    status_code = 400
    code = "bad_request"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.code, "message": self.message}


class InvalidInputError(HabitLoopError, ValueError):
    """Caller supplied a value that fails validation."""

    code = "invalid_input"


class AuthenticationRequired(HabitLoopError):
    status_code = 401
    code = "unauthorized"


class PermissionDeniedError(HabitLoopError):
    status_code = 403
    code = "forbidden"


class NotFoundError(HabitLoopError):
    status_code = 404
    code = "not_found"


def validation_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Flatten pydantic errors into ``{field: [messages]}``."""

    structured: dict[str, list[str]] = {}
    for error in exc.errors(include_url=False):
        loc = error.get("loc", ())
        key = str(loc[0]) if loc else "__root__"
        structured.setdefault(key, []).append(error.get("msg", "Invalid value"))
    return structured


def register_error_handlers(app: Flask) -> None:
    """Render domain, validation and HTTP errors as JSON bodies."""

    @app.errorhandler(HabitLoopError)
    def _handle_domain_error(exc: HabitLoopError):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(ValidationError)
    def _handle_validation_error(exc: ValidationError):
        payload = {
            "error": "invalid_input",
            "message": "Request payload failed validation",
            "fields": validation_errors(exc),
        }
        return jsonify(payload), 400

    @app.errorhandler(HTTPException)
    def _handle_http_error(exc: HTTPException):
        code = (exc.name or "error").lower().replace(" ", "_")
        return jsonify({"error": code, "message": exc.description}), exc.code or 500


__all__ = [
    "AuthenticationRequired",
    "HabitLoopError",
    "InvalidInputError",
    "NotFoundError",
    "PermissionDeniedError",
    "register_error_handlers",
    "validation_errors",
]
