from __future__ import annotations

import structlog
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .exceptions import AuthenticationError, AuthorizationError, DomainError, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        status = status_for(error)
        logger.info("request_rejected", status=status, error=str(error), kind=type(error).__name__)
        return jsonify({"success": False, "error": str(error)}), status

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify({"success": False, "error": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception("request_failed", error=str(error))
        return jsonify({"success": False, "error": "Internal server error"}), 500


def json_body() -> dict:
    """Request JSON object, or a ValidationError when the body is missing or not an object."""

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload
