from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Order matters: subclasses are listed through their base classes.
STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def json_ok(status: int = 200, **payload):
    body = {"success": True}
    body.update(payload)
    return jsonify(body), status


def json_error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def request_payload() -> dict:
    """JSON body, falling back to form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def status_for(err: DomainError) -> int:
    for cls, status in STATUS_BY_ERROR:
        if isinstance(err, cls):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(err: DomainError):
        status = status_for(err)
        if status >= 403:
            logger.info("%s %s -> %d: %s", request.method, request.path, status, err)
        return json_error(str(err), status)

    @app.errorhandler(404)
    def _not_found(_err):
        return json_error("Not found", 404)

    @app.errorhandler(405)
    def _method_not_allowed(_err):
        return json_error("Method not allowed", 405)

    @app.errorhandler(Exception)
    def _unexpected(err: Exception):
        if isinstance(err, HTTPException):
            return json_error(err.description or err.name, err.code or 500)
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return json_error("Internal server error", 500)
