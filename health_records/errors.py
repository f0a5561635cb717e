# -*- coding: utf-8 -*-
"""
Error taxonomy shared by the record store, the sharing engine and the HTTP
boundary. Each error knows the status code it maps to; ``register_error_handlers``
turns them into JSON bodies of the form ``{"msg": ..., "errors": {...}}``.
"""

import traceback

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException


class HealthRecordsError(Exception):
    """Base class for every error the API reports to callers."""
    status_code = 500
    msg = "Internal server error"

    def __init__(self, msg=None, errors=None):
        super().__init__(msg or self.msg)
        self.msg = msg or self.msg
        self.errors = errors

    def to_dict(self):
        body = {"msg": self.msg}
        if self.errors:
            body["errors"] = self.errors
        return body


class Unauthorized(HealthRecordsError):
    status_code = 401
    msg = "Unauthorized"


class Forbidden(HealthRecordsError):
    status_code = 403
    msg = "Forbidden"


class NotFound(HealthRecordsError):
    status_code = 404
    msg = "Not found"


class ValidationFailed(HealthRecordsError):
    """Malformed input; ``errors`` maps field names to messages."""
    status_code = 400
    msg = "Validation failed"


class Conflict(HealthRecordsError):
    # duplicate unique key, reported like a validation failure
    status_code = 400
    msg = "Already exists"


def register_error_handlers(app):
    @app.errorhandler(HealthRecordsError)
    def handle_domain_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"msg": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        current_app.logger.error(f"Unhandled error: {e}\n{traceback.format_exc()}")
        return jsonify({"msg": "Internal server error"}), 500
