# Overview: API error taxonomy and the Flask handlers that render it.

"""
Error taxonomy shared by services, decorators and routes.

Services raise these; the handlers registered by register_error_handlers()
turn them into JSON responses. Store failures are logged with full context
and surfaced to callers as a generic 500 so driver text never reaches an
untrusted client.
"""

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import BadRequest as WerkzeugBadRequest

from .extensions import db
from .logging_setup import get_logger
from .validation import ValidationError


logger = get_logger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto an HTTP status."""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {"error": self.message}


class Unauthenticated(ApiError):
    """Missing, malformed, tampered or expired credentials."""
    status_code = 401
    default_message = "Authentication required"


class Forbidden(ApiError):
    """Role or parish-scope denial, or a protected-resource mutation."""
    status_code = 403
    default_message = "Insufficient permissions"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class BadRequest(ApiError):
    status_code = 400
    default_message = "Bad request"


class Conflict(ApiError):
    status_code = 409
    default_message = "Conflict"


class Internal(ApiError):
    status_code = 500


def register_error_handlers(app) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        return jsonify({"error": str(error)}), 400

    @app.errorhandler(WerkzeugBadRequest)
    def handle_malformed_request(error):
        return jsonify({"error": "Malformed request body"}), 400

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(error: SQLAlchemyError):
        db.session.rollback()
        logger.exception("store_error", error_type=type(error).__name__)
        return jsonify(Internal().to_dict()), 500
