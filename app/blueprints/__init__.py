"""
Site Briefing Platform
Blueprint registry and shared request helpers.

Error translation lives here so every blueprint answers with the same
discriminated ``{"ok": false, "code", "error"}`` body.
"""

import logging

from flask import g, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from app.core.exceptions import (
    ConflictError,
    CopyPreconditionError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from app.models import db
from app.utils.errors import E, api_error
from app.utils.helpers import parse_date

logger = logging.getLogger(__name__)


def current_ctx():
    """RequestContext resolved by the request_context middleware."""
    return g.request_ctx


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def date_arg(name: str, default=None):
    """Parse a date query parameter; ``default`` when absent or malformed."""
    return parse_date(request.args.get(name)) or default


def register_error_handlers(app):
    """Translate the service exception taxonomy into API responses."""

    @app.errorhandler(ValidationError)
    def _validation(exc):
        logger.debug("Validation failed: %s", exc)
        return api_error(exc.code, str(exc), details=exc.details)

    @app.errorhandler(NotFoundError)
    def _not_found(exc):
        logger.debug("Not found: %s (project=%s)", exc, exc.project_id)
        return api_error(E.NOT_FOUND, exc.public_message)

    @app.errorhandler(ConflictError)
    def _conflict(exc):
        logger.debug("Conflict: %s", exc)
        return api_error(exc.code, str(exc), details={exc.field: "duplicate"})

    @app.errorhandler(CopyPreconditionError)
    def _copy_rejected(exc):
        logger.debug("Day copy rejected: %s", exc)
        return api_error(exc.code, str(exc), details=exc.context)

    @app.errorhandler(StorageError)
    def _storage(exc):
        db.session.rollback()
        return api_error(E.STORAGE, "Database error, please retry")

    @app.errorhandler(SQLAlchemyError)
    def _sqlalchemy(exc):
        db.session.rollback()
        logger.exception("Database error on %s %s", request.method, request.path)
        return api_error(E.STORAGE, "Database error, please retry")

    @app.errorhandler(HTTPException)
    def _http(exc):
        if not request.path.startswith("/api/"):
            return exc
        code = E.NOT_FOUND if exc.code == 404 else E.VALIDATION_INVALID
        return api_error(code, exc.description or exc.name, status=exc.code)

    @app.errorhandler(Exception)
    def _unexpected(exc):
        db.session.rollback()
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return api_error(E.INTERNAL, "Internal server error")
