# staffing_api/common/errors.py
from flask import Blueprint, current_app
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from staffing_api.common.http import fail
from staffing_api.extensions import db

bp_errors = Blueprint("errors", __name__)


class APIError(Exception):
    """Custom API Error class."""
    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, message, code=None, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.payload = payload


class ValidationError(APIError):
    """Malformed or out-of-range input. `errors` maps field -> message."""
    code = "VALIDATION_ERROR"

    def __init__(self, message="Validation failed", errors=None):
        super().__init__(message)
        self.errors = errors or {}


class NotFound(APIError):
    status_code = 404
    code = "NOT_FOUND"


class Conflict(APIError):
    status_code = 409
    code = "CONFLICT"


class CapacityExceeded(APIError):
    """Business-rule violation: engineer allocation would pass maxCapacity."""
    code = "CAPACITY_EXCEEDED"

    def __init__(self, message, available: int, requested: int):
        super().__init__(message, payload={"available": available, "requested": requested})
        self.available = available
        self.requested = requested


class Unauthorized(APIError):
    status_code = 401
    code = "UNAUTHORIZED"


class Forbidden(APIError):
    status_code = 403
    code = "FORBIDDEN"


class StoreError(APIError):
    status_code = 500
    code = "STORE_ERROR"


@bp_errors.app_errorhandler(ValidationError)
def _validation(e: ValidationError):
    return fail(message=e.message, status=e.status_code, code=e.code, errors=e.errors)


@bp_errors.app_errorhandler(APIError)
def _api_error(e: APIError):
    return fail(message=e.message, status=e.status_code, code=e.code, detail=e.payload)


@bp_errors.app_errorhandler(HTTPException)
def _http(e: HTTPException):
    return fail(message=e.description or "HTTP error", status=e.code or 400)


@bp_errors.app_errorhandler(IntegrityError)
def _integrity(e: IntegrityError):
    db.session.rollback()
    # 409 for unique/FK violations
    return fail(message="Conflict / integrity error", status=409, code="CONFLICT",
                detail=str(e.orig) if getattr(e, "orig", None) else str(e))


@bp_errors.app_errorhandler(SQLAlchemyError)
def _store(e: SQLAlchemyError):
    db.session.rollback()
    current_app.logger.exception("store failure")
    return fail(message="Data store error", status=500, code=StoreError.code)


@bp_errors.app_errorhandler(Exception)
def _unhandled(e: Exception):
    current_app.logger.exception(e)
    return fail(message="Internal Server Error", status=500)
