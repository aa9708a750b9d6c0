"""Error taxonomy shared by the services.

Services raise these and know nothing about HTTP; the handler registered by
`register_error_handlers` maps each kind onto a status code.
"""
import enum
import logging
from http import HTTPStatus

from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError

from . import db

logger = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    AUTHORIZATION = "authorization"
    AUTHENTICATION = "authentication"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence"


class ServiceError(Exception):
    """Base class for failures raised by the service layer."""

    kind: ErrorKind = ErrorKind.PERSISTENCE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """The request is malformed or breaks a business rule."""

    kind = ErrorKind.VALIDATION


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class AuthorizationError(ServiceError):
    """The actor is known but may not perform the operation."""

    kind = ErrorKind.AUTHORIZATION


class AuthenticationError(ServiceError):
    """The bearer credential is missing or cannot be resolved to a user."""

    kind = ErrorKind.AUTHENTICATION


class ConflictError(ServiceError):
    kind = ErrorKind.CONFLICT


class PersistenceError(ServiceError):
    """The storage layer failed; the transaction was rolled back."""

    kind = ErrorKind.PERSISTENCE


_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: HTTPStatus.BAD_REQUEST,
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.AUTHORIZATION: HTTPStatus.FORBIDDEN,
    ErrorKind.AUTHENTICATION: HTTPStatus.UNAUTHORIZED,
    ErrorKind.CONFLICT: HTTPStatus.CONFLICT,
    ErrorKind.PERSISTENCE: HTTPStatus.INTERNAL_SERVER_ERROR,
}


def status_for(error: ServiceError) -> HTTPStatus:
    return _STATUS_BY_KIND[error.kind]


# PUBLIC_INTERFACE
def register_error_handlers(app: Flask) -> None:
    """Answer service errors with the same body shape flask-smorest's abort() uses."""

    @app.errorhandler(ServiceError)
    def handle_service_error(error: ServiceError):
        status = status_for(error)
        if status >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error("Request failed: %s", error.message)
        body = {"code": int(status), "status": status.phrase, "message": error.message}
        return jsonify(body), int(status)

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(error: SQLAlchemyError):
        # Failures outside a service transaction (plain reads) land here
        db.session.rollback()
        logger.exception("Unhandled storage failure")
        return handle_service_error(PersistenceError("storage failure"))
