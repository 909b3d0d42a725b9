"""
➡️ But : Traduire les erreurs métier en réponses HTTP.

ValidationError / UserNotFoundError → 400, AuthenticationError → 401,
AuthorizationError → 403, TodoNotFoundError → 404, ConflictError → 409, reste → 500.
"""

from fastapi import HTTPException, status

from taskboard.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    TodoNotFoundError,
    UserNotFoundError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UserNotFoundError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (TodoNotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def status_for(exc: DomainError) -> int:
    for error_cls, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(exc: DomainError) -> HTTPException:
    return HTTPException(status_code=status_for(exc), detail=exc.message)
