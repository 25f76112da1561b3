"""HTTP-aware error types raised by the service layer.

Services raise these directly, the same way the routers raise
``HTTPException``; the application's exception handlers turn them into the
standard error envelope.
"""

from typing import Any

from fastapi import HTTPException

ERROR_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    429: "TOO_MANY_REQUESTS",
    500: "INTERNAL_SERVER_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


def error_code_for(status_code: int) -> str:
    return ERROR_CODES.get(status_code, f"HTTP_{status_code}")


class ServiceError(HTTPException):
    """Base class for errors with a fixed HTTP status."""

    status_code_default = 500

    def __init__(
        self,
        detail: str,
        *,
        details: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(
            status_code=self.status_code_default, detail=detail, headers=headers
        )
        self.details = details


class BadRequestError(ServiceError):
    status_code_default = 400


class UnauthorizedError(ServiceError):
    status_code_default = 401


class ForbiddenError(ServiceError):
    status_code_default = 403


class NotFoundError(ServiceError):
    status_code_default = 404


class ConflictError(ServiceError):
    status_code_default = 409


class ServiceFailureError(ServiceError):
    """Unclassified server-side failure; the message is never shown to clients."""

    status_code_default = 500
