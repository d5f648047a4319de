"""Error taxonomy shared by the loyalty, coupon and store services.

Validation errors are user-actionable and specific. Infrastructure errors are
generic and retryable. Best-effort side-effect failures never reach this
module: the checkout orchestrator logs them and reports flags instead.
"""

from typing import Optional

from fastapi import HTTPException, status

GENERIC_RETRY_MESSAGE = "Something went wrong on our side. Please try again."


class DomainError(Exception):
    """Base class for errors raised by service-layer operations."""

    code: str = "error"
    retryable: bool = False
    http_status: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class DomainValidationError(DomainError):
    """A business rule rejected the request. Safe to show to the user."""

    code = "validation_error"


class NotFoundError(DomainValidationError):
    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND


class InfrastructureError(DomainError):
    """The backing store failed. The caller may offer a retry."""

    code = "infrastructure_error"
    retryable = True
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = GENERIC_RETRY_MESSAGE):
        super().__init__(message)


def to_http_exception(exc: DomainError) -> HTTPException:
    """Map a domain error onto the HTTP response routers return."""
    return HTTPException(
        status_code=exc.http_status,
        detail={
            "code": exc.code,
            "message": exc.message,
            "retryable": exc.retryable,
        },
    )
