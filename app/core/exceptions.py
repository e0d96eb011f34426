# app/core/exceptions.py
# Typed errors raised by the service layer.
# They are HTTPExceptions, so FastAPI turns them into responses directly;
# the handler in app/main.py adds the machine readable `code`.
from fastapi import HTTPException, status


class MarketplaceError(HTTPException):
    code = "error"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(status_code=self.http_status, detail=detail)


class NotFoundError(MarketplaceError):
    """Referenced record does not exist, or the caller cannot see it."""
    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND


class UnauthorizedError(MarketplaceError):
    """Caller's role does not allow the requested action."""
    code = "unauthorized"
    http_status = status.HTTP_403_FORBIDDEN


class InvalidTransitionError(MarketplaceError):
    """Requested status change is not permitted from the current status."""
    code = "invalid_transition"
    http_status = status.HTTP_409_CONFLICT


class InsufficientBalanceError(MarketplaceError):
    code = "insufficient_balance"
    http_status = status.HTTP_400_BAD_REQUEST


class InputValidationError(MarketplaceError):
    """Malformed input: negative amount, empty required field, oversize text."""
    code = "validation_error"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class ConflictError(MarketplaceError):
    """Concurrent modification detected, or the action was already applied."""
    code = "conflict"
    http_status = status.HTTP_409_CONFLICT
