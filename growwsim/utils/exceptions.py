# growwsim/utils/exceptions.py
"""Domain errors raised by the service layer and their HTTP mapping."""
from fastapi import Request, status
from fastapi.responses import JSONResponse


class TradingError(Exception):
    """Base class for business rule violations."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InsufficientBalanceError(TradingError):
    default_detail = "Insufficient balance"


class InsufficientSharesError(TradingError):
    default_detail = "Insufficient shares to sell"


class DuplicateEntryError(TradingError):
    default_detail = "Entry already exists"


class NotFoundError(TradingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class AccountLockedError(TradingError):
    status_code = status.HTTP_423_LOCKED
    default_detail = "Account locked due to too many failed login attempts"


async def trading_error_handler(request: Request, exc: TradingError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
