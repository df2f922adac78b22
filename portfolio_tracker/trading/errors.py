"""Trade validation errors.

Every error is raised synchronously at the offending call and leaves the
ledger unchanged.
"""

from enum import Enum


class RejectionReason(Enum):
    """Reason a trade was rejected."""
    INVALID_QUANTITY = "invalid_quantity"
    INVALID_PRICE = "invalid_price"
    INSUFFICIENT_HOLDINGS = "insufficient_holdings"


class TradingError(ValueError):
    """Base class for rejected trades."""

    reason: RejectionReason

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidQuantityError(TradingError):
    """Quantity is zero or negative."""
    reason = RejectionReason.INVALID_QUANTITY


class InvalidPriceError(TradingError):
    """Price is zero or negative."""
    reason = RejectionReason.INVALID_PRICE


class InsufficientHoldingsError(TradingError):
    """Sell quantity exceeds the current position, or the symbol is unknown."""
    reason = RejectionReason.INSUFFICIENT_HOLDINGS


class NullArgumentError(TypeError):
    """A required dependency or argument was not supplied."""
