"""Domain exceptions for TradeLedger.

Every failure a caller can act on is raised as a subclass of
TradeLedgerError. Each class carries the HTTP status the API layer maps it to,
so services never need to know about HTTP.

Hierarchy:
    TradeLedgerError
    ├── InvalidArgumentError (400)
    ├── NotFoundError (404)
    │   ├── HoldingNotFoundError
    │   ├── TradeNotFoundError
    │   └── WalletNotFoundError
    ├── InsufficientQuantityError (400)
    ├── InsufficientBalanceError (400)
    ├── QuoteUnavailableError (503)
    └── ConflictError (409)
"""

from decimal import Decimal


class TradeLedgerError(Exception):
    """Base exception for all domain errors."""

    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentError(TradeLedgerError):
    """Bad quantity, amount, price or missing field."""

    http_status = 400


class NotFoundError(TradeLedgerError):
    """No row exists for the requested key."""

    http_status = 404


class HoldingNotFoundError(NotFoundError):
    """No holding for (user, symbol)."""

    def __init__(self, user: str, symbol: str) -> None:
        super().__init__("No holdings found for this stock")
        self.user = user
        self.symbol = symbol


class TradeNotFoundError(NotFoundError):
    """No OPEN forex trade for (trade_id, user)."""

    def __init__(self, trade_id: str) -> None:
        super().__init__("Trade not found or already closed")
        self.trade_id = trade_id


class WalletNotFoundError(NotFoundError):
    """User has no wallet yet."""

    def __init__(self, user_id: str) -> None:
        super().__init__("Wallet not found")
        self.user_id = user_id


class InsufficientQuantityError(TradeLedgerError):
    """Sell quantity exceeds the held quantity."""

    http_status = 400

    def __init__(self, symbol: str, requested: Decimal, available: Decimal) -> None:
        super().__init__("Insufficient shares to sell")
        self.symbol = symbol
        self.requested = requested
        self.available = available


class InsufficientBalanceError(TradeLedgerError):
    """Wallet balance cannot cover the debit."""

    http_status = 400

    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__("Insufficient balance")
        self.required = required
        self.available = available


class QuoteUnavailableError(TradeLedgerError):
    """Quote provider failed, timed out, or does not know the symbol."""

    http_status = 503

    def __init__(self, symbol: str, reason: str = "") -> None:
        message = f"Quote unavailable for {symbol}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.symbol = symbol
        self.reason = reason


class ConflictError(TradeLedgerError):
    """A concurrent write changed the row since it was read."""

    http_status = 409


def require_positive(name: str, value: Decimal | int | float | str) -> Decimal:
    """Return value as Decimal if strictly positive, else raise InvalidArgumentError."""
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except ArithmeticError as e:
            raise InvalidArgumentError(f"{name} is not a number: {value!r}") from e
    if not value.is_finite() or value <= 0:
        raise InvalidArgumentError(f"{name} must be greater than 0, got {value}")
    return value
