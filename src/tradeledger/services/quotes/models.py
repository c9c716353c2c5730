"""Market data models: quotes, price history bars and symbol search hits."""

from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tradeledger.errors import InvalidArgumentError


class Quote(BaseModel):
    """
    Point-in-time market quote for one symbol.

    Attributes:
        symbol: Ticker or forex pair, as requested by the caller
        price: Last traded price (always positive)
        change: Absolute change versus previous close
        change_percent: Percentage change versus previous close
        volume: Session volume (0 when the venue does not report one, e.g. forex)
        market_cap: Market capitalization, if known
        timestamp: When the quote was taken (UTC)
    """

    symbol: str
    price: Decimal
    change: Decimal = Decimal("0")
    change_percent: Decimal = Decimal("0")
    volume: int = 0
    market_cap: Decimal | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Decimal) -> Decimal:
        """Validate price is positive."""
        if v <= 0:
            raise ValueError(f"Quote price must be positive, got {v}")
        return v

    model_config = ConfigDict(frozen=True)


class PriceBar(BaseModel):
    """
    One OHLCV bar of price history.

    Attributes:
        timestamp: Bar open time
        open: Opening price
        high: Session high
        low: Session low
        close: Closing price
        volume: Traded volume (0 when not reported)
    """

    timestamp: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: int = 0

    model_config = ConfigDict(frozen=True)


class SymbolMatch(BaseModel):
    """Search hit for a free-text symbol lookup."""

    symbol: str
    name: str
    exchange: str | None = None
    quote_type: str | None = None

    model_config = ConfigDict(frozen=True)


# Accepted history periods; short aliases map to yfinance's spelling
HISTORY_PERIODS = {
    "1d": "1d",
    "5d": "5d",
    "1w": "5d",
    "1mo": "1mo",
    "1m": "1mo",
    "3mo": "3mo",
    "3m": "3mo",
    "6mo": "6mo",
    "6m": "6mo",
    "1y": "1y",
    "2y": "2y",
    "5y": "5y",
    "max": "max",
}

HISTORY_INTERVALS = frozenset({"1m", "5m", "15m", "30m", "60m", "1h", "1d", "1wk", "1mo"})


def normalize_history_range(period: str, interval: str) -> tuple[str, str]:
    """
    Validate a (period, interval) pair for price history.

    Returns:
        (period, interval) in yfinance spelling

    Raises:
        InvalidArgumentError: Unknown period or interval
    """
    resolved = HISTORY_PERIODS.get(period.strip().lower())
    if resolved is None:
        raise InvalidArgumentError(f"Unsupported period '{period}'")
    interval = interval.strip()
    if interval not in HISTORY_INTERVALS:
        raise InvalidArgumentError(f"Unsupported interval '{interval}'")
    return resolved, interval
