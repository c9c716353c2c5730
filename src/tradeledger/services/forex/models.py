"""Data models for forex service."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tradeledger.services.wallet.models import Wallet


class TradeSide(str, Enum):
    """Direction of a forex trade."""

    BUY = "BUY"
    SELL = "SELL"

    @property
    def multiplier(self) -> int:
        """+1 for BUY, -1 for SELL (sign applied to the price move)."""
        return 1 if self is TradeSide.BUY else -1


class TradeStatus(str, Enum):
    """Forex trade lifecycle: OPEN -> CLOSED, exactly once."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class ForexPair(BaseModel):
    """Supported currency pair."""

    symbol: str
    name: str

    model_config = ConfigDict(frozen=True)


FOREX_PAIRS: tuple[ForexPair, ...] = (
    ForexPair(symbol="EUR/USD", name="Euro / US Dollar"),
    ForexPair(symbol="GBP/USD", name="British Pound / US Dollar"),
    ForexPair(symbol="USD/JPY", name="US Dollar / Japanese Yen"),
    ForexPair(symbol="USD/CHF", name="US Dollar / Swiss Franc"),
    ForexPair(symbol="AUD/USD", name="Australian Dollar / US Dollar"),
    ForexPair(symbol="USD/CAD", name="US Dollar / Canadian Dollar"),
    ForexPair(symbol="NZD/USD", name="New Zealand Dollar / US Dollar"),
    ForexPair(symbol="EUR/GBP", name="Euro / British Pound"),
    ForexPair(symbol="EUR/JPY", name="Euro / Japanese Yen"),
    ForexPair(symbol="GBP/JPY", name="British Pound / Japanese Yen"),
)

SUPPORTED_PAIRS: frozenset[str] = frozenset(pair.symbol for pair in FOREX_PAIRS)


class ForexPairQuote(BaseModel):
    """Supported pair with its current price."""

    symbol: str
    name: str
    price: Decimal
    change: Decimal

    model_config = ConfigDict(frozen=True)


class ForexTrade(BaseModel):
    """
    One forex position.

    Created OPEN with the wallet debited by amount (escrow). Closed exactly
    once, at which point profit_loss is fixed and amount + profit_loss is
    credited back.

    Attributes:
        trade_id: Unique identifier
        user_id: Owner
        pair: Currency pair, e.g. "EUR/USD"
        type: BUY or SELL
        amount: Notional escrowed from the wallet (positive)
        price: Entry price
        status: OPEN or CLOSED
        profit_loss: 0 until closed
        close_price: Exit price, set on close
        created_at: Open time
        closed_at: Close time
        version: Optimistic concurrency counter (1 on creation)
    """

    trade_id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    pair: str
    type: TradeSide
    amount: Decimal
    price: Decimal
    status: TradeStatus = TradeStatus.OPEN
    profit_loss: Decimal = Decimal("0")
    close_price: Decimal | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    closed_at: datetime | None = None
    version: int = 1

    @field_validator("amount", "price")
    @classmethod
    def validate_positive(cls, v: Decimal) -> Decimal:
        """Validate amount and entry price are positive."""
        if v <= 0:
            raise ValueError(f"Trade amount and price must be positive, got {v}")
        return v

    @property
    def is_open(self) -> bool:
        return self.status == TradeStatus.OPEN

    model_config = ConfigDict(frozen=True)


class TradeResult(BaseModel):
    """Trade after open/close plus the resulting wallet balance."""

    trade: ForexTrade
    new_balance: Decimal

    @classmethod
    def of(cls, trade: ForexTrade, wallet: Wallet) -> "TradeResult":
        return cls(trade=trade, new_balance=wallet.balance)

    model_config = ConfigDict(frozen=True)
