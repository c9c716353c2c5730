"""Data models for portfolio service.

Defines the entities for weighted-average cost accounting:
- Holding: Current position of one user in one symbol
- Transaction: Append-only record of a buy or sell
- HoldingValuation: Holding marked to the live quote
- PortfolioSummary: Aggregates across all holdings
- PortfolioView: Result of get_portfolio()
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class TransactionType(str, Enum):
    """Side of a stock transaction."""

    BUY = "BUY"
    SELL = "SELL"


class Holding(BaseModel):
    """
    A user's position in one symbol.

    Exactly one Holding exists per (user, symbol). A holding whose quantity
    would reach zero is deleted instead, so quantity is always positive here.

    Attributes:
        user: Owner (immutable)
        symbol: Instrument ticker (immutable)
        company_name: Display label
        quantity: Units held
        average_buy_price: Weighted average cost per unit across all buys
        total_investment: quantity * average_buy_price, maintained incrementally
        last_updated: Last mutation time
        version: Optimistic concurrency counter (1 on creation)

    Example:
        >>> holding = Holding(
        ...     user="u1",
        ...     symbol="AAPL",
        ...     company_name="Apple Inc.",
        ...     quantity=Decimal("10"),
        ...     average_buy_price=Decimal("100"),
        ...     total_investment=Decimal("1000"),
        ...     last_updated=datetime.now(timezone.utc),
        ... )
    """

    user: str
    symbol: str
    company_name: str
    quantity: Decimal
    average_buy_price: Decimal
    total_investment: Decimal
    last_updated: datetime
    version: int = 1

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v: Decimal) -> Decimal:
        """Validate quantity is positive (empty holdings are deleted)."""
        if v <= 0:
            raise ValueError(f"Holding quantity must be positive, got {v}")
        return v

    @field_validator("average_buy_price")
    @classmethod
    def validate_average_buy_price(cls, v: Decimal) -> Decimal:
        """Validate average price is positive."""
        if v <= 0:
            raise ValueError(f"Average buy price must be positive, got {v}")
        return v

    model_config = ConfigDict(frozen=True)


class Transaction(BaseModel):
    """
    Single execution in the transaction ledger.

    Never mutated or deleted after creation.

    Attributes:
        transaction_id: Unique identifier
        user: Owner
        symbol: Instrument ticker
        company_name: Display label at execution time
        type: BUY or SELL
        quantity: Units traded (positive)
        price: Execution price per unit (positive)
        total: quantity * price
        realized_pnl: (price - average_buy_price) * quantity for sells, None for buys
        timestamp: Execution time
    """

    transaction_id: str = Field(default_factory=lambda: str(uuid4()))
    user: str
    symbol: str
    company_name: str
    type: TransactionType
    quantity: Decimal
    price: Decimal
    total: Decimal
    realized_pnl: Decimal | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("quantity", "price")
    @classmethod
    def validate_positive(cls, v: Decimal) -> Decimal:
        """Validate quantity and price are positive."""
        if v <= 0:
            raise ValueError(f"Transaction quantity and price must be positive, got {v}")
        return v

    model_config = ConfigDict(frozen=True)


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100, or 0 when whole is 0."""
    if whole == 0:
        return ZERO
    return part / whole * HUNDRED


class HoldingValuation(BaseModel):
    """Holding marked to market with the current quote."""

    user: str
    symbol: str
    company_name: str
    quantity: Decimal
    average_buy_price: Decimal
    total_investment: Decimal
    last_updated: datetime
    current_price: Decimal
    current_value: Decimal
    profit_loss: Decimal
    profit_loss_percentage: Decimal

    @classmethod
    def from_holding(cls, holding: Holding, current_price: Decimal) -> "HoldingValuation":
        """Value a holding at current_price."""
        current_value = holding.quantity * current_price
        profit_loss = current_value - holding.total_investment
        return cls(
            user=holding.user,
            symbol=holding.symbol,
            company_name=holding.company_name,
            quantity=holding.quantity,
            average_buy_price=holding.average_buy_price,
            total_investment=holding.total_investment,
            last_updated=holding.last_updated,
            current_price=current_price,
            current_value=current_value,
            profit_loss=profit_loss,
            profit_loss_percentage=percentage(profit_loss, holding.total_investment),
        )

    model_config = ConfigDict(frozen=True)


class PortfolioSummary(BaseModel):
    """Sums across all holdings. profit_loss_percentage is 0 for an empty portfolio."""

    total_investment: Decimal = ZERO
    current_value: Decimal = ZERO
    profit_loss: Decimal = ZERO
    profit_loss_percentage: Decimal = ZERO

    @classmethod
    def from_valuations(cls, valuations: list[HoldingValuation]) -> "PortfolioSummary":
        total_investment = sum((v.total_investment for v in valuations), start=ZERO)
        current_value = sum((v.current_value for v in valuations), start=ZERO)
        profit_loss = sum((v.profit_loss for v in valuations), start=ZERO)
        return cls(
            total_investment=total_investment,
            current_value=current_value,
            profit_loss=profit_loss,
            profit_loss_percentage=percentage(profit_loss, total_investment),
        )

    model_config = ConfigDict(frozen=True)


class PortfolioView(BaseModel):
    """Result of get_portfolio(): valued holdings plus summary."""

    holdings: list[HoldingValuation] = Field(default_factory=list)
    summary: PortfolioSummary = Field(default_factory=PortfolioSummary)

    model_config = ConfigDict(frozen=True)
