"""Wallet model."""

from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Wallet(BaseModel):
    """
    Cash balance of one user.

    Immutable: every mutation produces a copy with version + 1, which the
    store checks on commit.

    Attributes:
        user_id: Owner (one wallet per user)
        balance: Available cash, never negative
        created_at: When the wallet was provisioned
        updated_at: Last balance change
        version: Optimistic concurrency counter (1 on creation)
    """

    user_id: str
    balance: Decimal
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    version: int = 1

    @field_validator("balance")
    @classmethod
    def validate_balance(cls, v: Decimal) -> Decimal:
        """Validate balance is non-negative."""
        if v < 0:
            raise ValueError(f"Wallet balance cannot be negative, got {v}")
        return v

    def with_balance(self, balance: Decimal, timestamp: datetime) -> "Wallet":
        """Return the next version of this wallet with a new balance."""
        return Wallet(
            user_id=self.user_id,
            balance=balance,
            created_at=self.created_at,
            updated_at=timestamp,
            version=self.version + 1,
        )

    model_config = ConfigDict(frozen=True)
