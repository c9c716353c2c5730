"""Unit of work: writes staged by one operation, committed all-or-nothing.

Services never write to the store directly. They stage every change of a
logical operation (transaction row, holding, wallet, forex trade) and hand
the unit to ITradingStore.commit(), which checks each row's expected
version and then applies everything or nothing.

Version rules:
- save: stored version must equal record.version - 1 (0 means "absent")
- delete: stored version must equal record.version
- transactions are append-only and carry no version
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tradeledger.services.forex.models import ForexTrade
    from tradeledger.services.portfolio.models import Holding, Transaction
    from tradeledger.services.wallet.models import Wallet


class RecordKind(str, Enum):
    """Collection a staged write targets."""

    HOLDING = "holding"
    TRANSACTION = "transaction"
    WALLET = "wallet"
    FOREX_TRADE = "forex_trade"


class WriteOp(str, Enum):
    """Staged write operation."""

    SAVE = "save"
    DELETE = "delete"
    APPEND = "append"


@dataclass(frozen=True)
class StagedWrite:
    """One pending change.

    Attributes:
        kind: Target collection
        op: Save, delete or append
        key: Record key within the collection
        record: The record to write (the last known version for deletes)
        expected_version: Version the store must hold for the write to apply
            (None for appends)
    """

    kind: RecordKind
    op: WriteOp
    key: tuple[str, ...]
    record: Any
    expected_version: int | None


class UnitOfWork:
    """
    Collects staged writes for a single commit.

    Example:
        >>> uow = UnitOfWork()
        >>> uow.append_transaction(tx)
        >>> uow.save_holding(holding)
        >>> uow.save_wallet(wallet)
        >>> store.commit(uow)
    """

    def __init__(self) -> None:
        self._writes: list[StagedWrite] = []

    def save_holding(self, holding: "Holding") -> None:
        self._writes.append(
            StagedWrite(
                kind=RecordKind.HOLDING,
                op=WriteOp.SAVE,
                key=(holding.user, holding.symbol),
                record=holding,
                expected_version=holding.version - 1,
            )
        )

    def delete_holding(self, holding: "Holding") -> None:
        self._writes.append(
            StagedWrite(
                kind=RecordKind.HOLDING,
                op=WriteOp.DELETE,
                key=(holding.user, holding.symbol),
                record=holding,
                expected_version=holding.version,
            )
        )

    def append_transaction(self, transaction: "Transaction") -> None:
        self._writes.append(
            StagedWrite(
                kind=RecordKind.TRANSACTION,
                op=WriteOp.APPEND,
                key=(transaction.user, transaction.transaction_id),
                record=transaction,
                expected_version=None,
            )
        )

    def save_wallet(self, wallet: "Wallet") -> None:
        self._writes.append(
            StagedWrite(
                kind=RecordKind.WALLET,
                op=WriteOp.SAVE,
                key=(wallet.user_id,),
                record=wallet,
                expected_version=wallet.version - 1,
            )
        )

    def save_trade(self, trade: "ForexTrade") -> None:
        self._writes.append(
            StagedWrite(
                kind=RecordKind.FOREX_TRADE,
                op=WriteOp.SAVE,
                key=(trade.trade_id,),
                record=trade,
                expected_version=trade.version - 1,
            )
        )

    @property
    def writes(self) -> list[StagedWrite]:
        """Staged writes in staging order."""
        return list(self._writes)

    def __len__(self) -> int:
        return len(self._writes)

    def __bool__(self) -> bool:
        return bool(self._writes)
