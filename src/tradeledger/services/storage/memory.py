"""In-memory trading store.

Holds every collection in dicts behind a single re-entrant lock, so a
commit is atomic with respect to all reads and other commits.
"""

import threading
from itertools import count
from typing import TYPE_CHECKING, Any

from tradeledger.errors import ConflictError
from tradeledger.services.storage.unit_of_work import RecordKind, StagedWrite, UnitOfWork, WriteOp
from tradeledger.system import LoggerFactory

if TYPE_CHECKING:
    from tradeledger.services.forex.models import ForexTrade, TradeStatus
    from tradeledger.services.portfolio.models import Holding, Transaction
    from tradeledger.services.wallet.models import Wallet

logger = LoggerFactory.get_logger()


class InMemoryStore:
    """
    Process-local implementation of ITradingStore.

    Example:
        >>> store = InMemoryStore()
        >>> uow = UnitOfWork()
        >>> uow.save_wallet(Wallet(user_id="u1", balance=Decimal("10000")))
        >>> store.commit(uow)
        >>> store.get_wallet("u1").balance
        Decimal('10000')
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._holdings: dict[tuple[str, ...], "Holding"] = {}
        self._wallets: dict[tuple[str, ...], "Wallet"] = {}
        self._trades: dict[tuple[str, ...], "ForexTrade"] = {}
        # user -> [(sequence, transaction)], in insertion order
        self._transactions: dict[str, list[tuple[int, "Transaction"]]] = {}
        self._sequence = count()
        self._commits = 0

    # ==================== Holdings ====================

    def get_holding(self, user: str, symbol: str) -> "Holding | None":
        with self._lock:
            return self._holdings.get((user, symbol))

    def list_holdings(self, user: str) -> "list[Holding]":
        with self._lock:
            rows = [h for (owner, _), h in self._holdings.items() if owner == user]
        return sorted(rows, key=lambda h: h.symbol)

    # ==================== Transactions ====================

    def list_transactions(
        self,
        user: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> "list[Transaction]":
        with self._lock:
            rows = list(self._transactions.get(user, []))

        # Newest first; ties on timestamp fall back to insertion order
        rows.sort(key=lambda item: (item[1].timestamp, item[0]), reverse=True)
        transactions = [tx for _, tx in rows]
        if limit is None:
            return transactions[offset:]
        return transactions[offset : offset + limit]

    # ==================== Wallets ====================

    def get_wallet(self, user_id: str) -> "Wallet | None":
        with self._lock:
            return self._wallets.get((user_id,))

    # ==================== Forex ====================

    def get_trade(self, trade_id: str) -> "ForexTrade | None":
        with self._lock:
            return self._trades.get((trade_id,))

    def list_trades(self, user_id: str, status: "TradeStatus | None" = None) -> "list[ForexTrade]":
        with self._lock:
            rows = [t for t in self._trades.values() if t.user_id == user_id]
        if status is not None:
            rows = [t for t in rows if t.status == status]
        return sorted(rows, key=lambda t: t.created_at, reverse=True)

    # ==================== Writes ====================

    def commit(self, unit: UnitOfWork) -> None:
        writes = unit.writes
        with self._lock:
            pending: dict[tuple[RecordKind, tuple[str, ...]], int] = {}
            for write in writes:
                self._check_version(write, pending)
            for write in writes:
                self._apply(write)
            self._commits += 1
        logger.debug("store.committed", writes=len(writes))

    @property
    def commit_count(self) -> int:
        """Number of successful commits."""
        return self._commits

    def _collection(self, kind: RecordKind) -> dict[tuple[str, ...], Any]:
        if kind == RecordKind.HOLDING:
            return self._holdings
        if kind == RecordKind.WALLET:
            return self._wallets
        if kind == RecordKind.FOREX_TRADE:
            return self._trades
        raise ValueError(f"No keyed collection for {kind}")

    def _check_version(self, write: StagedWrite, pending: dict[tuple[RecordKind, tuple[str, ...]], int]) -> None:
        """Check write against the stored version, or the version staged earlier in the same unit."""
        if write.op == WriteOp.APPEND:
            return
        slot = (write.kind, write.key)
        if slot in pending:
            current_version = pending[slot]
        else:
            current = self._collection(write.kind).get(write.key)
            current_version = current.version if current is not None else 0
        if current_version != write.expected_version:
            logger.warning(
                "store.version_conflict",
                kind=write.kind.value,
                key=write.key,
                expected=write.expected_version,
                actual=current_version,
            )
            raise ConflictError(
                f"{write.kind.value} {'/'.join(write.key)} was modified concurrently "
                f"(expected version {write.expected_version}, found {current_version})"
            )
        pending[slot] = 0 if write.op == WriteOp.DELETE else write.record.version

    def _apply(self, write: StagedWrite) -> None:
        if write.op == WriteOp.APPEND:
            user = write.record.user
            self._transactions.setdefault(user, []).append((next(self._sequence), write.record))
        elif write.op == WriteOp.SAVE:
            self._collection(write.kind)[write.key] = write.record
        elif write.op == WriteOp.DELETE:
            del self._collection(write.kind)[write.key]
