"""Trading store interface (Protocol).

Persistence is an external collaborator: a document store reachable by
simple key lookups, plus an atomic multi-row commit. InMemoryStore is the
reference implementation; a database-backed store only has to satisfy
this contract.
"""

from typing import TYPE_CHECKING, Protocol

from tradeledger.services.storage.unit_of_work import UnitOfWork

if TYPE_CHECKING:
    from tradeledger.services.forex.models import ForexTrade, TradeStatus
    from tradeledger.services.portfolio.models import Holding, Transaction
    from tradeledger.services.wallet.models import Wallet


class ITradingStore(Protocol):
    """
    Storage for holdings, transactions, wallets and forex trades.

    Reads return immutable records. All writes go through commit().
    """

    # ==================== Holdings ====================

    def get_holding(self, user: str, symbol: str) -> "Holding | None":
        """Get holding for (user, symbol), or None."""
        ...

    def list_holdings(self, user: str) -> "list[Holding]":
        """All holdings of user, ordered by symbol."""
        ...

    # ==================== Transactions ====================

    def list_transactions(
        self,
        user: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> "list[Transaction]":
        """
        Transactions of user, newest first.

        Args:
            user: Owner
            limit: Maximum rows to return (None = all)
            offset: Rows to skip from the newest
        """
        ...

    # ==================== Wallets ====================

    def get_wallet(self, user_id: str) -> "Wallet | None":
        """Get wallet of user, or None."""
        ...

    # ==================== Forex ====================

    def get_trade(self, trade_id: str) -> "ForexTrade | None":
        """Get forex trade by id, or None."""
        ...

    def list_trades(self, user_id: str, status: "TradeStatus | None" = None) -> "list[ForexTrade]":
        """Forex trades of user, newest first, optionally filtered by status."""
        ...

    # ==================== Writes ====================

    def commit(self, unit: UnitOfWork) -> None:
        """
        Apply every staged write atomically.

        Raises:
            ConflictError: A row's stored version differs from the expected
                version. Nothing is applied.
        """
        ...
