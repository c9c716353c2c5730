"""Portfolio service implementation.

Weighted-average cost accounting for stock holdings, settled against the
user's wallet. Every buy/sell runs under the (user, symbol) and wallet key
locks and commits its transaction, holding and wallet writes together.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from tradeledger.errors import (
    HoldingNotFoundError,
    InsufficientQuantityError,
    InvalidArgumentError,
    require_positive,
)
from tradeledger.services.portfolio.models import (
    ZERO,
    Holding,
    HoldingValuation,
    PortfolioSummary,
    PortfolioView,
    Transaction,
    TransactionType,
)
from tradeledger.services.quotes import IQuoteProvider
from tradeledger.services.storage import ITradingStore, KeyedLock, UnitOfWork, holding_key, wallet_key
from tradeledger.services.wallet import WalletService
from tradeledger.system import LoggerFactory

logger = LoggerFactory.get_logger()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_symbol(symbol: str) -> str:
    """Upper-case and strip a ticker; reject blanks."""
    normalized = (symbol or "").strip().upper()
    if not normalized:
        raise InvalidArgumentError("symbol is required")
    return normalized


class PortfolioService:
    """
    Portfolio service for stock holdings.

    Attributes:
        _store: Trading store (holdings, transactions, wallets)
        _quotes: Stock quote provider
        _wallets: Wallet service used to stage debits/credits
        _locks: Key locks shared with the wallet and forex services

    Example:
        >>> store = InMemoryStore()
        >>> locks = KeyedLock()
        >>> wallets = WalletService(store, locks)
        >>> portfolio = PortfolioService(store, StaticQuoteProvider({"AAPL": Decimal("120")}), wallets, locks)
        >>> wallets.get_balance("u1")
        Decimal('10000')
        >>> portfolio.buy("u1", "AAPL", Decimal("10"), Decimal("100"), "Apple Inc.")
        >>> portfolio.get_portfolio("u1").summary.profit_loss
        Decimal('200')
    """

    def __init__(
        self,
        store: ITradingStore,
        quotes: IQuoteProvider,
        wallets: WalletService,
        locks: KeyedLock | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Initialize portfolio service.

        Args:
            store: Trading store
            quotes: Stock quote provider
            wallets: Wallet service for settlement
            locks: Shared key locks (defaults to a private instance)
            clock: Time source for timestamps
        """
        self._store = store
        self._quotes = quotes
        self._wallets = wallets
        self._locks = locks or KeyedLock()
        self._clock = clock

        logger.debug("portfolio_service.initialized", quotes=type(quotes).__name__)

    # ==================== Trading ====================

    def buy(
        self,
        user: str,
        symbol: str,
        quantity: Decimal,
        price: Decimal,
        company_name: str | None = None,
    ) -> Holding:
        quantity = require_positive("quantity", quantity)
        price = require_positive("price", price)
        symbol = normalize_symbol(symbol)
        total = quantity * price

        with self._locks.hold(holding_key(user, symbol), wallet_key(user)):
            wallet = self._wallets.get_wallet(user)
            existing = self._store.get_holding(user, symbol)
            now = self._clock()

            uow = UnitOfWork()
            wallet = self._wallets.stage_debit(uow, wallet, total)

            name = company_name or (existing.company_name if existing else symbol)
            uow.append_transaction(
                Transaction(
                    user=user,
                    symbol=symbol,
                    company_name=name,
                    type=TransactionType.BUY,
                    quantity=quantity,
                    price=price,
                    total=total,
                    timestamp=now,
                )
            )

            if existing is None:
                holding = Holding(
                    user=user,
                    symbol=symbol,
                    company_name=name,
                    quantity=quantity,
                    average_buy_price=price,
                    total_investment=total,
                    last_updated=now,
                )
            else:
                new_quantity = existing.quantity + quantity
                new_investment = existing.total_investment + total
                holding = existing.model_copy(
                    update={
                        "quantity": new_quantity,
                        "total_investment": new_investment,
                        "average_buy_price": new_investment / new_quantity,
                        "last_updated": now,
                        "version": existing.version + 1,
                    }
                )
            uow.save_holding(holding)
            self._store.commit(uow)

        logger.info(
            "portfolio.buy.executed",
            user=user,
            symbol=symbol,
            quantity=str(quantity),
            price=str(price),
            average_buy_price=str(holding.average_buy_price),
            balance=str(wallet.balance),
        )
        return holding

    def sell(
        self,
        user: str,
        symbol: str,
        quantity: Decimal,
        price: Decimal,
    ) -> Holding | None:
        quantity = require_positive("quantity", quantity)
        price = require_positive("price", price)
        symbol = normalize_symbol(symbol)

        with self._locks.hold(holding_key(user, symbol), wallet_key(user)):
            existing = self._store.get_holding(user, symbol)
            if existing is None:
                logger.warning("portfolio.sell.rejected.no_holding", user=user, symbol=symbol)
                raise HoldingNotFoundError(user, symbol)
            if quantity > existing.quantity:
                logger.warning(
                    "portfolio.sell.rejected.insufficient_quantity",
                    user=user,
                    symbol=symbol,
                    requested=str(quantity),
                    available=str(existing.quantity),
                )
                raise InsufficientQuantityError(symbol, quantity, existing.quantity)

            wallet = self._wallets.get_wallet(user)
            now = self._clock()
            total = quantity * price
            realized_pnl = (price - existing.average_buy_price) * quantity

            uow = UnitOfWork()
            uow.append_transaction(
                Transaction(
                    user=user,
                    symbol=symbol,
                    company_name=existing.company_name,
                    type=TransactionType.SELL,
                    quantity=quantity,
                    price=price,
                    total=total,
                    realized_pnl=realized_pnl,
                    timestamp=now,
                )
            )

            new_quantity = existing.quantity - quantity
            holding: Holding | None
            if new_quantity == 0:
                uow.delete_holding(existing)
                holding = None
            else:
                # Average price is untouched; investment follows the remaining quantity
                holding = existing.model_copy(
                    update={
                        "quantity": new_quantity,
                        "total_investment": new_quantity * existing.average_buy_price,
                        "last_updated": now,
                        "version": existing.version + 1,
                    }
                )
                uow.save_holding(holding)

            wallet = self._wallets.stage_credit(uow, wallet, total)
            self._store.commit(uow)

        logger.info(
            "portfolio.sell.executed",
            user=user,
            symbol=symbol,
            quantity=str(quantity),
            price=str(price),
            realized_pnl=str(realized_pnl),
            position_closed=holding is None,
            balance=str(wallet.balance),
        )
        return holding

    def buy_at_market(
        self,
        user: str,
        symbol: str,
        quantity: Decimal,
        company_name: str | None = None,
    ) -> Holding:
        """Buy at the current quote."""
        symbol = normalize_symbol(symbol)
        quote = self._quotes.get_quote(symbol)
        return self.buy(user, symbol, quantity, quote.price, company_name)

    def sell_at_market(self, user: str, symbol: str, quantity: Decimal) -> Holding | None:
        """Sell at the current quote."""
        symbol = normalize_symbol(symbol)
        quote = self._quotes.get_quote(symbol)
        return self.sell(user, symbol, quantity, quote.price)

    # ==================== Queries ====================

    def get_holding(self, user: str, symbol: str) -> Holding | None:
        return self._store.get_holding(user, normalize_symbol(symbol))

    def get_portfolio(self, user: str) -> PortfolioView:
        holdings = self._store.list_holdings(user)
        if not holdings:
            return PortfolioView()

        quotes = self._quotes.get_quotes([h.symbol for h in holdings])
        valuations = [HoldingValuation.from_holding(h, quotes[h.symbol].price) for h in holdings]
        summary = PortfolioSummary.from_valuations(valuations)

        logger.debug(
            "portfolio.valued",
            user=user,
            holdings=len(valuations),
            current_value=str(summary.current_value),
        )
        return PortfolioView(holdings=valuations, summary=summary)

    def get_transaction_history(
        self,
        user: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Transaction]:
        if limit is not None and limit < 0:
            raise InvalidArgumentError(f"limit must be >= 0, got {limit}")
        if offset < 0:
            raise InvalidArgumentError(f"offset must be >= 0, got {offset}")
        return self._store.list_transactions(user, limit=limit, offset=offset)

    def get_realized_pnl(self, user: str, symbol: str | None = None) -> Decimal:
        wanted = normalize_symbol(symbol) if symbol is not None else None
        total = ZERO
        for tx in self._store.list_transactions(user):
            if tx.type != TransactionType.SELL or tx.realized_pnl is None:
                continue
            if wanted is not None and tx.symbol != wanted:
                continue
            total += tx.realized_pnl
        return total
