"""Forex service implementation."""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

from tradeledger.errors import InvalidArgumentError, TradeNotFoundError, require_positive
from tradeledger.services.forex.models import (
    FOREX_PAIRS,
    SUPPORTED_PAIRS,
    ForexPairQuote,
    ForexTrade,
    TradeResult,
    TradeSide,
    TradeStatus,
)
from tradeledger.services.quotes import IQuoteProvider
from tradeledger.services.storage import ITradingStore, KeyedLock, UnitOfWork, trade_key, wallet_key
from tradeledger.services.wallet import WalletService
from tradeledger.system import LoggerFactory

logger = LoggerFactory.get_logger()

CENT = Decimal("0.01")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def calculate_profit_loss(side: TradeSide, entry_price: Decimal, current_price: Decimal, amount: Decimal) -> Decimal:
    """
    Linear forex P&L: price move times notional, signed by side, rounded to cents.

    This multiplies a price delta by the notional amount rather than
    computing a percentage return; the simplification is kept on purpose.

    Example:
        >>> calculate_profit_loss(TradeSide.BUY, Decimal("1.2"), Decimal("1.3"), Decimal("1000"))
        Decimal('100.00')
    """
    raw = (current_price - entry_price) * amount * side.multiplier
    return raw.quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_pair(pair: str) -> str:
    """Upper-case a pair and check it is supported."""
    normalized = (pair or "").strip().upper()
    if normalized not in SUPPORTED_PAIRS:
        raise InvalidArgumentError(f"Unsupported forex pair: {pair!r}")
    return normalized


def parse_side(trade_type: TradeSide | str) -> TradeSide:
    """Accept a TradeSide or its name in any case."""
    if isinstance(trade_type, TradeSide):
        return trade_type
    try:
        return TradeSide(str(trade_type).strip().upper())
    except ValueError as e:
        raise InvalidArgumentError(f"type must be BUY or SELL, got {trade_type!r}") from e


class ForexService:
    """
    Forex service backed by an ITradingStore and a forex quote provider.

    Example:
        >>> forex = ForexService(store, StaticQuoteProvider({"EUR/USD": Decimal("1.2")}), wallets, locks)
        >>> opened = forex.execute_trade("u1", "EUR/USD", Decimal("1000"), TradeSide.BUY)
        >>> quotes.set_price("EUR/USD", Decimal("1.3"))
        >>> forex.close_trade("u1", opened.trade.trade_id).new_balance
        Decimal('10100.00')
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
        Initialize forex service.

        Args:
            store: Trading store
            quotes: Forex quote provider (keyed by pair, e.g. "EUR/USD")
            wallets: Wallet service for escrow
            locks: Shared key locks (defaults to a private instance)
            clock: Time source for timestamps
        """
        self._store = store
        self._quotes = quotes
        self._wallets = wallets
        self._locks = locks or KeyedLock()
        self._clock = clock

        logger.debug("forex_service.initialized", pairs=len(FOREX_PAIRS))

    # ==================== Queries ====================

    def get_pairs(self) -> list[ForexPairQuote]:
        quotes = self._quotes.get_quotes([pair.symbol for pair in FOREX_PAIRS])
        return [
            ForexPairQuote(
                symbol=pair.symbol,
                name=pair.name,
                price=quotes[pair.symbol].price,
                change=quotes[pair.symbol].change_percent,
            )
            for pair in FOREX_PAIRS
        ]

    def get_user_trades(self, user_id: str, status: TradeStatus | None = None) -> list[ForexTrade]:
        return self._store.list_trades(user_id, status=status)

    # ==================== Trading ====================

    def execute_trade(
        self,
        user_id: str,
        pair: str,
        amount: Decimal,
        trade_type: TradeSide | str,
    ) -> TradeResult:
        amount = require_positive("amount", amount)
        pair = normalize_pair(pair)
        side = parse_side(trade_type)

        with self._locks.hold(wallet_key(user_id)):
            wallet = self._wallets.get_wallet(user_id)
            price = self._quotes.get_quote(pair).price

            uow = UnitOfWork()
            wallet = self._wallets.stage_debit(uow, wallet, amount)
            trade = ForexTrade(
                user_id=user_id,
                pair=pair,
                type=side,
                amount=amount,
                price=price,
                created_at=self._clock(),
            )
            uow.save_trade(trade)
            self._store.commit(uow)

        logger.info(
            "forex.trade.opened",
            user_id=user_id,
            trade_id=trade.trade_id,
            pair=pair,
            side=side.value,
            amount=str(amount),
            price=str(price),
            balance=str(wallet.balance),
        )
        return TradeResult.of(trade, wallet)

    def close_trade(self, user_id: str, trade_id: str) -> TradeResult:
        with self._locks.hold(trade_key(trade_id), wallet_key(user_id)):
            trade = self._store.get_trade(trade_id)
            if trade is None or trade.user_id != user_id or not trade.is_open:
                logger.warning("forex.close.rejected.not_open", user_id=user_id, trade_id=trade_id)
                raise TradeNotFoundError(trade_id)

            wallet = self._wallets.get_wallet(user_id)
            current_price = self._quotes.get_quote(trade.pair).price
            profit_loss = calculate_profit_loss(trade.type, trade.price, current_price, trade.amount)
            now = self._clock()

            closed = trade.model_copy(
                update={
                    "status": TradeStatus.CLOSED,
                    "profit_loss": profit_loss,
                    "close_price": current_price,
                    "closed_at": now,
                    "version": trade.version + 1,
                }
            )
            uow = UnitOfWork()
            uow.save_trade(closed)
            wallet = self._wallets.stage_credit(uow, wallet, trade.amount + profit_loss)
            self._store.commit(uow)

        logger.info(
            "forex.trade.closed",
            user_id=user_id,
            trade_id=trade_id,
            pair=closed.pair,
            entry_price=str(closed.price),
            close_price=str(current_price),
            profit_loss=str(profit_loss),
            balance=str(wallet.balance),
        )
        return TradeResult.of(closed, wallet)
