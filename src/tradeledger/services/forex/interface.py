"""Forex service interface (Protocol)."""

from decimal import Decimal
from typing import Protocol

from tradeledger.services.forex.models import ForexPairQuote, ForexTrade, TradeResult, TradeSide, TradeStatus


class IForexService(Protocol):
    """
    Forex position service.

    Positions escrow their notional from the wallet when opened and return
    it, adjusted by a linear P&L, when closed.
    """

    def get_pairs(self) -> list[ForexPairQuote]:
        """
        Every supported pair with its current price.

        Raises:
            QuoteUnavailableError: Any pair's quote failed
        """
        ...

    def execute_trade(
        self,
        user_id: str,
        pair: str,
        amount: Decimal,
        trade_type: TradeSide | str,
    ) -> TradeResult:
        """
        Open a position at the current price and debit amount.

        Raises:
            InvalidArgumentError: amount <= 0, unknown pair or type
            QuoteUnavailableError: Price lookup failed
            WalletNotFoundError: User has no wallet
            InsufficientBalanceError: balance < amount

        Example:
            >>> result = forex.execute_trade("u1", "EUR/USD", Decimal("1000"), "BUY")
            >>> result.new_balance
            Decimal('9000')
        """
        ...

    def close_trade(self, user_id: str, trade_id: str) -> TradeResult:
        """
        Close an OPEN position at the current price.

        profit_loss = (current - entry) * amount * (+1 BUY / -1 SELL),
        rounded to cents. The wallet is credited amount + profit_loss.

        Raises:
            TradeNotFoundError: No OPEN trade with this id for this user
            QuoteUnavailableError: Price lookup failed (trade stays OPEN)
            WalletNotFoundError: User has no wallet
        """
        ...

    def get_user_trades(self, user_id: str, status: TradeStatus | None = None) -> list[ForexTrade]:
        """Trades of user, newest first."""
        ...
