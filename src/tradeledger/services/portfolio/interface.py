"""Portfolio service interface (Protocol).

Defines the contract that all portfolio service implementations must satisfy.
Enables dependency injection and makes the service independently testable.
"""

from decimal import Decimal
from typing import Protocol

from tradeledger.services.portfolio.models import Holding, PortfolioView, Transaction


class IPortfolioService(Protocol):
    """
    Portfolio service interface for stock holdings.

    Implements weighted-average cost accounting with a transaction ledger.

    Core responsibilities:
    - Process buys (re-base the average price across all buys)
    - Process sells (reduce quantity, average price unchanged)
    - Settle both against the user's wallet
    - Value holdings against live quotes
    - Serve transaction history

    Example:
        >>> portfolio: IPortfolioService = PortfolioService(store, quotes, wallets)
        >>> portfolio.buy("u1", "AAPL", Decimal("10"), Decimal("100"), "Apple Inc.")
        >>> portfolio.get_portfolio("u1").summary.total_investment
        Decimal('1000')
    """

    # ==================== Trading ====================

    def buy(
        self,
        user: str,
        symbol: str,
        quantity: Decimal,
        price: Decimal,
        company_name: str | None = None,
    ) -> Holding:
        """
        Buy quantity of symbol at price.

        Processing:
        1. Validate inputs (quantity > 0, price > 0)
        2. Debit quantity * price from the wallet
        3. Append a BUY transaction
        4. Create the holding, or re-base its average price:
           new_avg = (old_investment + quantity * price) / (old_quantity + quantity)
        5. Commit all writes as one unit

        Raises:
            InvalidArgumentError: quantity or price not positive
            WalletNotFoundError: User has no wallet
            InsufficientBalanceError: Wallet cannot cover quantity * price

        Example:
            >>> portfolio.buy("u1", "AAPL", Decimal("10"), Decimal("100"))
            >>> holding = portfolio.buy("u1", "AAPL", Decimal("10"), Decimal("200"))
            >>> holding.average_buy_price
            Decimal('150')
        """
        ...

    def sell(
        self,
        user: str,
        symbol: str,
        quantity: Decimal,
        price: Decimal,
    ) -> Holding | None:
        """
        Sell quantity of symbol at price.

        Processing:
        1. Validate inputs and held quantity
        2. Append a SELL transaction (company name taken from the holding)
        3. Reduce quantity; delete the holding when it reaches zero
        4. Credit quantity * price to the wallet
        5. Commit all writes as one unit

        Returns:
            Updated holding, or None when the position was closed

        Raises:
            InvalidArgumentError: quantity or price not positive
            HoldingNotFoundError: No holding for (user, symbol)
            InsufficientQuantityError: quantity > held quantity
            WalletNotFoundError: User has no wallet
        """
        ...

    def buy_at_market(
        self,
        user: str,
        symbol: str,
        quantity: Decimal,
        company_name: str | None = None,
    ) -> Holding:
        """
        Buy at the current quote.

        Raises:
            QuoteUnavailableError: Quote lookup failed (nothing is written)
        """
        ...

    def sell_at_market(self, user: str, symbol: str, quantity: Decimal) -> Holding | None:
        """Sell at the current quote."""
        ...

    # ==================== Queries ====================

    def get_holding(self, user: str, symbol: str) -> Holding | None:
        """Get holding for (user, symbol), or None."""
        ...

    def get_portfolio(self, user: str) -> PortfolioView:
        """
        Value every holding against its current quote.

        Per holding: current_value, profit_loss, profit_loss_percentage.
        Summary: sums, with profit_loss_percentage = 0 when nothing is invested.

        Raises:
            QuoteUnavailableError: Any quote lookup failed
        """
        ...

    def get_transaction_history(
        self,
        user: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Transaction]:
        """
        Get transactions, newest first.

        Args:
            user: Owner
            limit: Maximum rows (None = all)
            offset: Rows to skip

        Raises:
            InvalidArgumentError: Negative limit or offset
        """
        ...

    def get_realized_pnl(self, user: str, symbol: str | None = None) -> Decimal:
        """Sum of realized P&L over all sells (optionally for one symbol)."""
        ...
