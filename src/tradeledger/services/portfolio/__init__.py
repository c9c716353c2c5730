"""Portfolio service for stock holdings and the transaction ledger.

This module provides weighted-average cost accounting: every buy re-bases
the average price across the full historical cost, sells leave it alone.
Buys debit and sells credit the user's wallet in the same commit.

Key components:
- PortfolioService: Main service implementation
- IPortfolioService: Protocol interface
- Models: Holding, Transaction, HoldingValuation, PortfolioSummary, PortfolioView

Example:
    >>> from tradeledger.services.portfolio import PortfolioService
    >>> from decimal import Decimal
    >>>
    >>> portfolio = PortfolioService(store, quotes, wallets, locks)
    >>> portfolio.buy("u1", "AAPL", Decimal("10"), Decimal("100"), "Apple Inc.")
    >>> portfolio.buy("u1", "AAPL", Decimal("10"), Decimal("200"))
    >>> holding = portfolio.sell("u1", "AAPL", Decimal("5"), Decimal("300"))
    >>> holding.quantity, holding.average_buy_price, holding.total_investment
    (Decimal('15'), Decimal('150'), Decimal('2250'))
"""

from tradeledger.services.portfolio.interface import IPortfolioService
from tradeledger.services.portfolio.models import (
    Holding,
    HoldingValuation,
    PortfolioSummary,
    PortfolioView,
    Transaction,
    TransactionType,
)
from tradeledger.services.portfolio.service import PortfolioService, normalize_symbol

__all__ = [
    # Service
    "IPortfolioService",
    "PortfolioService",
    "normalize_symbol",
    # Models
    "Holding",
    "HoldingValuation",
    "PortfolioSummary",
    "PortfolioView",
    "Transaction",
    "TransactionType",
]
