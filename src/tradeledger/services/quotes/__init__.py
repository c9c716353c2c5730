"""Quote providers for stock and forex prices.

Key components:
- IQuoteProvider: Protocol every provider satisfies
- Quote, PriceBar, SymbolMatch: Market data models
- StaticQuoteProvider: Fixed prices (tests, offline)
- YahooQuoteProvider: Live prices, history and search via yfinance
- TimeoutQuoteProvider: Deadline wrapper around any provider
"""

from tradeledger.services.quotes.interface import IQuoteProvider
from tradeledger.services.quotes.models import (
    HISTORY_INTERVALS,
    HISTORY_PERIODS,
    PriceBar,
    Quote,
    SymbolMatch,
    normalize_history_range,
)
from tradeledger.services.quotes.static import StaticQuoteProvider
from tradeledger.services.quotes.timeout import TimeoutQuoteProvider
from tradeledger.services.quotes.yahoo import YahooQuoteProvider, forex_ticker

__all__ = [
    "HISTORY_INTERVALS",
    "HISTORY_PERIODS",
    "IQuoteProvider",
    "PriceBar",
    "Quote",
    "StaticQuoteProvider",
    "SymbolMatch",
    "TimeoutQuoteProvider",
    "YahooQuoteProvider",
    "forex_ticker",
    "normalize_history_range",
]
