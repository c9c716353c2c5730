"""Quote provider interface (Protocol).

Market data is an external collaborator. Services depend only on this
contract, so tests inject StaticQuoteProvider and production wires
YahooQuoteProvider wrapped in TimeoutQuoteProvider.
"""

from typing import Iterable, Protocol

from tradeledger.services.quotes.models import PriceBar, Quote, SymbolMatch


class IQuoteProvider(Protocol):
    """
    Protocol for quote providers.

    Contract:
    - get_quote() returns a fresh Quote with a positive price.
    - Unknown symbols and upstream failures raise QuoteUnavailableError.
      Providers must never return stale or zero prices instead of failing.
    - get_history() returns bars oldest first; search() may return nothing.

    Example:
        >>> quote = provider.get_quote("AAPL")
        >>> quote.price
        Decimal('189.84')
    """

    def get_quote(self, symbol: str) -> Quote:
        """
        Get current quote for symbol.

        Raises:
            QuoteUnavailableError: Unknown symbol or upstream unavailable
        """
        ...

    def get_quotes(self, symbols: Iterable[str]) -> dict[str, Quote]:
        """
        Get quotes for several symbols.

        Fails as a whole if any single lookup fails.

        Returns:
            Dict mapping symbol -> Quote
        """
        ...

    def search(self, query: str, limit: int = 10) -> list[SymbolMatch]:
        """
        Find symbols matching free text (ticker or company name).

        Returns:
            Matches in provider relevance order, at most limit

        Raises:
            QuoteUnavailableError: Upstream unavailable
        """
        ...

    def get_history(self, symbol: str, period: str = "1d", interval: str = "5m") -> list[PriceBar]:
        """
        Get OHLCV bars for symbol, oldest first.

        Args:
            symbol: Ticker or forex pair
            period: Lookback window (see HISTORY_PERIODS)
            interval: Bar size (see HISTORY_INTERVALS)

        Raises:
            InvalidArgumentError: Unsupported period or interval
            QuoteUnavailableError: No history for symbol or upstream unavailable
        """
        ...
