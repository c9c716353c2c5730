"""In-memory quote provider with fixed, settable prices."""

import threading
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from tradeledger.errors import QuoteUnavailableError
from tradeledger.services.quotes.models import PriceBar, Quote, SymbolMatch, normalize_history_range


class StaticQuoteProvider:
    """
    Quote provider backed by a symbol -> price map.

    Used for tests, demos and offline runs. Prices can be moved with
    set_price(); symbols can be forced to fail with mark_unavailable().
    History is whatever set_history() stored; search matches known symbols
    and names.

    Example:
        >>> provider = StaticQuoteProvider({"AAPL": Decimal("150")}, names={"AAPL": "Apple Inc."})
        >>> provider.get_quote("AAPL").price
        Decimal('150')
        >>> provider.set_price("AAPL", Decimal("155"))
        >>> provider.search("apple")[0].symbol
        'AAPL'
    """

    def __init__(
        self,
        prices: Mapping[str, Decimal] | None = None,
        names: Mapping[str, str] | None = None,
    ) -> None:
        self._prices: dict[str, Decimal] = {}
        self._previous: dict[str, Decimal] = {}
        self._names: dict[str, str] = dict(names or {})
        self._history: dict[str, list[PriceBar]] = {}
        self._unavailable: set[str] = set()
        self._lock = threading.Lock()
        for symbol, price in (prices or {}).items():
            self.set_price(symbol, price)

    def set_price(self, symbol: str, price: Decimal) -> None:
        """Set the current price; the old price becomes the change reference."""
        price = Decimal(str(price))
        if price <= 0:
            raise ValueError(f"Price must be positive, got {price}")
        with self._lock:
            if symbol in self._prices:
                self._previous[symbol] = self._prices[symbol]
            self._prices[symbol] = price
            self._unavailable.discard(symbol)

    def set_history(self, symbol: str, bars: Sequence[PriceBar]) -> None:
        """Store bars for symbol (kept oldest first)."""
        with self._lock:
            self._history[symbol] = sorted(bars, key=lambda bar: bar.timestamp)

    def mark_unavailable(self, symbol: str) -> None:
        """Make subsequent lookups for symbol fail."""
        with self._lock:
            self._unavailable.add(symbol)

    def get_quote(self, symbol: str) -> Quote:
        with self._lock:
            if symbol in self._unavailable:
                raise QuoteUnavailableError(symbol, "marked unavailable")
            price = self._prices.get(symbol)
            previous = self._previous.get(symbol, price)

        if price is None or previous is None:
            raise QuoteUnavailableError(symbol, "unknown symbol")

        change = price - previous
        change_percent = (change / previous * 100) if previous else Decimal("0")
        return Quote(symbol=symbol, price=price, change=change, change_percent=change_percent)

    def get_quotes(self, symbols: Iterable[str]) -> dict[str, Quote]:
        return {symbol: self.get_quote(symbol) for symbol in symbols}

    def search(self, query: str, limit: int = 10) -> list[SymbolMatch]:
        needle = query.strip().lower()
        if not needle:
            return []
        with self._lock:
            symbols = sorted(set(self._prices) | set(self._names))
            names = dict(self._names)

        matches = [
            SymbolMatch(symbol=symbol, name=names.get(symbol, symbol))
            for symbol in symbols
            if needle in symbol.lower() or needle in names.get(symbol, "").lower()
        ]
        return matches[:limit]

    def get_history(self, symbol: str, period: str = "1d", interval: str = "5m") -> list[PriceBar]:
        normalize_history_range(period, interval)
        with self._lock:
            if symbol in self._unavailable:
                raise QuoteUnavailableError(symbol, "marked unavailable")
            bars = self._history.get(symbol)

        if not bars:
            raise QuoteUnavailableError(symbol, "no history")
        return list(bars)
