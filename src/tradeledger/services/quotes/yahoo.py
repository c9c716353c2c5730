"""Yahoo Finance quote provider (via yfinance).

Quotes come from Ticker.fast_info, bars from Ticker.history and search hits
from yf.Search. Stocks are looked up by ticker as given. Forex pairs in
"EUR/USD" form are mapped to Yahoo's "EURUSD=X" tickers by forex_ticker().
"""

import math
from decimal import Decimal
from typing import Any, Callable, Iterable

import yfinance as yf  # type: ignore[import-untyped]

from tradeledger.errors import QuoteUnavailableError
from tradeledger.services.quotes.models import PriceBar, Quote, SymbolMatch, normalize_history_range
from tradeledger.system import LoggerFactory

logger = LoggerFactory.get_logger()


def forex_ticker(pair: str) -> str:
    """Map "EUR/USD" to Yahoo's "EURUSD=X"."""
    return pair.replace("/", "").upper() + "=X"


def _to_decimal(value: Any) -> Decimal | None:
    """Convert a yfinance numeric field, treating None/NaN as missing."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return Decimal(str(number))


class YahooQuoteProvider:
    """
    Live quotes from Yahoo Finance.

    Args:
        ticker_for: Maps the caller's symbol to a Yahoo ticker
            (identity for stocks, forex_ticker for pairs)

    Example:
        >>> stocks = YahooQuoteProvider()
        >>> fx = YahooQuoteProvider(ticker_for=forex_ticker)
        >>> fx.get_quote("EUR/USD").price
    """

    def __init__(self, ticker_for: Callable[[str], str] | None = None) -> None:
        self._ticker_for = ticker_for or (lambda symbol: symbol.upper())

    def get_quote(self, symbol: str) -> Quote:
        ticker_symbol = self._ticker_for(symbol)
        try:
            info = yf.Ticker(ticker_symbol).fast_info
            price = _to_decimal(info.last_price)
            previous_close = _to_decimal(info.previous_close)
            volume = _to_decimal(getattr(info, "last_volume", None))
            market_cap = _to_decimal(getattr(info, "market_cap", None))
        except Exception as e:
            logger.warning("quotes.yahoo.lookup_failed", symbol=symbol, ticker=ticker_symbol, error=str(e))
            raise QuoteUnavailableError(symbol, "upstream error") from e

        if price is None or price <= 0:
            logger.warning("quotes.yahoo.no_price", symbol=symbol, ticker=ticker_symbol)
            raise QuoteUnavailableError(symbol, "no price returned")

        change = price - previous_close if previous_close else Decimal("0")
        change_percent = (change / previous_close * 100) if previous_close else Decimal("0")

        logger.debug("quotes.yahoo.quote", symbol=symbol, price=str(price))
        return Quote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            volume=int(volume) if volume is not None else 0,
            market_cap=market_cap,
        )

    def get_quotes(self, symbols: Iterable[str]) -> dict[str, Quote]:
        return {symbol: self.get_quote(symbol) for symbol in symbols}

    def search(self, query: str, limit: int = 10) -> list[SymbolMatch]:
        query = query.strip()
        if not query:
            return []
        try:
            hits = yf.Search(query, max_results=limit).quotes
        except Exception as e:
            logger.warning("quotes.yahoo.search_failed", query=query, error=str(e))
            raise QuoteUnavailableError(query, "search failed") from e

        matches = []
        for hit in hits or []:
            symbol = hit.get("symbol")
            if not symbol:
                continue
            matches.append(
                SymbolMatch(
                    symbol=symbol,
                    name=hit.get("shortname") or hit.get("longname") or symbol,
                    exchange=hit.get("exchange"),
                    quote_type=hit.get("quoteType"),
                )
            )
        return matches[:limit]

    def get_history(self, symbol: str, period: str = "1d", interval: str = "5m") -> list[PriceBar]:
        period, interval = normalize_history_range(period, interval)
        ticker_symbol = self._ticker_for(symbol)
        try:
            hist = yf.Ticker(ticker_symbol).history(period=period, interval=interval, auto_adjust=False)
        except Exception as e:
            logger.warning("quotes.yahoo.history_failed", symbol=symbol, ticker=ticker_symbol, error=str(e))
            raise QuoteUnavailableError(symbol, "upstream error") from e

        if hist is None or hist.empty:
            raise QuoteUnavailableError(symbol, "no history")

        bars = []
        for timestamp, row in hist.iterrows():
            prices = [_to_decimal(row[column]) for column in ("Open", "High", "Low", "Close")]
            if any(price is None for price in prices):
                continue  # Yahoo pads halted sessions with NaN rows
            open_, high, low, close = prices
            volume = _to_decimal(row.get("Volume"))
            bars.append(
                PriceBar(
                    timestamp=timestamp,
                    open=open_,
                    high=high,
                    low=low,
                    close=close,
                    volume=int(volume) if volume is not None else 0,
                )
            )

        if not bars:
            raise QuoteUnavailableError(symbol, "no history")
        logger.debug("quotes.yahoo.history", symbol=symbol, period=period, interval=interval, bars=len(bars))
        return bars
