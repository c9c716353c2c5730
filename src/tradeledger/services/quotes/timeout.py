"""Deadline wrapper for quote providers.

Upstream market data can hang. TimeoutQuoteProvider bounds every lookup
and turns a timeout (or any non-domain failure) into QuoteUnavailableError.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Iterable, TypeVar

from tradeledger.errors import QuoteUnavailableError, TradeLedgerError
from tradeledger.services.quotes.interface import IQuoteProvider
from tradeledger.services.quotes.models import PriceBar, Quote, SymbolMatch
from tradeledger.system import LoggerFactory

logger = LoggerFactory.get_logger()

T = TypeVar("T")


class TimeoutQuoteProvider:
    """
    Wrap a provider so each lookup fails after timeout_seconds.

    The slow call keeps running on its worker thread; its result is discarded.
    After shutdown() every lookup raises QuoteUnavailableError.

    Example:
        >>> provider = TimeoutQuoteProvider(YahooQuoteProvider(), timeout_seconds=5)
    """

    def __init__(self, inner: IQuoteProvider, timeout_seconds: float = 5.0, max_workers: int = 8) -> None:
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self._inner = inner
        self._timeout = timeout_seconds
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="quote")

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    def get_quote(self, symbol: str) -> Quote:
        return self._wait(symbol, self._submit(symbol, self._inner.get_quote, symbol))

    def get_quotes(self, symbols: Iterable[str]) -> dict[str, Quote]:
        futures = {symbol: self._submit(symbol, self._inner.get_quote, symbol) for symbol in symbols}
        return {symbol: self._wait(symbol, future) for symbol, future in futures.items()}

    def search(self, query: str, limit: int = 10) -> list[SymbolMatch]:
        return self._wait(query, self._submit(query, self._inner.search, query, limit))

    def get_history(self, symbol: str, period: str = "1d", interval: str = "5m") -> list[PriceBar]:
        return self._wait(symbol, self._submit(symbol, self._inner.get_history, symbol, period, interval))

    def shutdown(self) -> None:
        """Stop the worker pool without waiting for in-flight lookups."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _submit(self, symbol: str, fn: Callable[..., T], *args: Any) -> "Future[T]":
        try:
            return self._executor.submit(fn, *args)
        except RuntimeError as e:
            logger.warning("quotes.provider_closed", symbol=symbol)
            raise QuoteUnavailableError(symbol, "provider shut down") from e

    def _wait(self, symbol: str, future: "Future[T]") -> T:
        try:
            return future.result(timeout=self._timeout)
        except FutureTimeoutError as e:
            logger.warning("quotes.timeout", symbol=symbol, timeout_seconds=self._timeout)
            raise QuoteUnavailableError(symbol, f"timed out after {self._timeout}s") from e
        except TradeLedgerError:
            raise
        except Exception as e:
            logger.warning("quotes.provider_error", symbol=symbol, error=str(e))
            raise QuoteUnavailableError(symbol, "provider error") from e
