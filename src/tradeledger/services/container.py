"""Service wiring.

Builds one explicit set of services around a shared store and lock map.
The API and CLI construct a container at startup; tests build one with
static quotes. No service is a module-level singleton.
"""

from dataclasses import dataclass

from tradeledger.services.forex import ForexService
from tradeledger.services.portfolio import PortfolioService
from tradeledger.services.quotes import (
    IQuoteProvider,
    StaticQuoteProvider,
    TimeoutQuoteProvider,
    YahooQuoteProvider,
    forex_ticker,
)
from tradeledger.services.storage import InMemoryStore, ITradingStore, KeyedLock
from tradeledger.services.wallet import WalletService
from tradeledger.system import LoggerFactory
from tradeledger.system.config import SystemConfig

logger = LoggerFactory.get_logger()


@dataclass
class ServiceContainer:
    """All services sharing one store and one lock map."""

    store: ITradingStore
    locks: KeyedLock
    stock_quotes: IQuoteProvider
    forex_quotes: IQuoteProvider
    wallets: WalletService
    portfolio: PortfolioService
    forex: ForexService

    def shutdown(self) -> None:
        """Release quote provider worker pools (each provider once)."""
        seen: set[int] = set()
        for provider in (self.stock_quotes, self.forex_quotes):
            shutdown = getattr(provider, "shutdown", None)
            if shutdown is None or id(provider) in seen:
                continue
            seen.add(id(provider))
            shutdown()
        logger.debug("services.shutdown")


def build_quote_provider(config: SystemConfig, market: str) -> IQuoteProvider:
    """
    Build the configured quote provider for one market.

    Args:
        config: System config
        market: "stock" or "forex" (forex maps pairs to Yahoo tickers)

    Returns:
        Provider wrapped with the configured timeout
    """
    settings = config.quotes
    inner: IQuoteProvider
    if settings.provider == "static":
        inner = StaticQuoteProvider(settings.static_prices)
    elif market == "forex":
        inner = YahooQuoteProvider(ticker_for=forex_ticker)
    else:
        inner = YahooQuoteProvider()
    return TimeoutQuoteProvider(inner, timeout_seconds=settings.timeout_seconds)


def build_quote_providers(config: SystemConfig) -> tuple[IQuoteProvider, IQuoteProvider]:
    """
    Build (stock, forex) quote providers from config.

    "static" serves quotes.static_prices for both from one price map; "yahoo"
    uses yfinance, mapping forex pairs to Yahoo tickers. Both are wrapped
    with the configured timeout.
    """
    settings = config.quotes
    if settings.provider == "static":
        static = StaticQuoteProvider(settings.static_prices)
        return (
            TimeoutQuoteProvider(static, timeout_seconds=settings.timeout_seconds),
            TimeoutQuoteProvider(static, timeout_seconds=settings.timeout_seconds),
        )
    return build_quote_provider(config, "stock"), build_quote_provider(config, "forex")


def build_services(
    config: SystemConfig | None = None,
    store: ITradingStore | None = None,
    stock_quotes: IQuoteProvider | None = None,
    forex_quotes: IQuoteProvider | None = None,
) -> ServiceContainer:
    """
    Wire wallet, portfolio and forex services.

    Args:
        config: System config (defaults to built-in defaults)
        store: Store to use (defaults to a fresh InMemoryStore)
        stock_quotes: Override the configured stock quote provider
        forex_quotes: Override the configured forex quote provider

    Example:
        >>> quotes = StaticQuoteProvider({"AAPL": Decimal("150"), "EUR/USD": Decimal("1.1")})
        >>> services = build_services(stock_quotes=quotes, forex_quotes=quotes)
        >>> services.wallets.get_balance("u1")
        Decimal('10000')
    """
    config = config or SystemConfig()
    store = store or InMemoryStore()
    locks = KeyedLock()

    if stock_quotes is None and forex_quotes is None:
        stock_quotes, forex_quotes = build_quote_providers(config)
    stock_quotes = stock_quotes or build_quote_provider(config, "stock")
    forex_quotes = forex_quotes or build_quote_provider(config, "forex")

    wallets = WalletService(store, locks, initial_balance=config.wallet.initial_balance)
    portfolio = PortfolioService(store, stock_quotes, wallets, locks)
    forex = ForexService(store, forex_quotes, wallets, locks)

    logger.debug(
        "services.created",
        store=type(store).__name__,
        quote_provider=config.quotes.provider,
        initial_balance=str(config.wallet.initial_balance),
    )
    return ServiceContainer(
        store=store,
        locks=locks,
        stock_quotes=stock_quotes,
        forex_quotes=forex_quotes,
        wallets=wallets,
        portfolio=portfolio,
        forex=forex,
    )
