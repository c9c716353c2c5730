"""Root conftest: shared fixtures for services wired around an in-memory store."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tradeledger.services.container import ServiceContainer, build_services
from tradeledger.services.forex import ForexService
from tradeledger.services.portfolio import PortfolioService
from tradeledger.services.quotes import StaticQuoteProvider
from tradeledger.services.storage import InMemoryStore, KeyedLock
from tradeledger.services.wallet import WalletService

USER = "user-1"
OTHER_USER = "user-2"


class SteppingClock:
    """Deterministic clock: each call returns one second later than the last."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def quotes() -> StaticQuoteProvider:
    """Stock and forex prices used across tests."""
    return StaticQuoteProvider(
        {
            "AAPL": Decimal("150"),
            "MSFT": Decimal("300"),
            "TSLA": Decimal("200"),
            "EUR/USD": Decimal("1.2"),
            "GBP/USD": Decimal("1.25"),
            "USD/JPY": Decimal("150.5"),
            "USD/CHF": Decimal("0.9"),
            "AUD/USD": Decimal("0.65"),
            "USD/CAD": Decimal("1.36"),
            "NZD/USD": Decimal("0.6"),
            "EUR/GBP": Decimal("0.86"),
            "EUR/JPY": Decimal("162.3"),
            "GBP/JPY": Decimal("189.1"),
        },
        names={"AAPL": "Apple Inc.", "MSFT": "Microsoft Corporation", "TSLA": "Tesla, Inc."},
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def locks() -> KeyedLock:
    return KeyedLock()


@pytest.fixture
def wallets(store: InMemoryStore, locks: KeyedLock, clock: SteppingClock) -> WalletService:
    return WalletService(store, locks, clock=clock)


@pytest.fixture
def portfolio(
    store: InMemoryStore,
    quotes: StaticQuoteProvider,
    wallets: WalletService,
    locks: KeyedLock,
    clock: SteppingClock,
) -> PortfolioService:
    return PortfolioService(store, quotes, wallets, locks, clock=clock)


@pytest.fixture
def forex(
    store: InMemoryStore,
    quotes: StaticQuoteProvider,
    wallets: WalletService,
    locks: KeyedLock,
    clock: SteppingClock,
) -> ForexService:
    return ForexService(store, quotes, wallets, locks, clock=clock)


@pytest.fixture
def funded_user(wallets: WalletService) -> str:
    """User whose wallet has been provisioned with the default 10,000."""
    wallets.get_balance(USER)
    return USER


@pytest.fixture
def services(quotes: StaticQuoteProvider) -> ServiceContainer:
    """Fully wired container using static quotes for stocks and forex."""
    return build_services(stock_quotes=quotes, forex_quotes=quotes)
