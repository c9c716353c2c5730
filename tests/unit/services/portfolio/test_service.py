"""Unit tests for PortfolioService.

Tests cover:
- Weighted-average cost on buys
- Partial and full sells, realized P&L
- Wallet settlement (debit on buy, credit on sell)
- Failure atomicity (no transaction or wallet change on rejected sells)
- Portfolio valuation against quotes
- Transaction history ordering and pagination
- Concurrent buys on the same holding
"""

import threading
from decimal import Decimal

import pytest

from tradeledger.errors import (
    HoldingNotFoundError,
    InsufficientBalanceError,
    InsufficientQuantityError,
    InvalidArgumentError,
    QuoteUnavailableError,
    WalletNotFoundError,
)
from tradeledger.services.portfolio import PortfolioService, TransactionType, normalize_symbol
from tradeledger.services.quotes import StaticQuoteProvider
from tradeledger.services.storage import InMemoryStore, KeyedLock
from tradeledger.services.wallet import WalletService


class TestNormalizeSymbol:
    def test_upper_cases_and_strips(self) -> None:
        assert normalize_symbol("  aapl ") == "AAPL"

    def test_blank_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            normalize_symbol("   ")


class TestBuy:
    """Test buys and weighted-average cost."""

    def test_first_buy_creates_holding(self, portfolio: PortfolioService, funded_user: str) -> None:
        holding = portfolio.buy(funded_user, "AAPL", Decimal("10"), Decimal("100"), "Apple Inc.")

        assert holding.quantity == Decimal("10")
        assert holding.average_buy_price == Decimal("100")
        assert holding.total_investment == Decimal("1000")
        assert holding.company_name == "Apple Inc."
        assert holding.version == 1

    def test_second_buy_rebases_average(self, portfolio: PortfolioService, funded_user: str) -> None:
        portfolio.buy(funded_user, "AAPL", Decimal("10"), Decimal("100"))

        holding = portfolio.buy(funded_user, "AAPL", Decimal("10"), Decimal("200"))

        assert holding.quantity == Decimal("20")
        assert holding.total_investment == Decimal("3000")
        assert holding.average_buy_price == Decimal("150")
        assert holding.version == 2

    @pytest.mark.parametrize(
        "fills",
        [
            [("1", "10")],
            [("3", "10"), ("1", "50")],
            [("2.5", "80.40"), ("7", "91.15"), ("0.5", "120"), ("10", "3.3333")],
            [("1", "1"), ("1", "2"), ("1", "3"), ("1", "4"), ("1", "5")],
        ],
    )
    def test_average_holds_for_every_prefix(
        self, portfolio: PortfolioService, funded_user: str, fills: list[tuple[str, str]]
    ) -> None:
        """Test investment == sum(q*p) and avg == investment / quantity after each buy."""
        invested = Decimal("0")
        held = Decimal("0")
        for quantity, price in fills:
            q, p = Decimal(quantity), Decimal(price)
            invested += q * p
            held += q

            holding = portfolio.buy(funded_user, "AAPL", q, p)

            assert holding.total_investment == invested
            assert holding.quantity == held
            assert holding.average_buy_price == invested / held

    def test_buy_debits_wallet(self, portfolio: PortfolioService, wallets: WalletService, funded_user: str) -> None:
        portfolio.buy(funded_user, "AAPL", Decimal("10"), Decimal("100"))

        assert wallets.get_balance(funded_user) == Decimal("9000")

    def test_buy_appends_transaction(self, portfolio: PortfolioService, funded_user: str) -> None:
        portfolio.buy(funded_user, "aapl", Decimal("2"), Decimal("150"), "Apple Inc.")

        (tx,) = portfolio.get_transaction_history(funded_user)
        assert tx.type == TransactionType.BUY
        assert tx.symbol == "AAPL"
        assert tx.total == Decimal("300")
        assert tx.realized_pnl is None

    def test_company_name_defaults(self, portfolio: PortfolioService, funded_user: str) -> None:
        """Test a missing name falls back to the existing holding's, then the symbol."""
        first = portfolio.buy(funded_user, "MSFT", Decimal("1"), Decimal("10"))
        assert first.company_name == "MSFT"

        portfolio.buy(funded_user, "AAPL", Decimal("1"), Decimal("10"), "Apple Inc.")
        again = portfolio.buy(funded_user, "AAPL", Decimal("1"), Decimal("10"))
        assert again.company_name == "Apple Inc."

    def test_insufficient_balance_changes_nothing(
        self, portfolio: PortfolioService, wallets: WalletService, funded_user: str
    ) -> None:
        with pytest.raises(InsufficientBalanceError):
            portfolio.buy(funded_user, "AAPL", Decimal("101"), Decimal("100"))

        assert portfolio.get_holding(funded_user, "AAPL") is None
        assert portfolio.get_transaction_history(funded_user) == []
        assert wallets.get_balance(funded_user) == Decimal("10000")

    def test_buy_without_wallet(self, portfolio: PortfolioService) -> None:
        with pytest.raises(WalletNotFoundError):
            portfolio.buy("ghost", "AAPL", Decimal("1"), Decimal("100"))

    @pytest.mark.parametrize(
        "quantity, price",
        [(Decimal("0"), Decimal("100")), (Decimal("-1"), Decimal("100")), (Decimal("1"), Decimal("0"))],
    )
    def test_invalid_inputs(
        self, portfolio: PortfolioService, funded_user: str, quantity: Decimal, price: Decimal
    ) -> None:
        with pytest.raises(InvalidArgumentError):
            portfolio.buy(funded_user, "AAPL", quantity, price)


class TestSell:
    """Test sells, realized P&L and settlement."""

    def test_worked_example(self, portfolio: PortfolioService, wallets: WalletService, funded_user: str) -> None:
        """Test buy 10@100, buy 10@200, sell 5@300."""
        after_first = portfolio.buy(funded_user, "AAPL", Decimal("10"), Decimal("100"))
        assert after_first.total_investment == Decimal("1000")
        assert after_first.average_buy_price == Decimal("100")

        after_second = portfolio.buy(funded_user, "AAPL", Decimal("10"), Decimal("200"))
        assert after_second.total_investment == Decimal("3000")
        assert after_second.average_buy_price == Decimal("150")

        after_sell = portfolio.sell(funded_user, "AAPL", Decimal("5"), Decimal("300"))
        assert after_sell is not None
        assert after_sell.quantity == Decimal("15")
        assert after_sell.average_buy_price == Decimal("150")
        assert after_sell.total_investment == Decimal("2250")

        # 10000 - 1000 - 2000 + 1500
        assert wallets.get_balance(funded_user) == Decimal("8500")
        assert portfolio.get_realized_pnl(funded_user) == Decimal("750")

    def test_partial_sell_keeps_average(self, portfolio: PortfolioService, funded_user: str) -> None:
        portfolio.buy(funded_user, "AAPL", Decimal("10"), Decimal("100"))
        portfolio.buy(funded_user, "AAPL", Decimal("5"), Decimal("130"))
        average = portfolio.get_holding(funded_user, "AAPL").average_buy_price

        holding = portfolio.sell(funded_user, "AAPL", Decimal("4"), Decimal("50"))

        assert holding.average_buy_price == average
        assert holding.total_investment == holding.quantity * average

    def test_full_sell_deletes_holding(self, portfolio: PortfolioService, funded_user: str) -> None:
        portfolio.buy(funded_user, "AAPL", Decimal("10"), Decimal("100"))

        result = portfolio.sell(funded_user, "AAPL", Decimal("10"), Decimal("120"))

        assert result is None
        assert portfolio.get_holding(funded_user, "AAPL") is None
        assert portfolio.get_portfolio(funded_user).holdings == []

    def test_round_trip_at_same_price(
        self, portfolio: PortfolioService, wallets: WalletService, funded_user: str
    ) -> None:
        """Test buy then sell of the same quantity and price nets zero."""
        portfolio.buy(funded_user, "TSLA", Decimal("7"), Decimal("200"))

        assert portfolio.sell(funded_user, "TSLA", Decimal("7"), Decimal("200")) is None
        assert portfolio.get_realized_pnl(funded_user, "TSLA") == Decimal("0")
        assert wallets.get_balance(funded_user) == Decimal("10000")

    def test_sell_transaction_records_realized_pnl(self, portfolio: PortfolioService, funded_user: str) -> None:
        portfolio.buy(funded_user, "AAPL", Decimal("10"), Decimal("100"), "Apple Inc.")

        portfolio.sell(funded_user, "AAPL", Decimal("4"), Decimal("90"))

        latest = portfolio.get_transaction_history(funded_user)[0]
        assert latest.type == TransactionType.SELL
        assert latest.company_name == "Apple Inc."
        assert latest.total == Decimal("360")
        assert latest.realized_pnl == Decimal("-40")

    def test_oversell_changes_nothing(
        self, portfolio: PortfolioService, wallets: WalletService, funded_user: str
    ) -> None:
        before = portfolio.buy(funded_user, "AAPL", Decimal("10"), Decimal("100"))
        balance = wallets.get_balance(funded_user)

        with pytest.raises(InsufficientQuantityError):
            portfolio.sell(funded_user, "AAPL", Decimal("11"), Decimal("100"))

        assert portfolio.get_holding(funded_user, "AAPL") == before
        assert len(portfolio.get_transaction_history(funded_user)) == 1
        assert wallets.get_balance(funded_user) == balance

    def test_sell_without_holding(self, portfolio: PortfolioService, funded_user: str) -> None:
        with pytest.raises(HoldingNotFoundError):
            portfolio.sell(funded_user, "AAPL", Decimal("1"), Decimal("100"))

        assert portfolio.get_transaction_history(funded_user) == []

    def test_sell_is_case_insensitive(self, portfolio: PortfolioService, funded_user: str) -> None:
        portfolio.buy(funded_user, "AAPL", Decimal("2"), Decimal("100"))

        assert portfolio.sell(funded_user, "aapl", Decimal("2"), Decimal("100")) is None

    def test_realized_pnl_by_symbol(self, portfolio: PortfolioService, funded_user: str) -> None:
        portfolio.buy(funded_user, "AAPL", Decimal("10"), Decimal("100"))
        portfolio.buy(funded_user, "MSFT", Decimal("10"), Decimal("100"))
        portfolio.sell(funded_user, "AAPL", Decimal("5"), Decimal("110"))
        portfolio.sell(funded_user, "MSFT", Decimal("5"), Decimal("80"))

        assert portfolio.get_realized_pnl(funded_user, "AAPL") == Decimal("50")
        assert portfolio.get_realized_pnl(funded_user, "MSFT") == Decimal("-100")
        assert portfolio.get_realized_pnl(funded_user) == Decimal("-50")


class TestMarketOrders:
    """Test buy/sell at the quote provider's price."""

    def test_buy_at_market_uses_quote(self, portfolio: PortfolioService, funded_user: str) -> None:
        holding = portfolio.buy_at_market(funded_user, "aapl", Decimal("2"))

        assert holding.average_buy_price == Decimal("150")

    def test_sell_at_market_uses_quote(
        self, portfolio: PortfolioService, quotes: StaticQuoteProvider, funded_user: str
    ) -> None:
        portfolio.buy_at_market(funded_user, "AAPL", Decimal("2"))
        quotes.set_price("AAPL", Decimal("160"))

        portfolio.sell_at_market(funded_user, "AAPL", Decimal("1"))

        assert portfolio.get_realized_pnl(funded_user) == Decimal("10")

    def test_quote_failure_changes_nothing(
        self, portfolio: PortfolioService, quotes: StaticQuoteProvider, funded_user: str
    ) -> None:
        quotes.mark_unavailable("AAPL")

        with pytest.raises(QuoteUnavailableError):
            portfolio.buy_at_market(funded_user, "AAPL", Decimal("1"))

        assert portfolio.get_transaction_history(funded_user) == []


class TestGetPortfolio:
    """Test valuation against live quotes."""

    def test_empty_portfolio(self, portfolio: PortfolioService, funded_user: str) -> None:
        view = portfolio.get_portfolio(funded_user)

        assert view.holdings == []
        assert view.summary.profit_loss_percentage == Decimal("0")

    def test_values_each_holding(
        self, portfolio: PortfolioService, quotes: StaticQuoteProvider, funded_user: str
    ) -> None:
        portfolio.buy(funded_user, "AAPL", Decimal("10"), Decimal("100"))
        portfolio.buy(funded_user, "MSFT", Decimal("2"), Decimal("400"))
        quotes.set_price("AAPL", Decimal("120"))

        view = portfolio.get_portfolio(funded_user)

        aapl, msft = view.holdings
        assert (aapl.symbol, msft.symbol) == ("AAPL", "MSFT")
        assert aapl.current_value == Decimal("1200")
        assert aapl.profit_loss == Decimal("200")
        assert aapl.profit_loss_percentage == Decimal("20")
        assert msft.current_value == Decimal("600")
        assert msft.profit_loss == Decimal("-200")
        assert view.summary.total_investment == Decimal("1800")
        assert view.summary.current_value == Decimal("1800")
        assert view.summary.profit_loss == Decimal("0")

    def test_quote_failure_propagates(
        self, portfolio: PortfolioService, quotes: StaticQuoteProvider, funded_user: str
    ) -> None:
        portfolio.buy(funded_user, "AAPL", Decimal("1"), Decimal("100"))
        quotes.mark_unavailable("AAPL")

        with pytest.raises(QuoteUnavailableError):
            portfolio.get_portfolio(funded_user)


class TestTransactionHistory:
    """Test ordering and pagination."""

    def test_newest_first(self, portfolio: PortfolioService, funded_user: str) -> None:
        portfolio.buy(funded_user, "AAPL", Decimal("1"), Decimal("100"))
        portfolio.buy(funded_user, "MSFT", Decimal("1"), Decimal("100"))
        portfolio.sell(funded_user, "AAPL", Decimal("1"), Decimal("100"))

        history = portfolio.get_transaction_history(funded_user)

        assert [(tx.symbol, tx.type) for tx in history] == [
            ("AAPL", TransactionType.SELL),
            ("MSFT", TransactionType.BUY),
            ("AAPL", TransactionType.BUY),
        ]

    def test_pagination(self, portfolio: PortfolioService, funded_user: str) -> None:
        for symbol in ["AAPL", "MSFT", "TSLA"]:
            portfolio.buy(funded_user, symbol, Decimal("1"), Decimal("10"))

        assert [tx.symbol for tx in portfolio.get_transaction_history(funded_user, limit=1, offset=1)] == ["MSFT"]

    def test_negative_paging_rejected(self, portfolio: PortfolioService, funded_user: str) -> None:
        with pytest.raises(InvalidArgumentError):
            portfolio.get_transaction_history(funded_user, limit=-1)
        with pytest.raises(InvalidArgumentError):
            portfolio.get_transaction_history(funded_user, offset=-1)

    def test_history_is_per_user(self, portfolio: PortfolioService, wallets: WalletService, funded_user: str) -> None:
        wallets.get_balance("someone-else")
        portfolio.buy("someone-else", "AAPL", Decimal("1"), Decimal("10"))

        assert portfolio.get_transaction_history(funded_user) == []


class TestConcurrency:
    """Concurrent mutations on the same key end in the serial result."""

    def test_concurrent_buys_match_serial_result(self) -> None:
        store = InMemoryStore()
        locks = KeyedLock()
        wallets = WalletService(store, locks, initial_balance=Decimal("1000000"))
        portfolio = PortfolioService(store, StaticQuoteProvider({"AAPL": Decimal("100")}), wallets, locks)
        wallets.get_balance("u1")
        prices = [Decimal(100 + i) for i in range(40)]
        errors: list[Exception] = []
        start = threading.Barrier(len(prices))

        def worker(price: Decimal) -> None:
            start.wait()
            try:
                portfolio.buy("u1", "AAPL", Decimal("2"), price)
            except Exception as e:  # surfaced through the assertion below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(p,)) for p in prices]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        holding = portfolio.get_holding("u1", "AAPL")
        expected_investment = sum(Decimal("2") * p for p in prices)
        assert holding.quantity == Decimal("80")
        assert holding.total_investment == expected_investment
        assert holding.version == len(prices)
        assert wallets.get_balance("u1") == Decimal("1000000") - expected_investment
        assert len(portfolio.get_transaction_history("u1")) == len(prices)

    def test_concurrent_buys_and_sells(self) -> None:
        store = InMemoryStore()
        locks = KeyedLock()
        wallets = WalletService(store, locks, initial_balance=Decimal("1000000"))
        portfolio = PortfolioService(store, StaticQuoteProvider(), wallets, locks)
        wallets.get_balance("u1")
        portfolio.buy("u1", "AAPL", Decimal("100"), Decimal("50"))
        start = threading.Barrier(20)

        def buyer() -> None:
            start.wait()
            portfolio.buy("u1", "AAPL", Decimal("1"), Decimal("50"))

        def seller() -> None:
            start.wait()
            portfolio.sell("u1", "AAPL", Decimal("1"), Decimal("50"))

        threads = [threading.Thread(target=buyer) for _ in range(10)]
        threads += [threading.Thread(target=seller) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        holding = portfolio.get_holding("u1", "AAPL")
        assert holding.quantity == Decimal("100")
        assert holding.total_investment == Decimal("5000")
        assert wallets.get_balance("u1") == Decimal("1000000") - Decimal("5000")
