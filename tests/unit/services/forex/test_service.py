"""Unit tests for ForexService.

Tests cover:
- Escrow debit on open, amount + P&L credit on close
- Linear P&L for BUY and SELL, rounded to cents
- Close exactly once
- Pair and side validation
- Trade listing
"""

import threading
from decimal import Decimal

import pytest

from tradeledger.errors import (
    InsufficientBalanceError,
    InvalidArgumentError,
    QuoteUnavailableError,
    TradeNotFoundError,
    WalletNotFoundError,
)
from tradeledger.services.forex import (
    FOREX_PAIRS,
    ForexService,
    TradeSide,
    TradeStatus,
    calculate_profit_loss,
    normalize_pair,
    parse_side,
)
from tradeledger.services.quotes import StaticQuoteProvider
from tradeledger.services.wallet import WalletService


class TestHelpers:
    """Test P&L math and input parsing."""

    def test_buy_profit(self) -> None:
        pnl = calculate_profit_loss(TradeSide.BUY, Decimal("1.2"), Decimal("1.3"), Decimal("1000"))

        assert pnl == Decimal("100.00")

    def test_sell_profits_when_price_falls(self) -> None:
        pnl = calculate_profit_loss(TradeSide.SELL, Decimal("1.3"), Decimal("1.2"), Decimal("1000"))

        assert pnl == Decimal("100.00")

    def test_rounds_half_up_to_cents(self) -> None:
        pnl = calculate_profit_loss(TradeSide.BUY, Decimal("1.00000"), Decimal("1.00005"), Decimal("100"))

        assert pnl == Decimal("0.01")

    def test_normalize_pair(self) -> None:
        assert normalize_pair(" eur/usd ") == "EUR/USD"

    def test_unsupported_pair(self) -> None:
        with pytest.raises(InvalidArgumentError):
            normalize_pair("BTC/USD")

    def test_parse_side(self) -> None:
        assert parse_side("buy") == TradeSide.BUY
        assert parse_side(TradeSide.SELL) == TradeSide.SELL
        with pytest.raises(InvalidArgumentError):
            parse_side("HOLD")


class TestGetPairs:
    def test_lists_all_supported_pairs_with_prices(self, forex: ForexService) -> None:
        pairs = forex.get_pairs()

        assert [p.symbol for p in pairs] == [p.symbol for p in FOREX_PAIRS]
        assert len(pairs) == 10
        eur = pairs[0]
        assert eur.symbol == "EUR/USD"
        assert eur.price == Decimal("1.2")

    def test_change_is_percent_move(self, forex: ForexService, quotes: StaticQuoteProvider) -> None:
        quotes.set_price("EUR/USD", Decimal("1.32"))

        eur = forex.get_pairs()[0]

        assert eur.change == Decimal("10")


class TestExecuteTrade:
    """Test opening positions."""

    def test_debits_exact_amount(self, forex: ForexService, wallets: WalletService, funded_user: str) -> None:
        result = forex.execute_trade(funded_user, "EUR/USD", Decimal("1000"), "BUY")

        assert result.new_balance == Decimal("9000")
        assert wallets.get_balance(funded_user) == Decimal("9000")
        assert result.trade.status == TradeStatus.OPEN
        assert result.trade.price == Decimal("1.2")
        assert result.trade.profit_loss == Decimal("0")

    def test_insufficient_balance(self, forex: ForexService, funded_user: str) -> None:
        with pytest.raises(InsufficientBalanceError):
            forex.execute_trade(funded_user, "EUR/USD", Decimal("10000.01"), TradeSide.BUY)

        assert forex.get_user_trades(funded_user) == []

    def test_without_wallet(self, forex: ForexService) -> None:
        with pytest.raises(WalletNotFoundError):
            forex.execute_trade("ghost", "EUR/USD", Decimal("10"), TradeSide.BUY)

    @pytest.mark.parametrize(
        "pair, amount, side",
        [
            ("EUR/USD", Decimal("0"), "BUY"),
            ("EUR/USD", Decimal("-5"), "BUY"),
            ("XXX/YYY", Decimal("5"), "BUY"),
            ("EUR/USD", Decimal("5"), "LONG"),
        ],
    )
    def test_invalid_inputs(self, forex: ForexService, funded_user: str, pair: str, amount: Decimal, side: str) -> None:
        with pytest.raises(InvalidArgumentError):
            forex.execute_trade(funded_user, pair, amount, side)

    def test_quote_failure_changes_nothing(
        self, forex: ForexService, quotes: StaticQuoteProvider, wallets: WalletService, funded_user: str
    ) -> None:
        quotes.mark_unavailable("EUR/USD")

        with pytest.raises(QuoteUnavailableError):
            forex.execute_trade(funded_user, "EUR/USD", Decimal("100"), "BUY")

        assert wallets.get_balance(funded_user) == Decimal("10000")


class TestCloseTrade:
    """Test closing positions."""

    def test_worked_example(
        self, forex: ForexService, quotes: StaticQuoteProvider, wallets: WalletService, funded_user: str
    ) -> None:
        """Test 10000 -> BUY 1000 @ 1.2 -> 9000 -> close @ 1.3 -> 10100."""
        opened = forex.execute_trade(funded_user, "EUR/USD", Decimal("1000"), TradeSide.BUY)
        assert opened.new_balance == Decimal("9000")
        quotes.set_price("EUR/USD", Decimal("1.3"))

        closed = forex.close_trade(funded_user, opened.trade.trade_id)

        assert closed.trade.profit_loss == Decimal("100.00")
        assert closed.trade.status == TradeStatus.CLOSED
        assert closed.trade.close_price == Decimal("1.3")
        assert closed.trade.closed_at is not None
        assert closed.new_balance == Decimal("10100")
        assert wallets.get_balance(funded_user) == Decimal("10100")

    def test_sell_side_loss(
        self, forex: ForexService, quotes: StaticQuoteProvider, wallets: WalletService, funded_user: str
    ) -> None:
        opened = forex.execute_trade(funded_user, "GBP/USD", Decimal("2000"), TradeSide.SELL)
        quotes.set_price("GBP/USD", Decimal("1.30"))

        closed = forex.close_trade(funded_user, opened.trade.trade_id)

        # (1.30 - 1.25) * 2000 * -1
        assert closed.trade.profit_loss == Decimal("-100.00")
        assert wallets.get_balance(funded_user) == Decimal("9900")

    def test_close_twice_fails(self, forex: ForexService, wallets: WalletService, funded_user: str) -> None:
        opened = forex.execute_trade(funded_user, "EUR/USD", Decimal("500"), TradeSide.BUY)
        forex.close_trade(funded_user, opened.trade.trade_id)
        balance = wallets.get_balance(funded_user)

        with pytest.raises(TradeNotFoundError):
            forex.close_trade(funded_user, opened.trade.trade_id)

        assert wallets.get_balance(funded_user) == balance

    def test_unknown_trade(self, forex: ForexService, funded_user: str) -> None:
        with pytest.raises(TradeNotFoundError):
            forex.close_trade(funded_user, "does-not-exist")

    def test_other_users_trade(self, forex: ForexService, wallets: WalletService, funded_user: str) -> None:
        """Test a user cannot close someone else's trade."""
        opened = forex.execute_trade(funded_user, "EUR/USD", Decimal("500"), TradeSide.BUY)
        wallets.get_balance("intruder")

        with pytest.raises(TradeNotFoundError):
            forex.close_trade("intruder", opened.trade.trade_id)

        assert forex.get_user_trades(funded_user)[0].is_open

    def test_loss_beyond_escrow_floors_balance(
        self, forex: ForexService, quotes: StaticQuoteProvider, wallets: WalletService, funded_user: str
    ) -> None:
        """Test the credit is floored at zero when the loss exceeds amount plus balance."""
        opened = forex.execute_trade(funded_user, "USD/JPY", Decimal("10000"), TradeSide.BUY)
        quotes.set_price("USD/JPY", Decimal("148.4"))

        closed = forex.close_trade(funded_user, opened.trade.trade_id)

        # (148.4 - 150.5) * 10000 = -21000
        assert closed.trade.profit_loss == Decimal("-21000.00")
        assert closed.new_balance == Decimal("0")

    def test_concurrent_closes_credit_once(
        self, forex: ForexService, quotes: StaticQuoteProvider, wallets: WalletService, funded_user: str
    ) -> None:
        opened = forex.execute_trade(funded_user, "EUR/USD", Decimal("1000"), TradeSide.BUY)
        quotes.set_price("EUR/USD", Decimal("1.3"))
        outcomes: list[str] = []
        start = threading.Barrier(5)

        def closer() -> None:
            start.wait()
            try:
                forex.close_trade(funded_user, opened.trade.trade_id)
                outcomes.append("closed")
            except TradeNotFoundError:
                outcomes.append("not_found")

        threads = [threading.Thread(target=closer) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["closed"] + ["not_found"] * 4
        assert wallets.get_balance(funded_user) == Decimal("10100")


class TestGetUserTrades:
    def test_newest_first_with_status_filter(
        self, forex: ForexService, funded_user: str
    ) -> None:
        first = forex.execute_trade(funded_user, "EUR/USD", Decimal("100"), TradeSide.BUY).trade
        second = forex.execute_trade(funded_user, "GBP/USD", Decimal("100"), TradeSide.SELL).trade
        forex.close_trade(funded_user, first.trade_id)

        trades = forex.get_user_trades(funded_user)

        assert [t.trade_id for t in trades] == [second.trade_id, first.trade_id]
        assert [t.trade_id for t in forex.get_user_trades(funded_user, TradeStatus.OPEN)] == [second.trade_id]
        assert [t.trade_id for t in forex.get_user_trades(funded_user, TradeStatus.CLOSED)] == [first.trade_id]
