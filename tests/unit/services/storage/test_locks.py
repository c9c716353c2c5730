"""Unit tests for KeyedLock."""

import threading
import time

from tradeledger.services.storage import KeyedLock, holding_key, trade_key, wallet_key


class TestKeys:
    def test_key_shapes(self) -> None:
        assert holding_key("u1", "AAPL") == ("holding", "u1", "AAPL")
        assert wallet_key("u1") == ("wallet", "u1")
        assert trade_key("t1") == ("forex", "t1")


class TestKeyedLock:
    """Test exclusion, reentrancy of distinct keys and cleanup."""

    def test_entries_dropped_after_release(self) -> None:
        locks = KeyedLock()

        with locks.hold(holding_key("u1", "AAPL"), wallet_key("u1")):
            assert locks.active_keys() == 2

        assert locks.active_keys() == 0

    def test_duplicate_keys_are_held_once(self) -> None:
        """Test passing the same key twice does not self-deadlock."""
        locks = KeyedLock()

        with locks.hold(wallet_key("u1"), wallet_key("u1")):
            assert locks.active_keys() == 1

    def test_same_key_is_exclusive(self) -> None:
        locks = KeyedLock()
        inside = []
        overlap = []

        def worker() -> None:
            with locks.hold(wallet_key("u1")):
                inside.append(1)
                if len(inside) > 1:
                    overlap.append(1)
                time.sleep(0.01)
                inside.pop()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert overlap == []
        assert locks.active_keys() == 0

    def test_opposite_order_requests_do_not_deadlock(self) -> None:
        """Test keys are acquired in sorted order regardless of argument order."""
        locks = KeyedLock()
        a, b = wallet_key("u1"), holding_key("u1", "AAPL")
        done = []

        def forward() -> None:
            for _ in range(50):
                with locks.hold(a, b):
                    pass
            done.append("forward")

        def backward() -> None:
            for _ in range(50):
                with locks.hold(b, a):
                    pass
            done.append("backward")

        threads = [threading.Thread(target=forward), threading.Thread(target=backward)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert sorted(done) == ["backward", "forward"]

    def test_released_on_exception(self) -> None:
        locks = KeyedLock()

        try:
            with locks.hold(wallet_key("u1")):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert locks.active_keys() == 0
        with locks.hold(wallet_key("u1")):
            pass
