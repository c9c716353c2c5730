"""Per-key exclusive locks for read-modify-write sequences.

Every mutating operation locks the rows it touches before reading them:
    ("holding", user, symbol), ("wallet", user), ("forex", trade_id)

Keys are acquired in sorted order so two operations that need the same
keys can never deadlock.
"""

import threading
from contextlib import contextmanager
from typing import Iterator

LockKey = tuple[str, ...]


def holding_key(user: str, symbol: str) -> LockKey:
    return ("holding", user, symbol)


def wallet_key(user_id: str) -> LockKey:
    return ("wallet", user_id)


def trade_key(trade_id: str) -> LockKey:
    return ("forex", trade_id)


class KeyedLock:
    """
    Map of lazily created locks, one per key.

    Entries are reference counted and dropped when no thread holds or waits
    on them, so the map does not grow with the number of users.

    Example:
        >>> locks = KeyedLock()
        >>> with locks.hold(holding_key("u1", "AAPL"), wallet_key("u1")):
        ...     ...  # read, compute, commit
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[LockKey, list] = {}  # key -> [lock, refcount]

    def _checkout(self, key: LockKey) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: LockKey) -> None:
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, *keys: LockKey) -> Iterator[None]:
        """Hold every key (deduplicated, sorted) for the duration of the block."""
        ordered = sorted(set(keys))
        acquired: list[tuple[LockKey, threading.Lock]] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                try:
                    lock.acquire()
                except BaseException:
                    self._checkin(key)
                    raise
                acquired.append((key, lock))
            yield
        finally:
            for key, lock in reversed(acquired):
                lock.release()
                self._checkin(key)

    def active_keys(self) -> int:
        """Number of keys currently held or waited on."""
        with self._guard:
            return len(self._locks)
