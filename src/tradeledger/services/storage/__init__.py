"""Storage layer: store protocol, unit of work, in-memory store and key locks."""

from tradeledger.services.storage.interface import ITradingStore
from tradeledger.services.storage.locks import KeyedLock, holding_key, trade_key, wallet_key
from tradeledger.services.storage.memory import InMemoryStore
from tradeledger.services.storage.unit_of_work import RecordKind, StagedWrite, UnitOfWork, WriteOp

__all__ = [
    "ITradingStore",
    "InMemoryStore",
    "KeyedLock",
    "RecordKind",
    "StagedWrite",
    "UnitOfWork",
    "WriteOp",
    "holding_key",
    "trade_key",
    "wallet_key",
]
