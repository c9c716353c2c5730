"""Forex service: escrowed positions on supported currency pairs.

Key components:
- ForexService: Service implementation
- IForexService: Protocol interface
- Models: ForexTrade, ForexPair, ForexPairQuote, TradeResult, TradeSide, TradeStatus
"""

from tradeledger.services.forex.interface import IForexService
from tradeledger.services.forex.models import (
    FOREX_PAIRS,
    SUPPORTED_PAIRS,
    ForexPair,
    ForexPairQuote,
    ForexTrade,
    TradeResult,
    TradeSide,
    TradeStatus,
)
from tradeledger.services.forex.service import ForexService, calculate_profit_loss, normalize_pair, parse_side

__all__ = [
    # Service
    "ForexService",
    "IForexService",
    "calculate_profit_loss",
    "normalize_pair",
    "parse_side",
    # Models
    "FOREX_PAIRS",
    "SUPPORTED_PAIRS",
    "ForexPair",
    "ForexPairQuote",
    "ForexTrade",
    "TradeResult",
    "TradeSide",
    "TradeStatus",
]
