"""
TradeLedger - Portfolio Accounting Backend

Weighted-average stock holdings, wallet settlement, transaction ledger
and forex positions behind a small HTTP API.
"""

from importlib.metadata import version

try:
    __version__ = version("tradeledger")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
