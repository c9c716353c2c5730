"""HTTP API for TradeLedger."""

from tradeledger.api.app import create_app

__all__ = ["create_app"]
