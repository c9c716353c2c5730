"""API routers."""

from tradeledger.api.routes import forex, portfolio, stocks, wallet

__all__ = ["forex", "portfolio", "stocks", "wallet"]
