"""Wallet service: per-user cash balance.

Key components:
- WalletService: Service implementation
- IWalletService: Protocol interface
- Wallet: Wallet model
"""

from tradeledger.services.wallet.interface import IWalletService
from tradeledger.services.wallet.models import Wallet
from tradeledger.services.wallet.service import DEFAULT_INITIAL_BALANCE, WalletService

__all__ = [
    "DEFAULT_INITIAL_BALANCE",
    "IWalletService",
    "Wallet",
    "WalletService",
]
