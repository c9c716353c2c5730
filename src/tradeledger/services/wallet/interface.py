"""Wallet service interface (Protocol)."""

from decimal import Decimal
from typing import Protocol

from tradeledger.services.wallet.models import Wallet


class IWalletService(Protocol):
    """
    Wallet balance queries and mutations.

    Core responsibilities:
    - Auto-provision a wallet on first balance query
    - Deposits and withdrawals with sufficiency checks
    - Administrative balance overwrite
    - Stage debits/credits into another service's unit of work
    """

    def get_balance(self, user_id: str) -> Decimal:
        """
        Get balance, creating the wallet with the initial balance if missing.

        Example:
            >>> wallets.get_balance("new_user")
            Decimal('10000')
        """
        ...

    def get_wallet(self, user_id: str) -> Wallet:
        """
        Get wallet without provisioning.

        Raises:
            WalletNotFoundError: No wallet for user
        """
        ...

    def add_money(self, user_id: str, amount: Decimal) -> Wallet:
        """
        Deposit amount.

        Raises:
            InvalidArgumentError: amount <= 0
            WalletNotFoundError: No wallet for user
        """
        ...

    def remove_money(self, user_id: str, amount: Decimal) -> Wallet:
        """
        Withdraw amount.

        Raises:
            InvalidArgumentError: amount <= 0
            WalletNotFoundError: No wallet for user
            InsufficientBalanceError: amount > balance (balance unchanged)
        """
        ...

    def update_balance(self, user_id: str, balance: Decimal) -> Wallet:
        """
        Overwrite balance (administrative).

        Raises:
            InvalidArgumentError: balance < 0
            WalletNotFoundError: No wallet for user
        """
        ...
