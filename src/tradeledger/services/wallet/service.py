"""Wallet service implementation."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from tradeledger.errors import InsufficientBalanceError, InvalidArgumentError, WalletNotFoundError, require_positive
from tradeledger.services.storage import ITradingStore, KeyedLock, UnitOfWork, wallet_key
from tradeledger.services.wallet.models import Wallet
from tradeledger.system import LoggerFactory

logger = LoggerFactory.get_logger()

DEFAULT_INITIAL_BALANCE = Decimal("10000")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WalletService:
    """
    Wallet service backed by an ITradingStore.

    Standalone operations (add/remove/update) lock the wallet key and commit
    their own unit of work. Trading services call stage_debit() and
    stage_credit() while already holding the wallet key, so the wallet write
    lands in the same commit as their holding/trade writes.

    Example:
        >>> wallets = WalletService(store, locks)
        >>> wallets.get_balance("u1")
        Decimal('10000')
        >>> wallets.remove_money("u1", Decimal("2500")).balance
        Decimal('7500')
    """

    def __init__(
        self,
        store: ITradingStore,
        locks: KeyedLock | None = None,
        initial_balance: Decimal = DEFAULT_INITIAL_BALANCE,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Initialize wallet service.

        Args:
            store: Trading store
            locks: Shared key locks (must be the same instance the trading services use)
            initial_balance: Balance given to auto-provisioned wallets
            clock: Time source for updated_at
        """
        if initial_balance < 0:
            raise ValueError(f"initial_balance must be >= 0, got {initial_balance}")
        self._store = store
        self._locks = locks or KeyedLock()
        self._initial_balance = initial_balance
        self._clock = clock

    @property
    def initial_balance(self) -> Decimal:
        return self._initial_balance

    # ==================== Queries ====================

    def get_balance(self, user_id: str) -> Decimal:
        wallet = self._store.get_wallet(user_id)
        if wallet is not None:
            return wallet.balance

        with self._locks.hold(wallet_key(user_id)):
            # Re-check under the lock: another request may have provisioned it
            wallet = self._store.get_wallet(user_id)
            if wallet is None:
                now = self._clock()
                wallet = Wallet(user_id=user_id, balance=self._initial_balance, created_at=now, updated_at=now)
                uow = UnitOfWork()
                uow.save_wallet(wallet)
                self._store.commit(uow)
                logger.info("wallet.provisioned", user_id=user_id, balance=str(wallet.balance))
        return wallet.balance

    def get_wallet(self, user_id: str) -> Wallet:
        wallet = self._store.get_wallet(user_id)
        if wallet is None:
            raise WalletNotFoundError(user_id)
        return wallet

    # ==================== Mutations ====================

    def add_money(self, user_id: str, amount: Decimal) -> Wallet:
        amount = require_positive("amount", amount)
        with self._locks.hold(wallet_key(user_id)):
            wallet = self.get_wallet(user_id)
            uow = UnitOfWork()
            wallet = self.stage_credit(uow, wallet, amount)
            self._store.commit(uow)

        logger.info("wallet.deposit", user_id=user_id, amount=str(amount), balance=str(wallet.balance))
        return wallet

    def remove_money(self, user_id: str, amount: Decimal) -> Wallet:
        amount = require_positive("amount", amount)
        with self._locks.hold(wallet_key(user_id)):
            wallet = self.get_wallet(user_id)
            uow = UnitOfWork()
            wallet = self.stage_debit(uow, wallet, amount)
            self._store.commit(uow)

        logger.info("wallet.withdrawal", user_id=user_id, amount=str(amount), balance=str(wallet.balance))
        return wallet

    def update_balance(self, user_id: str, balance: Decimal) -> Wallet:
        if not isinstance(balance, Decimal):
            balance = Decimal(str(balance))
        if not balance.is_finite() or balance < 0:
            raise InvalidArgumentError(f"balance must be >= 0, got {balance}")

        with self._locks.hold(wallet_key(user_id)):
            wallet = self.get_wallet(user_id)
            previous = wallet.balance
            wallet = wallet.with_balance(balance, self._clock())
            uow = UnitOfWork()
            uow.save_wallet(wallet)
            self._store.commit(uow)

        logger.info("wallet.balance_overwritten", user_id=user_id, previous=str(previous), balance=str(balance))
        return wallet

    # ==================== Staging (caller holds wallet key) ====================

    def stage_debit(self, uow: UnitOfWork, wallet: Wallet, amount: Decimal) -> Wallet:
        """
        Stage a debit into uow and return the debited wallet.

        Raises:
            InsufficientBalanceError: amount > wallet.balance (nothing staged)
        """
        if amount > wallet.balance:
            logger.warning(
                "wallet.debit.rejected",
                user_id=wallet.user_id,
                amount=str(amount),
                balance=str(wallet.balance),
            )
            raise InsufficientBalanceError(required=amount, available=wallet.balance)
        debited = wallet.with_balance(wallet.balance - amount, self._clock())
        uow.save_wallet(debited)
        return debited

    def stage_credit(self, uow: UnitOfWork, wallet: Wallet, amount: Decimal) -> Wallet:
        """
        Stage a credit into uow and return the credited wallet.

        A negative amount (a loss larger than the escrow) floors the balance at zero.
        """
        balance = wallet.balance + amount
        if balance < 0:
            logger.warning(
                "wallet.credit.floored",
                user_id=wallet.user_id,
                amount=str(amount),
                balance=str(wallet.balance),
            )
            balance = Decimal("0")
        credited = wallet.with_balance(balance, self._clock())
        uow.save_wallet(credited)
        return credited
