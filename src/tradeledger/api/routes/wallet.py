"""Wallet routes: balance, deposits, withdrawals and balance overrides."""

from fastapi import APIRouter, Depends

from tradeledger.api.dependencies import get_current_user, get_services
from tradeledger.api.schemas import AmountRequest, BalanceResponse, BalanceUpdateRequest
from tradeledger.services.container import ServiceContainer

router = APIRouter()


@router.get("/balance", response_model=BalanceResponse)
def get_balance(
    user_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    return BalanceResponse(balance=services.wallets.get_balance(user_id))


@router.post("/add", response_model=BalanceResponse)
def add_money(
    body: AmountRequest,
    user_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    wallet = services.wallets.add_money(user_id, body.amount)
    return BalanceResponse(balance=wallet.balance)


@router.post("/remove", response_model=BalanceResponse)
def remove_money(
    body: AmountRequest,
    user_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    wallet = services.wallets.remove_money(user_id, body.amount)
    return BalanceResponse(balance=wallet.balance)


@router.post("/update", response_model=BalanceResponse)
def update_balance(
    body: BalanceUpdateRequest,
    user_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    wallet = services.wallets.update_balance(user_id, body.balance)
    return BalanceResponse(balance=wallet.balance)
