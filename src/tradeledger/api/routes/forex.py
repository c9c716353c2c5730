"""Forex routes: supported pairs, escrowed trades and closing them."""

from fastapi import APIRouter, Depends

from tradeledger.api.dependencies import get_current_user, get_services
from tradeledger.api.schemas import ForexTradeRequest
from tradeledger.services.container import ServiceContainer
from tradeledger.services.forex import ForexPairQuote, ForexTrade, TradeResult, TradeStatus

router = APIRouter()


@router.get("/pairs", response_model=list[ForexPairQuote])
def get_forex_pairs(
    user_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    return services.forex.get_pairs()


@router.post("/trade", response_model=TradeResult)
def execute_trade(
    trade: ForexTradeRequest,
    user_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    return services.forex.execute_trade(user_id, trade.pair, trade.amount, trade.type)


@router.get("/trades", response_model=list[ForexTrade])
def get_user_trades(
    status: TradeStatus | None = None,
    user_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    return services.forex.get_user_trades(user_id, status=status)


@router.post("/trade/{trade_id}/close", response_model=TradeResult)
def close_trade(
    trade_id: str,
    user_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    return services.forex.close_trade(user_id, trade_id)
