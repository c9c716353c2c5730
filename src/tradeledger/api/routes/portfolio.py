"""Portfolio routes: market-price buys and sells, valued holdings and the ledger."""

from fastapi import APIRouter, Depends, Query, status

from tradeledger.api.dependencies import get_current_user, get_services
from tradeledger.api.schemas import BuyRequest, SellRequest
from tradeledger.services.container import ServiceContainer
from tradeledger.services.portfolio import Holding, PortfolioView, Transaction

router = APIRouter()


@router.post("/buy", response_model=Holding, status_code=status.HTTP_201_CREATED)
def buy_stock(
    order: BuyRequest,
    user_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    return services.portfolio.buy_at_market(user_id, order.symbol, order.quantity, order.company_name)


@router.post("/sell", response_model=Holding | None)
def sell_stock(
    order: SellRequest,
    user_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    return services.portfolio.sell_at_market(user_id, order.symbol, order.quantity)


@router.get("/holdings", response_model=PortfolioView)
def get_portfolio(
    user_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    return services.portfolio.get_portfolio(user_id)


@router.get("/transactions", response_model=list[Transaction])
def get_transaction_history(
    limit: int | None = Query(default=None),
    offset: int = Query(default=0),
    user_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    return services.portfolio.get_transaction_history(user_id, limit=limit, offset=offset)
