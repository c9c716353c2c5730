"""Market data routes: quotes, price history and symbol search.

Public: no identity header is required. Every lookup goes through the
container's stock quote provider, so a quote failure maps to 503.
"""

from fastapi import APIRouter, Depends, Query

from tradeledger.api.dependencies import get_default_symbols, get_services
from tradeledger.services.container import ServiceContainer
from tradeledger.services.portfolio import normalize_symbol
from tradeledger.services.quotes import PriceBar, Quote, SymbolMatch

router = APIRouter()


@router.get("/quote/{symbol}", response_model=Quote)
def get_quote(symbol: str, services: ServiceContainer = Depends(get_services)):
    return services.stock_quotes.get_quote(normalize_symbol(symbol))


@router.get("/quotes", response_model=list[Quote])
def get_quotes(
    symbols: str | None = Query(default=None, description="Comma-separated tickers"),
    default_symbols: list[str] = Depends(get_default_symbols),
    services: ServiceContainer = Depends(get_services),
):
    requested = [normalize_symbol(s) for s in symbols.split(",") if s.strip()] if symbols else default_symbols
    quotes = services.stock_quotes.get_quotes(requested)
    return [quotes[symbol] for symbol in requested]


@router.get("/search", response_model=list[SymbolMatch])
def search_stocks(
    query: str = Query(min_length=1),
    limit: int = Query(default=10, ge=1, le=50),
    services: ServiceContainer = Depends(get_services),
):
    return services.stock_quotes.search(query, limit=limit)


@router.get("/historical/{symbol}", response_model=list[PriceBar])
def get_historical_data(
    symbol: str,
    period: str = Query(default="1d"),
    interval: str = Query(default="5m"),
    services: ServiceContainer = Depends(get_services),
):
    return services.stock_quotes.get_history(normalize_symbol(symbol), period=period, interval=interval)
