"""FastAPI application factory.

Routes:
    /api/portfolio  buy, sell, holdings, transactions
    /api/forex      pairs, trade, trades, close
    /api/wallet     balance, add, remove, update
    /api/stocks     quote, quotes, search, historical (no identity header)
    /health         liveness

Domain errors map to their HTTP status with {"detail": message}. Services
built by create_app are shut down with the app; injected ones belong to the
caller.
"""

from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tradeledger import __version__
from tradeledger.api.routes import forex, portfolio, stocks, wallet
from tradeledger.errors import TradeLedgerError
from tradeledger.services.container import ServiceContainer, build_services
from tradeledger.system import LoggerFactory, bind_request_context, clear_request_context
from tradeledger.system.config import SystemConfig

logger = LoggerFactory.get_logger()

REQUEST_ID_HEADER = "X-Request-Id"


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg', 'invalid')}" if location else error.get("msg", "invalid"))
    return "; ".join(parts) or "Invalid request"


async def handle_domain_error(request: Request, exc: TradeLedgerError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.warning("api.request.failed", path=request.url.path, status=exc.http_status, error=exc.message)
    return JSONResponse(status_code=exc.http_status, content={"detail": exc.message})


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": _describe_validation_errors(exc)},
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("api.request.crashed", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app(services: ServiceContainer | None = None, config: SystemConfig | None = None) -> FastAPI:
    """
    Build the API application.

    Args:
        services: Pre-built services (tests pass one with static quotes)
        config: System config; defaults to built-in defaults

    Returns:
        FastAPI app with services on app.state
    """
    config = config or SystemConfig()
    owns_services = services is None
    services = services or build_services(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_services:
            services.shutdown()
            logger.info("api.shutdown")

    app = FastAPI(title="TradeLedger", version=__version__, lifespan=lifespan)
    app.state.services = services
    app.state.user_header = config.api.user_header
    app.state.default_symbols = config.quotes.default_symbols

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex[:12]
        clear_request_context()
        bind_request_context(
            request_id=request_id,
            user_id=request.headers.get(config.api.user_header, "-"),
            path=request.url.path,
        )
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    app.add_exception_handler(TradeLedgerError, handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(portfolio.router, prefix="/api/portfolio", tags=["portfolio"])
    app.include_router(forex.router, prefix="/api/forex", tags=["forex"])
    app.include_router(wallet.router, prefix="/api/wallet", tags=["wallet"])
    app.include_router(stocks.router, prefix="/api/stocks", tags=["stocks"])

    @app.get("/health")
    def health():
        return {"status": "ok", "version": __version__}

    logger.info("api.created", user_header=config.api.user_header, quote_provider=config.quotes.provider)
    return app
