"""FastAPI dependencies: service container, caller identity and quote defaults."""

from fastapi import HTTPException, Request, status

from tradeledger.services.container import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    """Service container attached to the app at startup."""
    return request.app.state.services


def get_current_user(request: Request) -> str:
    """
    Caller's user id from the identity header.

    Authentication happens upstream (gateway or auth middleware); this
    service trusts the header it forwards.
    """
    header = request.app.state.user_header
    user_id = (request.headers.get(header) or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return user_id


def get_default_symbols(request: Request) -> list[str]:
    """Symbols quoted by /api/stocks/quotes when the caller names none."""
    return list(request.app.state.default_symbols)
