from datetime import date
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import OAuth2PasswordBearer
import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.core.config import settings
from agencydesk.core.currency import Currency, ExchangeRateSnapshot, parse_currency
from agencydesk.core.permissions import Permission, has_any_permission, is_admin
from agencydesk.core.security import decode_access_token
from agencydesk.db.session import SessionAsync
from agencydesk.models.user import User
from agencydesk.schemas.auth import AuthUser
from agencydesk.services.exchange_rates import ExchangeRateService
from agencydesk.services.users import get_user, to_auth_user

# auto_error=False so the access_token cookie can be used as a fallback
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/auth/token",
    description="Authentication with email and password",
    auto_error=False
)


async def get_db():
    async with SessionAsync() as session:
        yield session


_exchange_rate_service: Optional[ExchangeRateService] = None


def get_exchange_rate_service() -> ExchangeRateService:
    """Process-wide rate service, so the memory cache and refresh lock are shared."""
    global _exchange_rate_service
    if _exchange_rate_service is None:
        _exchange_rate_service = ExchangeRateService(
            redis=aioredis.from_url(settings.REDIS_URL, decode_responses=True)
        )
    return _exchange_rate_service


async def get_rates_snapshot(
    service: ExchangeRateService = Depends(get_exchange_rate_service)
) -> ExchangeRateSnapshot:
    return await service.get_rates()


def get_today() -> date:
    return date.today()


def _token_from_request(request: Request, token: Optional[str]) -> Optional[str]:
    # Authorization header first, then the cookie
    if token:
        return token
    cookie = request.cookies.get(settings.ACCESS_TOKEN_COOKIE)
    if cookie and cookie.startswith("Bearer "):
        cookie = cookie[len("Bearer "):]
    return cookie or None


async def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    token = _token_from_request(request, token)
    if not token:
        return None

    payload = decode_access_token(token)
    if payload is None or payload.get("sub") is None:
        return None

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return None

    user = await get_user(db, user_id)
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_auth_user(user: User = Depends(get_current_user)) -> AuthUser:
    return to_auth_user(user)


# ==================== Permission Dependencies ====================

def require_permission(*permissions: Permission):
    """
    Factory to create a dependency that checks the current user's permissions.

    The user passes when they hold any of the given permissions; admins
    always pass.

    Usage:
        @router.get("/")
        async def list_clients(user: AuthUser = Depends(require_permission(Permission.VIEW_CLIENTS))):
            ...
    """
    async def permission_checker(user: AuthUser = Depends(get_auth_user)) -> AuthUser:
        if not has_any_permission(user, *permissions):
            names = ", ".join(p.value for p in permissions)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions: requires one of {names}"
            )
        return user

    return permission_checker


async def require_admin(user: AuthUser = Depends(get_auth_user)) -> AuthUser:
    if not is_admin(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user


def get_display_currency(
    currency: Optional[str] = Query(None, description="Override the user's display currency"),
    user: AuthUser = Depends(get_auth_user),
) -> Currency:
    """The query override, else the user's preference, else the configured default."""
    if currency:
        return parse_currency(currency)
    return parse_currency(user.display_currency or settings.DEFAULT_CURRENCY)
