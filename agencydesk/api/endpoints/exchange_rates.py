"""
Exchange Rates API Endpoints

Rates are relative to USD and cached for an hour by the exchange-rate service.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from agencydesk.api.dependencies import get_auth_user, get_exchange_rate_service, require_admin
from agencydesk.core.currency import ExchangeRateSnapshot, format_currency, parse_currency
from agencydesk.schemas.auth import AuthUser
from agencydesk.schemas.dashboard import CurrencyConversion
from agencydesk.services.exchange_rates import ExchangeRateService

router = APIRouter()


@router.get("/", response_model=ExchangeRateSnapshot)
async def get_exchange_rates(
    user: AuthUser = Depends(get_auth_user),
    service: ExchangeRateService = Depends(get_exchange_rate_service)
):
    return await service.get_rates()


@router.post("/refresh", response_model=ExchangeRateSnapshot)
async def refresh_exchange_rates(
    admin: AuthUser = Depends(require_admin),
    service: ExchangeRateService = Depends(get_exchange_rate_service)
):
    snapshot = await service.refresh()
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Exchange rate provider unavailable"
        )
    return snapshot


@router.get("/convert", response_model=CurrencyConversion)
async def convert(
    amount: float = Query(..., allow_inf_nan=False),
    from_currency: str = Query(..., alias="from"),
    to_currency: str = Query(..., alias="to"),
    user: AuthUser = Depends(get_auth_user),
    service: ExchangeRateService = Depends(get_exchange_rate_service)
):
    source = parse_currency(from_currency)
    target = parse_currency(to_currency)
    converted = await service.convert(amount, source, target)
    return CurrencyConversion(
        amount=amount,
        from_currency=source,
        to_currency=target,
        converted=converted,
        formatted=format_currency(converted, target),
    )
