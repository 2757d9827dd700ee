"""
Exchange-rate source with layered caching.

Lookup order:
1. in-process memory cache
2. Redis cache
3. the upstream HTTP API
4. a stale Redis entry
5. the built-in fallback table

Refreshes run behind an asyncio.Lock so concurrent callers share a single
upstream request.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Union

import httpx
from redis import RedisError
import redis.asyncio as aioredis

from agencydesk.core.config import settings
from agencydesk.core.currency import (
    ANCHOR_CURRENCY,
    Currency,
    ExchangeRateSnapshot,
    convert_amount,
)
from agencydesk.core.logging import get_logger

logger = get_logger(__name__)

# Approximate rates, only used when the API and every cache are unavailable
FALLBACK_RATES: Dict[str, float] = {
    "USD": 1,
    "TRY": 32.5,
    "SAR": 3.75,
    "EGP": 49.5,
    "EUR": 0.92,
    "AED": 3.67,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExchangeRateService:
    def __init__(
        self,
        api_url: str = settings.EXCHANGE_RATES_API_URL,
        redis: Optional[aioredis.Redis] = None,
        cache_seconds: int = settings.EXCHANGE_RATES_CACHE_SECONDS,
        timeout: float = settings.EXCHANGE_RATES_TIMEOUT,
        redis_key: str = settings.EXCHANGE_RATES_REDIS_KEY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.api_url = api_url
        self.redis = redis
        self.cache_window = timedelta(seconds=cache_seconds)
        self.timeout = timeout
        self.redis_key = redis_key
        self.transport = transport
        self.clock = clock
        self._memory: Optional[ExchangeRateSnapshot] = None
        self._lock = asyncio.Lock()

    def is_fresh(self, snapshot: ExchangeRateSnapshot) -> bool:
        return self.clock() - snapshot.fetched_at < self.cache_window

    async def get_rates(self) -> ExchangeRateSnapshot:
        """
        Return the current snapshot, refreshing it when the cache window expired.

        Never raises: upstream failures degrade to cached or fallback rates.
        """
        if self._memory is not None and self.is_fresh(self._memory):
            return self._memory

        async with self._lock:
            # Another caller may have refreshed while we waited
            if self._memory is not None and self.is_fresh(self._memory):
                return self._memory

            cached = await self._read_cache()
            if cached is not None and self.is_fresh(cached):
                self._memory = cached
                return cached

            snapshot = await self._fetch_and_store()
            if snapshot is not None:
                return snapshot

            if cached is not None:
                logger.warning("Using stale exchange rates from Redis cache")
                self._memory = cached
                return cached

            logger.warning("Using fallback exchange rates")
            self._memory = self._snapshot(FALLBACK_RATES)
            return self._memory

    async def refresh(self) -> Optional[ExchangeRateSnapshot]:
        """Force a refetch from the API. Returns None if the API is unavailable."""
        async with self._lock:
            return await self._fetch_and_store()

    async def convert(
        self,
        amount: float,
        from_currency: Union[Currency, str],
        to_currency: Union[Currency, str]
    ) -> float:
        if from_currency == to_currency:
            return amount
        return convert_amount(amount, from_currency, to_currency, await self.get_rates())

    def _snapshot(self, rates: Dict[str, float]) -> ExchangeRateSnapshot:
        now = self.clock()
        return ExchangeRateSnapshot(
            base=ANCHOR_CURRENCY.value,
            date=now.date().isoformat(),
            rates=dict(rates),
            fetched_at=now,
        )

    async def _fetch_and_store(self) -> Optional[ExchangeRateSnapshot]:
        rates = await self.fetch_from_api()
        if rates is None:
            return None
        snapshot = self._snapshot(rates)
        await self._write_cache(snapshot)
        self._memory = snapshot
        return snapshot

    async def fetch_from_api(self) -> Optional[Dict[str, float]]:
        """
        Fetch USD based rates, keeping only supported currencies.

        Returns:
            Mapping of currency code to rate, or None when the request fails
            or the payload is not a successful result
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.api_url)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch exchange rates from API: {e}")
            return None

        if not isinstance(data, dict) or data.get("result") != "success" or not isinstance(data.get("rates"), dict):
            logger.error("Unexpected exchange rates payload")
            return None

        rates = {ANCHOR_CURRENCY.value: 1.0}
        for currency in Currency:
            value = data["rates"].get(currency.value)
            if value:
                rates[currency.value] = float(value)
        logger.info(f"Fetched exchange rates for {len(rates)} currencies")
        return rates

    async def _read_cache(self) -> Optional[ExchangeRateSnapshot]:
        if self.redis is None:
            return None
        try:
            raw = await self.redis.get(self.redis_key)
        except RedisError as e:
            logger.error(f"Failed to read cached exchange rates: {e}")
            return None
        if raw is None:
            return None
        try:
            return ExchangeRateSnapshot.model_validate_json(raw)
        except ValueError as e:
            logger.warning(f"Discarding malformed cached exchange rates: {e}")
            return None

    async def _write_cache(self, snapshot: ExchangeRateSnapshot):
        if self.redis is None:
            return
        try:
            await self.redis.set(self.redis_key, snapshot.model_dump_json())
        except RedisError as e:
            logger.error(f"Failed to cache exchange rates: {e}")
