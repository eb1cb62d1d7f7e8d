from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

import httpx

from conversion_api.core.config import Settings
from conversion_api.core.errors import (
    INVALID_CURRENCY_MESSAGE,
    InvalidConversion,
    UpstreamUnavailable,
)
from conversion_api.models.constants import CURRENCIES, RATE_BASE_CURRENCY
from conversion_api.services.conversion_validation import (
    Number,
    ensure_in_range,
    validate_request,
)
from conversion_api.services.money import round2
from .base import RateProvider
from .providers import FALLBACK_RATES, RateMatrix, make_rate_provider

"""Currency rate cache.

Purpose:
    Hold one USD-derived rate matrix for the supported currencies together with
    the moment it was obtained, and answer conversions and raw-rate queries
    from it.

Design:
    - Single entry TTL cache: the whole matrix is stale once older than the TTL
      (rates_cache_ttl_seconds), or never fetched.
    - Refresh asks the provider for USD-relative rates and derives every cross
      rate through USD. The new snapshot replaces the old one in one assignment.
    - Any provider failure is logged and the fallback matrix is stored with the
      current timestamp, as if freshly fetched; callers never see the error.
      Fallback snapshots expire after rates_fallback_ttl_seconds.
    - Concurrent stale readers share one in-flight refresh (asyncio.Lock with a
      re-check once acquired).
"""

LIVE = "live"
FALLBACK = "fallback"

logger = logging.getLogger("conversion_api.rates.cache")


@dataclass(frozen=True)
class RateSnapshot:
    matrix: RateMatrix
    fetched_at: datetime
    source: str

    @property
    def last_updated_ms(self) -> int:
        return int(self.fetched_at.timestamp() * 1000)

    def rates_dict(self) -> Dict[str, Dict[str, float]]:
        return {base: dict(quotes) for base, quotes in self.matrix.items()}


@dataclass(frozen=True)
class CurrencyConversion:
    result: Number
    rate: Optional[float] = None
    last_updated: Optional[int] = None


def derive_matrix(usd_rates: Mapping[str, float]) -> RateMatrix:
    """Build the full cross-rate matrix from rates relative to USD.

    rate[X][Y] = p[Y] / p[X], with p[USD] fixed at 1.
    """
    per_usd = dict(usd_rates)
    per_usd[RATE_BASE_CURRENCY] = 1.0
    for code in CURRENCIES:
        rate = per_usd.get(code)
        if rate is None or rate <= 0:
            raise UpstreamUnavailable(f"no usable USD rate for {code}: {rate!r}")
    return MappingProxyType(
        {
            base: MappingProxyType(
                {
                    quote: per_usd[quote] / per_usd[base]
                    for quote in CURRENCIES
                    if quote != base
                }
            )
            for base in CURRENCIES
        }
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CurrencyRateCache:
    """In-memory rate cache with TTL refresh and fallback on provider failure."""

    def __init__(
        self,
        provider: RateProvider,
        *,
        ttl_seconds: int = 3600,
        fallback_ttl_seconds: int = 3600,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._provider = provider
        self._ttl = timedelta(seconds=ttl_seconds)
        self._fallback_ttl = timedelta(seconds=fallback_ttl_seconds)
        self._clock = clock
        self._snapshot: Optional[RateSnapshot] = None
        self._refresh_lock = asyncio.Lock()

    @property
    def snapshot(self) -> Optional[RateSnapshot]:
        return self._snapshot

    # Internal --------------------------------------------------
    def _is_fresh(self, snapshot: RateSnapshot) -> bool:
        ttl = self._fallback_ttl if snapshot.source == FALLBACK else self._ttl
        return self._clock() - snapshot.fetched_at <= ttl

    async def _fetch_matrix(self) -> tuple[RateMatrix, str]:
        try:
            usd_rates = await self._provider.fetch_usd_rates()
            matrix = derive_matrix(usd_rates)
        except UpstreamUnavailable as e:
            logger.warning(
                "rate refresh via %s failed, using fallback rates: %s",
                self._provider.name,
                e,
            )
            return FALLBACK_RATES, FALLBACK
        except Exception:
            logger.exception(
                "unexpected error refreshing rates via %s, using fallback rates",
                self._provider.name,
            )
            return FALLBACK_RATES, FALLBACK
        logger.info("currency rates refreshed via %s", self._provider.name)
        return matrix, LIVE

    async def _refresh(self) -> RateSnapshot:
        matrix, source = await self._fetch_matrix()
        snapshot = RateSnapshot(matrix=matrix, fetched_at=self._clock(), source=source)
        self._snapshot = snapshot
        return snapshot

    # Public API -----------------------------------------------
    async def get_rates(self) -> RateSnapshot:
        snapshot = self._snapshot
        if snapshot is not None and self._is_fresh(snapshot):
            return snapshot
        async with self._refresh_lock:
            # Another request may have refreshed while we waited.
            snapshot = self._snapshot
            if snapshot is None or not self._is_fresh(snapshot):
                snapshot = await self._refresh()
        return snapshot

    async def convert(
        self, from_currency: Any, to_currency: Any, value: Any
    ) -> CurrencyConversion:
        amount, source, target = validate_request(
            value, from_currency, to_currency, INVALID_CURRENCY_MESSAGE
        )
        if source == target:
            return CurrencyConversion(result=amount)

        snapshot = await self.get_rates()
        rate = snapshot.matrix.get(source, {}).get(target)
        if rate is None:
            raise InvalidConversion(INVALID_CURRENCY_MESSAGE)
        return CurrencyConversion(
            result=round2(ensure_in_range(amount * rate)),
            rate=rate,
            last_updated=snapshot.last_updated_ms,
        )


def build_rate_cache(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> CurrencyRateCache:
    return CurrencyRateCache(
        make_rate_provider(settings, transport=transport),
        ttl_seconds=settings.rates_cache_ttl_seconds,
        fallback_ttl_seconds=settings.rates_fallback_ttl_seconds,
    )
