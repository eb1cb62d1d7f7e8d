from __future__ import annotations

"""Concrete rate providers and factory.

'external-http' reads the live USD-based endpoint configured in settings;
'static' answers from the fallback table so the API works fully offline.
"""
import logging
import math
from types import MappingProxyType
from typing import Dict, Mapping, Optional

import httpx

from conversion_api.core.config import Settings
from conversion_api.core.errors import UpstreamUnavailable
from conversion_api.models.constants import CURRENCIES, RATE_BASE_CURRENCY
from conversion_api.services.http_client import HttpError, get_json
from .base import RateProvider

logger = logging.getLogger("conversion_api.rates.providers")

RateMatrix = Mapping[str, Mapping[str, float]]

# Used whenever a live refresh fails; review periodically.
FALLBACK_RATES: RateMatrix = MappingProxyType(
    {
        "USD": MappingProxyType({"EUR": 0.85, "MXN": 17.5, "CHF": 0.92}),
        "EUR": MappingProxyType({"USD": 1.18, "MXN": 20.6, "CHF": 1.08}),
        "MXN": MappingProxyType({"USD": 0.057, "EUR": 0.048, "CHF": 0.052}),
        "CHF": MappingProxyType({"USD": 1.09, "EUR": 0.93, "MXN": 19.2}),
    }
)


def _validated_rate(code: str, raw: object) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise UpstreamUnavailable(f"rate for {code} missing or not numeric: {raw!r}")
    rate = float(raw)
    if not math.isfinite(rate) or rate <= 0:
        raise UpstreamUnavailable(f"rate for {code} must be positive: {raw!r}")
    return rate


class StaticRateProvider(RateProvider):
    name = "static"

    async def fetch_usd_rates(self) -> Dict[str, float]:
        rates = {RATE_BASE_CURRENCY: 1.0}
        rates.update(FALLBACK_RATES[RATE_BASE_CURRENCY])
        return rates


class ExternalHTTPRateProvider(RateProvider):
    """Fetches `{"rates": {CODE: number}}` relative to USD from a public endpoint."""

    name = "external-http"

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 5.0,
        retries: int = 0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = url
        self._timeout = timeout
        self._retries = retries
        self._transport = transport

    async def fetch_usd_rates(self) -> Dict[str, float]:
        try:
            data = await get_json(
                self._url,
                timeout=self._timeout,
                retries=self._retries,
                transport=self._transport,
            )
        except HttpError as e:
            raise UpstreamUnavailable(str(e)) from e

        rates = data.get("rates")
        if not isinstance(rates, dict):
            raise UpstreamUnavailable(f"response from {self._url} has no 'rates' object")
        out: Dict[str, float] = {RATE_BASE_CURRENCY: 1.0}
        for code in CURRENCIES:
            if code == RATE_BASE_CURRENCY:
                continue
            out[code] = _validated_rate(code, rates.get(code))
        return out


def make_rate_provider(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> RateProvider:
    kind = settings.exchange_rate_provider
    if kind == "static":
        return StaticRateProvider()
    if kind == "external-http":
        return ExternalHTTPRateProvider(
            str(settings.exchange_api_url),
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
            transport=transport,
        )
    raise ValueError(f"Unknown rate provider kind '{kind}'")
