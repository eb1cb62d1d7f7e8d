"""Shared fixtures: a fake rate provider, a controllable clock and an API client."""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from conversion_api.core.config import Settings
from conversion_api.main import create_app
from conversion_api.services.rates.base import RateProvider
from conversion_api.services.rates.cache_service import CurrencyRateCache

LIVE_USD_RATES = {"USD": 1.0, "EUR": 0.9, "MXN": 18.0, "CHF": 0.8}


class FakeRateProvider(RateProvider):
    name = "fake"

    def __init__(
        self,
        rates: Optional[Dict[str, float]] = None,
        error: Optional[Exception] = None,
    ):
        self.rates = dict(rates or LIVE_USD_RATES)
        self.error = error
        self.calls = 0

    async def fetch_usd_rates(self) -> Dict[str, float]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return dict(self.rates)


class FakeClock:
    def __init__(self, start: datetime = datetime(2025, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def provider() -> FakeRateProvider:
    return FakeRateProvider()


@pytest.fixture
def rate_cache(provider, clock) -> CurrencyRateCache:
    return CurrencyRateCache(provider, ttl_seconds=3600, clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(exchange_rate_provider="static", debug=False)


@pytest.fixture
def client(settings, rate_cache) -> TestClient:
    return TestClient(create_app(settings_override=settings, rate_cache=rate_cache))
