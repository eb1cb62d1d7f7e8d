import asyncio
import logging

import pytest

from conversion_api.core.errors import InvalidConversion, MissingParameter, UpstreamUnavailable
from conversion_api.services.rates.cache_service import (
    FALLBACK,
    LIVE,
    CurrencyRateCache,
    derive_matrix,
)
from conversion_api.services.rates.providers import FALLBACK_RATES

from .conftest import FakeRateProvider


def test_derive_matrix_crosses_through_usd():
    matrix = derive_matrix({"EUR": 0.9, "MXN": 18.0, "CHF": 0.8})
    assert set(matrix) == {"USD", "EUR", "MXN", "CHF"}
    assert matrix["USD"]["EUR"] == 0.9
    assert matrix["USD"]["MXN"] == 18.0
    assert matrix["EUR"]["USD"] == pytest.approx(1 / 0.9)
    assert matrix["EUR"]["MXN"] == pytest.approx(20.0)
    assert matrix["CHF"]["EUR"] == pytest.approx(1.125)
    for base, quotes in matrix.items():
        assert base not in quotes
        for quote, rate in quotes.items():
            assert rate * matrix[quote][base] == pytest.approx(1.0)


def test_derive_matrix_rejects_missing_or_non_positive_rates():
    with pytest.raises(UpstreamUnavailable):
        derive_matrix({"EUR": 0.9, "MXN": 18.0})
    with pytest.raises(UpstreamUnavailable):
        derive_matrix({"EUR": 0.9, "MXN": 0, "CHF": 0.8})


def test_derived_matrix_is_read_only():
    matrix = derive_matrix({"EUR": 0.9, "MXN": 18.0, "CHF": 0.8})
    with pytest.raises(TypeError):
        matrix["USD"]["EUR"] = 2.0  # type: ignore[index]


@pytest.mark.asyncio
async def test_first_call_fetches_exactly_once(rate_cache, provider, clock):
    assert rate_cache.snapshot is None
    snapshot = await rate_cache.get_rates()
    assert provider.calls == 1
    assert snapshot.source == LIVE
    assert snapshot.fetched_at == clock.now
    assert snapshot.last_updated_ms == int(clock.now.timestamp() * 1000)


@pytest.mark.asyncio
async def test_calls_within_ttl_do_not_fetch(rate_cache, provider, clock):
    first = await rate_cache.get_rates()
    clock.advance(minutes=59)
    second = await rate_cache.get_rates()
    clock.advance(minutes=1)  # exactly one hour old is still fresh
    await rate_cache.convert("USD", "EUR", 1)
    assert provider.calls == 1
    assert second is first


@pytest.mark.asyncio
async def test_call_after_ttl_refreshes(rate_cache, provider, clock):
    first = await rate_cache.get_rates()
    clock.advance(hours=1, seconds=1)
    provider.rates["EUR"] = 0.95
    second = await rate_cache.get_rates()
    assert provider.calls == 2
    assert second is not first
    assert second.matrix["USD"]["EUR"] == 0.95
    assert second.fetched_at == clock.now


@pytest.mark.asyncio
async def test_failure_falls_back_and_is_cached_with_timestamp(clock, caplog):
    provider = FakeRateProvider(error=UpstreamUnavailable("connection refused"))
    cache = CurrencyRateCache(provider, ttl_seconds=3600, clock=clock)

    with caplog.at_level(logging.WARNING, logger="conversion_api.rates.cache"):
        snapshot = await cache.get_rates()

    assert snapshot.source == FALLBACK
    assert snapshot.matrix is FALLBACK_RATES
    assert snapshot.fetched_at == clock.now
    assert "using fallback rates" in caplog.text

    clock.advance(minutes=30)
    await cache.get_rates()
    assert provider.calls == 1

    clock.advance(minutes=31)
    await cache.get_rates()
    assert provider.calls == 2


@pytest.mark.asyncio
async def test_fallback_ttl_is_independent(clock):
    provider = FakeRateProvider(error=UpstreamUnavailable("timeout"))
    cache = CurrencyRateCache(
        provider, ttl_seconds=3600, fallback_ttl_seconds=300, clock=clock
    )
    await cache.get_rates()
    clock.advance(minutes=6)
    await cache.get_rates()
    assert provider.calls == 2


@pytest.mark.asyncio
async def test_unexpected_provider_error_also_falls_back(clock):
    provider = FakeRateProvider(error=RuntimeError("bug in provider"))
    cache = CurrencyRateCache(provider, clock=clock)
    conversion = await cache.convert("USD", "EUR", 10)
    assert conversion.result == 8.5
    assert conversion.rate == 0.85


@pytest.mark.asyncio
async def test_recovers_live_rates_after_outage(clock):
    provider = FakeRateProvider(error=UpstreamUnavailable("down"))
    cache = CurrencyRateCache(provider, clock=clock)
    assert (await cache.get_rates()).source == FALLBACK
    provider.error = None
    clock.advance(hours=2)
    snapshot = await cache.get_rates()
    assert snapshot.source == LIVE
    assert snapshot.matrix["USD"]["EUR"] == 0.9


@pytest.mark.asyncio
async def test_concurrent_stale_reads_share_one_refresh(clock):
    class SlowProvider(FakeRateProvider):
        async def fetch_usd_rates(self):
            await asyncio.sleep(0.01)
            return await super().fetch_usd_rates()

    provider = SlowProvider()
    cache = CurrencyRateCache(provider, clock=clock)
    snapshots = await asyncio.gather(*(cache.get_rates() for _ in range(5)))
    assert provider.calls == 1
    assert all(s is snapshots[0] for s in snapshots)


@pytest.mark.asyncio
async def test_convert_uses_cached_rate(rate_cache, clock):
    conversion = await rate_cache.convert("USD", "MXN", 10)
    assert conversion.result == 180.0
    assert conversion.rate == 18.0
    assert conversion.last_updated == int(clock.now.timestamp() * 1000)


@pytest.mark.asyncio
async def test_convert_rounds_to_two_places(rate_cache):
    conversion = await rate_cache.convert("MXN", "USD", "100")
    assert conversion.result == 5.56
    assert conversion.rate == pytest.approx(1 / 18)


@pytest.mark.asyncio
async def test_identity_conversion_never_touches_cache(rate_cache, provider):
    conversion = await rate_cache.convert("XYZ", "XYZ", 42.123)
    assert conversion.result == 42.123
    assert conversion.rate is None
    assert conversion.last_updated is None
    assert provider.calls == 0


@pytest.mark.asyncio
async def test_unknown_currency_is_invalid(rate_cache):
    with pytest.raises(InvalidConversion) as exc:
        await rate_cache.convert("USD", "GBP", 10)
    assert exc.value.message == "Conversión de moneda no válida"


@pytest.mark.asyncio
async def test_missing_value_is_rejected_before_fetch(rate_cache, provider):
    with pytest.raises(MissingParameter):
        await rate_cache.convert("USD", "EUR", None)
    assert provider.calls == 0


@pytest.mark.asyncio
async def test_overflowing_conversion_is_invalid(rate_cache):
    with pytest.raises(InvalidConversion) as exc:
        await rate_cache.convert("USD", "MXN", 1e308)
    assert exc.value.message == "Resultado fuera de rango"
