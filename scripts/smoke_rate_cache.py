"""Smoke script for the currency rate cache.

Demonstrates:
 1. First access triggers one provider fetch.
 2. A second access within the TTL reuses the snapshot (same timestamp).
 3. Backdating the snapshot beyond the TTL forces a refresh.

Uses the configured provider (EXCHANGE_RATE_PROVIDER=static works offline).
NOTE: This is a lightweight diagnostic and not a formal test.
"""

import asyncio
from dataclasses import replace
from datetime import timedelta
from pprint import pprint

from conversion_api.core.config import get_settings
from conversion_api.services.rates.cache_service import build_rate_cache


async def run():
    cache = build_rate_cache(get_settings())
    out = {}

    first = await cache.get_rates()
    out["initial"] = {"source": first.source, "lastUpdated": first.last_updated_ms}

    second = await cache.get_rates()
    out["second"] = {"source": second.source, "lastUpdated": second.last_updated_ms}

    # Force refresh by backdating fetched_at beyond TTL
    cache._snapshot = replace(  # type: ignore[attr-defined]
        second, fetched_at=second.fetched_at - cache._ttl - timedelta(seconds=5)  # type: ignore[attr-defined]
    )
    third = await cache.get_rates()
    out["forced_refresh"] = {"source": third.source, "lastUpdated": third.last_updated_ms}

    conversion = await cache.convert("USD", "EUR", 10)
    out["10 USD -> EUR"] = {"result": conversion.result, "rate": conversion.rate}
    pprint(out)


if __name__ == "__main__":
    asyncio.run(run())
