from __future__ import annotations

"""Rate provider abstraction.

A provider answers one question: the latest rates of every currency relative
to USD. Matrix derivation, caching and fallback live in the cache service.
"""
from abc import ABC, abstractmethod
from typing import Dict


class RateProvider(ABC):
    base_currency: str = "USD"
    name: str = "abstract"

    @abstractmethod
    async def fetch_usd_rates(self) -> Dict[str, float]:
        """Return units of each currency per 1 USD (e.g. {"EUR": 0.92, ...}).

        Implementations raise UpstreamUnavailable on any failure.
        """
        raise NotImplementedError
