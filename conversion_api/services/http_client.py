from __future__ import annotations

"""Async HTTP JSON client with limited retry.

Shared by the external rate provider. Callers may pass an httpx transport so
tests can answer requests without touching the network.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger("conversion_api.http")


class HttpError(Exception):
    pass


async def get_json(
    url: str,
    *,
    timeout: float = 5.0,
    retries: int = 0,
    backoff: float = 0.5,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    last_err: Optional[Exception] = None
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        for attempt in range(retries + 1):
            try:
                resp = await client.get(url)
                resp.raise_for_status()
                data = resp.json()
                if not isinstance(data, dict):
                    raise HttpError(f"Expected a JSON object from {url}")
                return data
            except (httpx.HTTPError, HttpError, ValueError) as e:  # ValueError for JSON decode
                last_err = e
                logger.debug("GET %s failed on attempt %d: %s", url, attempt + 1, e)
                if attempt == retries:
                    break
                await asyncio.sleep(backoff * (2**attempt))
    raise HttpError(f"Failed to fetch JSON from {url}: {last_err}")
