from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import APIRouter, Depends, Request

from conversion_api.core.errors import ConversionError, UnexpectedConversionError
from conversion_api.models.conversion import (
    ConversionIn,
    ConversionOut,
    CurrencyConversionOut,
    RatesOut,
)
from conversion_api.services.rates.cache_service import CurrencyRateCache
from conversion_api.services.units.converter import convert_units

"""Conversion router.

Endpoints:
    - POST /api/conversion/time
    - POST /api/conversion/weight
    - POST /api/conversion/temperature
    - POST /api/conversion/currency
    - GET  /api/conversion/currency/rates

Unit routes are stateless; currency routes go through the rate cache held on
app.state, which may refresh from the external provider before answering.
"""

router = APIRouter(prefix="/api/conversion", tags=["conversion"])
logger = logging.getLogger("conversion_api.routers.conversion")


def get_rate_cache(request: Request) -> CurrencyRateCache:
    return request.app.state.rate_cache


@contextmanager
def unexpected_errors_as(message: str) -> Iterator[None]:
    """Let domain errors through; turn anything else into a logged 500."""
    try:
        yield
    except ConversionError:
        raise
    except Exception as e:
        logger.exception("conversion failed unexpectedly")
        raise UnexpectedConversionError(message) from e


@router.post("/time", response_model=ConversionOut, summary="Convert time units")
async def convert_time(payload: ConversionIn):
    with unexpected_errors_as("Error en la conversión de tiempo"):
        result = convert_units("time", payload.from_unit, payload.to_unit, payload.value)
    return ConversionOut(result=result)


@router.post("/weight", response_model=ConversionOut, summary="Convert weight units")
async def convert_weight(payload: ConversionIn):
    with unexpected_errors_as("Error en la conversión de peso"):
        result = convert_units(
            "weight", payload.from_unit, payload.to_unit, payload.value
        )
    return ConversionOut(result=result)


@router.post(
    "/temperature", response_model=ConversionOut, summary="Convert temperature units"
)
async def convert_temperature(payload: ConversionIn):
    with unexpected_errors_as("Error en la conversión de temperatura"):
        result = convert_units(
            "temperature", payload.from_unit, payload.to_unit, payload.value
        )
    return ConversionOut(result=result)


@router.post(
    "/currency",
    response_model=CurrencyConversionOut,
    response_model_exclude_none=True,
    summary="Convert between supported currencies",
)
async def convert_currency(
    payload: ConversionIn,
    cache: CurrencyRateCache = Depends(get_rate_cache),
):
    with unexpected_errors_as("Error en la conversión de moneda"):
        conversion = await cache.convert(
            payload.from_unit, payload.to_unit, payload.value
        )
    return CurrencyConversionOut(
        result=conversion.result,
        rate=conversion.rate,
        last_updated=conversion.last_updated,
    )


@router.get(
    "/currency/rates",
    response_model=RatesOut,
    summary="Current exchange rate matrix and its fetch time",
)
async def get_currency_rates(cache: CurrencyRateCache = Depends(get_rate_cache)):
    with unexpected_errors_as("Error obteniendo tasas de cambio"):
        snapshot = await cache.get_rates()
    return RatesOut(rates=snapshot.rates_dict(), last_updated=snapshot.last_updated_ms)
