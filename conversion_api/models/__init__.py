"""Pydantic request/response models for the conversion API."""

from .constants import CATEGORIES, CURRENCIES, RATE_BASE_CURRENCY  # re-export
from .conversion import ConversionIn, ConversionOut, CurrencyConversionOut, RatesOut

__all__ = [
    "CATEGORIES",
    "CURRENCIES",
    "RATE_BASE_CURRENCY",
    "ConversionIn",
    "ConversionOut",
    "CurrencyConversionOut",
    "RatesOut",
]
