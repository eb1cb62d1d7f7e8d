"""Domain constants for validation and lookup."""

from typing import Tuple

CATEGORIES: Tuple[str, ...] = ("time", "weight", "temperature", "currency")
CURRENCIES: Tuple[str, ...] = ("USD", "EUR", "MXN", "CHF")
RATE_BASE_CURRENCY = "USD"
