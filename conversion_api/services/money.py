"""Rounding helpers.

Centralized so unit and currency conversions use identical half-up rounding
semantics, independent of binary float representation.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Union

# Beyond 2**53 floats no longer map one-to-one onto integers.
_MAX_EXACT_INT = 2**53


def compact_number(value: float) -> Union[int, float]:
    """Integral floats become ints so JSON renders 1 rather than 1.0."""
    if value.is_integer() and abs(value) < _MAX_EXACT_INT:
        return int(value)
    return value


def round_to(value: float, places: int) -> Union[int, float]:
    quantum = Decimal(1).scaleb(-places)
    exact = Decimal(str(value))
    with localcontext() as ctx:
        # Large magnitudes need more digits than the default context allows.
        ctx.prec = max(28, exact.adjusted() + places + 2)
        return compact_number(float(exact.quantize(quantum, rounding=ROUND_HALF_UP)))


def round2(value: float) -> Union[int, float]:
    return round_to(value, 2)
