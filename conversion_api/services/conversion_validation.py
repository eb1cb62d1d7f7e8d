from __future__ import annotations

import math
from typing import Any, Tuple, Union

from conversion_api.core.errors import InvalidConversion, MissingParameter
from conversion_api.services.money import compact_number

Number = Union[int, float]

OUT_OF_RANGE_MESSAGE = "Resultado fuera de rango"


def parse_value(value: Any) -> Number:
    """Return value as a finite number; numeric strings are accepted.

    JSON ints and floats come back as given so identity conversions echo the
    input. Integral numeric strings ("5") come back as ints.
    """
    if value is None or isinstance(value, bool):
        raise MissingParameter()
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise MissingParameter()
        try:
            parsed = float(text)
        except ValueError as e:
            raise MissingParameter() from e
        if not math.isfinite(parsed):
            raise MissingParameter()
        return compact_number(parsed)
    if not isinstance(value, (int, float)):
        raise MissingParameter()
    try:
        as_float = float(value)
    except OverflowError as e:
        # ints beyond float range
        raise MissingParameter() from e
    if not math.isfinite(as_float):
        raise MissingParameter()
    return value


def ensure_in_range(result: float) -> float:
    if not math.isfinite(result):
        raise InvalidConversion(OUT_OF_RANGE_MESSAGE)
    return result


def validate_request(
    value: Any, from_unit: Any, to_unit: Any, invalid_message: str | None = None
) -> Tuple[Number, str, str]:
    """Check presence of all three fields, then shape of the unit names."""
    if value is None or value == "" or not from_unit or not to_unit:
        raise MissingParameter()
    if not isinstance(from_unit, str) or not isinstance(to_unit, str):
        raise InvalidConversion(invalid_message)
    return parse_value(value), from_unit, to_unit
