from __future__ import annotations

from typing import Any

from conversion_api.core.errors import InvalidConversion
from conversion_api.services.conversion_validation import (
    Number,
    ensure_in_range,
    validate_request,
)
from conversion_api.services.money import round_to
from .tables import PRECISION, UNIT_TABLES


def convert_units(category: str, from_unit: Any, to_unit: Any, value: Any) -> Number:
    """Convert value between two units of a static category.

    Identical units return the parsed value untouched, even for names the
    table does not know. Other results are rounded to the category precision.
    """
    amount, source, target = validate_request(value, from_unit, to_unit)
    if source == target:
        return amount

    table = UNIT_TABLES.get(category)
    if table is None:
        raise InvalidConversion(f"Categoría desconocida: {category}")
    transform = table.get(source, {}).get(target)
    if transform is None:
        raise InvalidConversion()
    result = ensure_in_range(transform(float(amount)))
    return round_to(result, PRECISION[category])
