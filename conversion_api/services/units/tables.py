"""Static conversion tables for time, weight and temperature.

Each table maps a source unit to target units to a pure single-argument
transform. Time is fully pairwise with the published Gregorian-average
constants rather than chained through seconds, so results match the values
clients already rely on.
"""

from __future__ import annotations

from typing import Callable, Dict

Transform = Callable[[float], float]
ConversionTable = Dict[str, Dict[str, Transform]]

TIME_CONVERSIONS: ConversionTable = {
    "segundos": {
        "minutos": lambda v: v / 60,
        "horas": lambda v: v / 3600,
        "dias": lambda v: v / 86400,
        "meses": lambda v: v / 2629746,
        "años": lambda v: v / 31556952,
    },
    "minutos": {
        "segundos": lambda v: v * 60,
        "horas": lambda v: v / 60,
        "dias": lambda v: v / 1440,
        "meses": lambda v: v / 43829.1,
        "años": lambda v: v / 525949,
    },
    "horas": {
        "segundos": lambda v: v * 3600,
        "minutos": lambda v: v * 60,
        "dias": lambda v: v / 24,
        "meses": lambda v: v / 730.484,
        "años": lambda v: v / 8765.81,
    },
    "dias": {
        "segundos": lambda v: v * 86400,
        "minutos": lambda v: v * 1440,
        "horas": lambda v: v * 24,
        "meses": lambda v: v / 30.4368,
        "años": lambda v: v / 365.242,
    },
    "meses": {
        "segundos": lambda v: v * 2629746,
        "minutos": lambda v: v * 43829.1,
        "horas": lambda v: v * 730.484,
        "dias": lambda v: v * 30.4368,
        "años": lambda v: v / 12,
    },
    "años": {
        "segundos": lambda v: v * 31556952,
        "minutos": lambda v: v * 525949,
        "horas": lambda v: v * 8765.81,
        "dias": lambda v: v * 365.242,
        "meses": lambda v: v * 12,
    },
}

# 2.20462 lb/kg is approximate; kept for output compatibility.
WEIGHT_CONVERSIONS: ConversionTable = {
    "gramos": {
        "kilogramos": lambda v: v / 1000,
        "libras": lambda v: v * 0.00220462,
    },
    "kilogramos": {
        "gramos": lambda v: v * 1000,
        "libras": lambda v: v * 2.20462,
    },
    "libras": {
        "gramos": lambda v: v / 0.00220462,
        "kilogramos": lambda v: v / 2.20462,
    },
}

TEMPERATURE_CONVERSIONS: ConversionTable = {
    "celsius": {
        "fahrenheit": lambda v: (v * 9 / 5) + 32,
        "kelvin": lambda v: v + 273.15,
    },
    "fahrenheit": {
        "celsius": lambda v: (v - 32) * 5 / 9,
        "kelvin": lambda v: ((v - 32) * 5 / 9) + 273.15,
    },
    "kelvin": {
        "celsius": lambda v: v - 273.15,
        "fahrenheit": lambda v: ((v - 273.15) * 9 / 5) + 32,
    },
}

UNIT_TABLES: Dict[str, ConversionTable] = {
    "time": TIME_CONVERSIONS,
    "weight": WEIGHT_CONVERSIONS,
    "temperature": TEMPERATURE_CONVERSIONS,
}

# Decimal places applied to non-identity results.
PRECISION: Dict[str, int] = {
    "time": 10,
    "weight": 10,
    "temperature": 2,
}
