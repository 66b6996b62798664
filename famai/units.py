"""Length unit conversion.  The canonical unit is the foot."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

_UNITS_PER_FOOT: dict[str, float] = {
    "ft": 1.0,
    "in": 12.0,
    "cm": 30.48,
    "mm": 304.8,
}

_ALIASES: dict[str, str] = {
    "ft": "ft",
    "foot": "ft",
    "feet": "ft",
    "'": "ft",
    "in": "in",
    "inch": "in",
    "inches": "in",
    '"': "in",
    "cm": "cm",
    "centimeter": "cm",
    "centimeters": "cm",
    "centimetre": "cm",
    "centimetres": "cm",
    "mm": "mm",
    "millimeter": "mm",
    "millimeters": "mm",
    "millimetre": "mm",
    "millimetres": "mm",
}


def normalize_unit(unit: str) -> str | None:
    """Return the short unit symbol for *unit*, or *None* if unknown."""
    return _ALIASES.get(unit.lower().strip().rstrip("."))


def is_length_unit(token: str) -> bool:
    return normalize_unit(token) is not None


def _unknown(value: float, unit: str, warnings: list[str] | None) -> float:
    message = f"Unknown unit '{unit}'; value {value} left unconverted."
    logger.warning(message)
    if warnings is not None:
        warnings.append(message)
    return value


def to_canonical(value: float, unit: str, warnings: list[str] | None = None) -> float:
    """Convert *value* in *unit* to feet.

    Unknown units pass through unconverted; the condition is logged and,
    when *warnings* is given, reported there.
    """
    symbol = normalize_unit(unit)
    if symbol is None:
        return _unknown(value, unit, warnings)
    if symbol == "ft":
        return value
    return value / _UNITS_PER_FOOT[symbol]


def from_canonical(value: float, unit: str, warnings: list[str] | None = None) -> float:
    """Convert *value* in feet to *unit*."""
    symbol = normalize_unit(unit)
    if symbol is None:
        return _unknown(value, unit, warnings)
    if symbol == "ft":
        return value
    return value * _UNITS_PER_FOOT[symbol]
