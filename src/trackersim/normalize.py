"""Normalization helpers.

Centralizes lenient parsing of user and environment input.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    """Parse *value* as a finite float, ``None`` when that is not possible."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def positive_int_or(value: Any, default: int, maximum: int | None = None) -> int:
    parsed = safe_int(value)
    if parsed is None or parsed <= 0:
        return default
    if maximum is not None and parsed > maximum:
        return default
    return parsed


def float_or(value: Any, default: float) -> float:
    parsed = safe_float(value)
    return default if parsed is None else parsed


def parse_position(text: str) -> tuple[float, float] | None:
    """Parse a ``"lat,lng"`` string.

    Exactly two comma-separated parts are required and both must parse as
    finite numbers. Returns ``None`` otherwise.
    """
    parts = text.split(",")
    if len(parts) != 2:
        return None
    latitude = safe_float(parts[0])
    longitude = safe_float(parts[1])
    if latitude is None or longitude is None:
        return None
    return latitude, longitude
