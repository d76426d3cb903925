from __future__ import annotations

import math
from typing import Any


def safe_number(value: Any) -> float:
    """Coerce ``value`` to a finite float, substituting 0 for anything else."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def pct(value: Any) -> float:
    """Convert a 0-100 percent input into a fractional rate."""
    return safe_number(value) / 100.0


def safe_ratio(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def round_half_up(value: float) -> int:
    return math.floor(safe_number(value) + 0.5)


def compound(base: float, exponent: float) -> float:
    """``base ** exponent`` that saturates to infinity instead of raising."""
    try:
        return base**exponent
    except (OverflowError, ZeroDivisionError):
        return math.inf
