"""Guarded arithmetic shared by progress, aggregation and ranking code.

Every would-be division by zero resolves to a defined default instead
of raising.
"""

from __future__ import annotations

from collections.abc import Iterable


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Return numerator / denominator, or ``default`` when denominator is 0."""
    if denominator == 0:
        return default
    return numerator / denominator


def safe_mean(values: Iterable[float], default: float = 0.0) -> float:
    """Arithmetic mean of ``values``, or ``default`` for an empty input."""
    items = list(values)
    return safe_divide(sum(items), len(items), default)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
