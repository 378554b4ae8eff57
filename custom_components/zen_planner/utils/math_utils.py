# File: utils/math_utils.py
"""Math and calculation utilities for Zen Planner.

Pure Python math functions with ZERO Home Assistant dependencies.

Functions:
    - round_half_up: Rounding where .5 always goes up (never banker's rounding)
    - clamp: Bound a value to an inclusive range
    - calculate_percentage: Whole-number percentage of a part against a total
    - average: Rounded mean of a sequence of numbers
    - to_int: Lenient integer conversion for client-supplied numbers
"""

from __future__ import annotations

from collections.abc import Iterable
import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded up.

    Python's built-in round() uses banker's rounding (round(2.5) == 2),
    which disagrees with what users expect from a progress bar.

    Examples:
        round_half_up(2.5) → 3
        round_half_up(33.333) → 33
        round_half_up(66.666) → 67
    """
    return int(math.floor(value + 0.5))


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Bound value to the inclusive range [minimum, maximum]."""
    return max(minimum, min(maximum, value))


def calculate_percentage(part: float, total: float) -> int:
    """Return part/total as a whole percentage (0 when total is 0).

    Args:
        part: Numerator (e.g. completed items)
        total: Denominator (e.g. all items)

    Returns:
        Percentage rounded half-up. A zero or negative total yields 0.

    Examples:
        calculate_percentage(1, 4) → 25
        calculate_percentage(2, 3) → 67
        calculate_percentage(0, 0) → 0
    """
    if total <= 0:
        return 0
    return round_half_up(100 * part / total)


def average(values: Iterable[float]) -> int:
    """Return the half-up rounded mean of values, or 0 for an empty sequence."""
    items = list(values)
    if not items:
        return 0
    return round_half_up(sum(items) / len(items))


def to_int(value: object, default: int = 0) -> int:
    """Return value as an int, or default when it is not numeric.

    Examples:
        to_int("42") → 42
        to_int(None) → 0
        to_int("abc", 5) → 5
    """
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError, OverflowError):
        return default
