"""Descriptive statistics used to spot outlying photo dates."""

from __future__ import annotations

import statistics
from collections.abc import Sequence

# Tukey's "far out" multiplier
DEFAULT_FENCE_DISTANCE = 3.0


def median(values: Sequence[float]) -> float | None:
    """Median of ``values`` or None when empty."""
    if not values:
        return None
    return statistics.median(values)


def boundary(
    values: Sequence[float], distance: float = DEFAULT_FENCE_DISTANCE
) -> tuple[float, float] | None:
    """Compute an outlier fence from the interquartile range.

    Values are sorted and split at the median into lower and upper
    halves (the middle value of an odd-sized list belongs to the upper
    half). Each quartile is the median of its half taken from the side
    nearest the overall median, so a lone extreme value at either end
    never drags its quartile outward.

    Args:
        values: Observations, in any order.
        distance: IQR multiplier applied on both sides.

    Returns:
        ``(minimum, maximum)`` of the fence, or None when there are no values.
    """
    if not values:
        return None

    ordered = sorted(values)
    half = len(ordered) // 2
    lower = ordered[:half] or ordered
    upper = ordered[half:]

    q1 = statistics.median_high(lower)
    q3 = statistics.median_low(upper)
    spread = q3 - q1

    return q1 - spread * distance, q3 + spread * distance
