"""
Percentage helpers shared by quiz scoring and progress aggregation.
"""

import math
from typing import Optional


def percent(part: float, whole: float) -> int:
    """
    Integer percentage of part/whole, rounding halves up.

    Returns 0 when whole is 0.
    """
    if not whole:
        return 0
    return math.floor(part * 100 / whole + 0.5)


def mean(values: list[float]) -> Optional[float]:
    """Arithmetic mean, or None for an empty list (no data is not zero)."""
    if not values:
        return None
    return sum(values) / len(values)
