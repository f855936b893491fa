"""Pure count/ratio helpers used by the fraud scorer & priority classifier."""
from __future__ import annotations

from typing import Any


def safe_div(numerator: float | int, denominator: float | int) -> float:
    if denominator in (0, 0.0):
        return 0.0
    return float(numerator) / float(denominator)


def non_negative(value: Any) -> int:
    """Normalize a caller-supplied counter: None, negatives and junk become 0."""
    try:
        count = int(value or 0)
    except (TypeError, ValueError, OverflowError):
        return 0
    return count if count > 0 else 0


__all__ = ["safe_div", "non_negative"]
