"""
Listing Signals: Shared utilities.

Pure functions used across the whole package. No imports from other
package modules; only the standard library and ``core.constants``.
"""

from __future__ import annotations

import math
import statistics
from typing import Sequence

from listing_signals.core.constants import (
    STABILITY_CATEGORIES, STABILITY_CATEGORY_FLOOR,
)


# ---------------------------------------------------------------------------
# Math helpers
# ---------------------------------------------------------------------------

def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide without raising on zero denominator."""
    if denominator == 0:
        return default
    return numerator / denominator


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` to the range [lo, hi]."""
    return max(lo, min(hi, value))


def mean_safe(values: Sequence[float], default: float = 0.0) -> float:
    """Return mean of ``values``, or ``default`` when the sequence is empty."""
    if not values:
        return default
    return statistics.fmean(values)


# ---------------------------------------------------------------------------
# Statistical helpers
# ---------------------------------------------------------------------------

def population_cv(values: Sequence[float]) -> float:
    """Coefficient of variation using the population standard deviation.

    Returns 0.0 when fewer than 2 values are provided or the mean is zero.
    """
    if len(values) < 2:
        return 0.0
    return safe_div(statistics.pstdev(values), statistics.fmean(values))


def sorted_index_quantile(values: Sequence[float], fraction: float) -> float:
    """Quantile by position in the sorted sample: ``sorted[floor(n * fraction)]``.

    No interpolation; the index is clamped to the last element.
    """
    if not values:
        raise ValueError("quantile of empty sequence")
    ordered = sorted(values)
    idx = min(len(ordered) - 1, int(math.floor(len(ordered) * fraction)))
    return ordered[idx]


def share_below(values: Sequence[float], threshold: float) -> float:
    """Fraction of ``values`` strictly below ``threshold`` (0.0 when empty)."""
    if not values:
        return 0.0
    return sum(1 for v in values if v < threshold) / len(values)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_count(value: float) -> str:
    """Round to an integer and group thousands, e.g. ``12345.6 → '12,346'``."""
    return f"{int(round(value)):,}"


def stability_category(stability: float) -> str:
    """Human-readable band for a 0–1 stability score."""
    pct = stability * 100
    for minimum, label in STABILITY_CATEGORIES:
        if pct >= minimum:
            return label
    return STABILITY_CATEGORY_FLOOR
