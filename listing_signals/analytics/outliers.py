"""
listing_signals.analytics.outliers: IQR outlier filter and the dispersion
breakdown built on top of it.

The breakdown combines three views of a value sequence:
  • consistency:   1 - 2·cov over the outlier-filtered values
  • change:        1 - exp(-largest step-to-step relative move)
  • out-of-stock:  share of raw values far below the lower quartile

so a single spike cannot dominate a stability estimate.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from listing_signals.core.constants import (
    CHANGE_WEIGHT, CONSISTENCY_WEIGHT, OUT_OF_STOCK_Q1_FRACTION,
    OUT_OF_STOCK_WEIGHT,
)
from listing_signals.core.settings import AnalysisSettings, resolve
from listing_signals.core.utils import clamp, population_cv, sorted_index_quantile
from listing_signals.domain.models import ConsistencyBreakdown

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# IQR filter
# ---------------------------------------------------------------------------

def iqr_bounds(values: Sequence[float], multiplier: float = 1.5) -> tuple:
    """Return ``(lower, upper)`` Tukey fences from sorted-index quartiles."""
    q1 = sorted_index_quantile(values, 0.25)
    q3 = sorted_index_quantile(values, 0.75)
    iqr = q3 - q1
    return q1 - multiplier * iqr, q3 + multiplier * iqr


def remove_outliers(
    values: Sequence[float],
    settings: Optional[AnalysisSettings] = None,
) -> List[float]:
    """
    Drop values outside ``[Q1 - k·IQR, Q3 + k·IQR]``.

    Sequences shorter than the minimum sample size are returned unchanged
    (as a new list) because the quartiles would be meaningless.  Input order
    is preserved.
    """
    s = resolve(settings)
    if len(values) < s.outlier_min_samples:
        return list(values)

    lower, upper = iqr_bounds(values, s.outlier_iqr_multiplier)
    return [v for v in values if lower <= v <= upper]


# ---------------------------------------------------------------------------
# Component scores
# ---------------------------------------------------------------------------

def consistency_score(values: Sequence[float]) -> float:
    """``max(0, 1 - 2·cov)``; 1.0 for fewer than 2 values."""
    if len(values) < 2:
        return 1.0
    return max(0.0, 1.0 - population_cv(values) * 2)


def change_score(values: Sequence[float]) -> float:
    """``1 - exp(-max |Δ|/prev)`` over consecutive values.

    Steps from a zero value are skipped (no relative change defined).
    """
    if len(values) < 2:
        return 0.0
    changes = [
        abs((values[i] - values[i - 1]) / values[i - 1])
        for i in range(1, len(values))
        if values[i - 1] != 0
    ]
    if not changes:
        return 0.0
    return 1.0 - math.exp(-max(changes))


def out_of_stock_impact(
    values: Sequence[float],
    min_samples: int = 10,
) -> float:
    """Share of values below half the lower quartile, capped at 1."""
    if len(values) < min_samples:
        return 0.0
    q1 = sorted_index_quantile(values, 0.25)
    drops = sum(1 for v in values if v < q1 * OUT_OF_STOCK_Q1_FRACTION)
    return min(1.0, drops / len(values))


# ---------------------------------------------------------------------------
# Composite
# ---------------------------------------------------------------------------

def consistency_breakdown(
    values: Sequence[float],
    settings: Optional[AnalysisSettings] = None,
) -> ConsistencyBreakdown:
    """
    Composite stability of ``values``:
    ``0.4·consistency + 0.3·(1 - change) + 0.3·(1 - out_of_stock)``.

    Consistency and change are measured on the outlier-filtered values;
    out-of-stock impact looks at the raw values since its whole point is to
    see the drops the filter would remove.
    """
    s = resolve(settings)
    if len(values) < 2:
        return ConsistencyBreakdown(samples_used=len(values))

    clean = remove_outliers(values, s)
    consistency = consistency_score(clean)
    change = change_score(clean)
    oos = out_of_stock_impact(values, s.out_of_stock_min_samples)

    stability = clamp(
        consistency * CONSISTENCY_WEIGHT
        + (1 - change) * CHANGE_WEIGHT
        + (1 - oos) * OUT_OF_STOCK_WEIGHT,
        0.0, 1.0,
    )

    logger.debug(
        "consistency: n=%d clean=%d consistency=%.3f change=%.3f oos=%.3f stability=%.3f",
        len(values), len(clean), consistency, change, oos, stability,
    )

    return ConsistencyBreakdown(
        stability=stability,
        volatility=1.0 - stability,
        consistency_score=consistency,
        change_score=change,
        out_of_stock_impact=oos,
        samples_used=len(clean),
    )
