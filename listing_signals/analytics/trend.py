"""
listing_signals.analytics.trend: Half-over-half change detection.

Shared by the rank and price analyzers.
"""

from __future__ import annotations

from typing import Optional, Sequence

from listing_signals.core.settings import AnalysisSettings, resolve
from listing_signals.core.utils import mean_safe
from listing_signals.domain.enums import TrendDirection
from listing_signals.domain.models import TrendResult


def calculate_trend(
    values: Sequence[float],
    settings: Optional[AnalysisSettings] = None,
) -> TrendResult:
    """
    Compare the mean of the second half of ``values`` with the first half.

    The first half takes the extra element on odd lengths.  Direction is
    ``up``/``down`` only when the relative change strictly exceeds the
    threshold; exactly ±threshold is ``stable``.  Strength is ``|change|``
    capped at 1.  Confidence is a fixed calibration value.

    Fewer than 2 values, or a first half averaging zero, yields the default
    (stable, 0, 0) trend.
    """
    s = resolve(settings)
    if len(values) < 2:
        return TrendResult.default()

    mid = (len(values) + 1) // 2
    avg_first = mean_safe(values[:mid])
    avg_second = mean_safe(values[mid:])
    if avg_first == 0:
        return TrendResult.default()

    change = (avg_second - avg_first) / avg_first
    if change > s.trend_change_threshold:
        direction = TrendDirection.UP
    elif change < -s.trend_change_threshold:
        direction = TrendDirection.DOWN
    else:
        direction = TrendDirection.STABLE

    return TrendResult(
        direction=direction,
        strength=min(abs(change), 1.0),
        confidence=s.trend_confidence,
    )
