"""
listing_signals.analytics.price_stability: Stability score for a price
series.

Pipeline (each stage is a pure function so it can be tested alone):
  1. validate          ≥2 strictly positive points, else the 0.65 placeholder
  2. grace period      drop the first 30 days of listings younger than a year
  3. bucketing         collapse short-lived price levels to one point
  4. range ratio       (max - min) / mean over the surviving prices
  5. band lookup       ordered (bound, score) table
  6. new-listing boost young listings have not had time to settle
  7. jitter            optional ±1.5%, only when the range is non-zero

Stored prices are integers in minor units (cents); analysis is done in
whole currency units.
"""

from __future__ import annotations

import logging
import math
import random
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from listing_signals.analytics.outliers import consistency_breakdown
from listing_signals.analytics.trend import calculate_trend
from listing_signals.core.constants import DAY_MS, PRICE_ZERO_RANGE_STABILITY
from listing_signals.core.settings import AnalysisSettings, resolve
from listing_signals.core.utils import clamp, mean_safe, safe_div
from listing_signals.domain.models import (
    PriceAnalysis, PriceStabilityDetails, TimeSeriesPoint,
)

logger = logging.getLogger(__name__)

_DAY_SECONDS = DAY_MS / 1000


class PriceObservation(NamedTuple):
    """A price in whole currency units at one instant."""
    timestamp: datetime
    value: float


# ---------------------------------------------------------------------------
# Stage helpers
# ---------------------------------------------------------------------------

def to_major_units(
    points: Sequence[TimeSeriesPoint],
    minor_units: int = 100,
) -> List[PriceObservation]:
    """Keep strictly positive points, converted to whole currency units, sorted by time."""
    converted = [
        PriceObservation(p.timestamp, p.value / minor_units)
        for p in points
        if p.value > 0
    ]
    converted.sort(key=lambda p: p.timestamp)
    return converted


def listing_age_days(points: Sequence[PriceObservation]) -> float:
    """Days between the oldest and newest observation (0 for <2 points)."""
    if len(points) < 2:
        return 0.0
    return (points[-1].timestamp - points[0].timestamp).total_seconds() / _DAY_SECONDS


def apply_grace_period(
    points: Sequence[PriceObservation],
    age_days: float,
    settings: Optional[AnalysisSettings] = None,
) -> Tuple[List[PriceObservation], bool]:
    """
    Drop the launch window of a young listing.

    Returns ``(points, applied)``.  When fewer than the minimum analysis
    points survive, the full series is returned and ``applied`` is False.
    """
    s = resolve(settings)
    if not points or age_days >= s.price_grace_max_age_days:
        return list(points), False

    grace_end = points[0].timestamp + timedelta(days=s.price_grace_period_days)
    kept = [p for p in points if p.timestamp >= grace_end]
    if len(kept) < s.price_min_analysis_points:
        return list(points), False
    return kept, True


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def bucket_sustained_prices(
    points: Sequence[PriceObservation],
    settings: Optional[AnalysisSettings] = None,
) -> List[PriceObservation]:
    """
    Group points by price rounded to the nearest whole unit.

    A bucket whose time-adjacent points are ever ``price_sustained_days``
    or more apart is a sustained price level and keeps every point.  Any
    other multi-point bucket is a transient level (spike, flash sale) and
    keeps only its median-timestamp point.  Single-point buckets are kept.

    The result is in chronological order.
    """
    s = resolve(settings)
    min_gap = timedelta(days=s.price_sustained_days)

    buckets: Dict[int, List[PriceObservation]] = defaultdict(list)
    for p in points:
        buckets[_round_half_up(p.value)].append(p)

    kept: List[PriceObservation] = []
    for members in buckets.values():
        if len(members) < 2:
            kept.extend(members)
            continue
        ordered = sorted(members, key=lambda p: p.timestamp)
        sustained = any(
            ordered[i + 1].timestamp - ordered[i].timestamp >= min_gap
            for i in range(len(ordered) - 1)
        )
        if sustained:
            kept.extend(ordered)
        else:
            kept.append(ordered[len(ordered) // 2])

    kept.sort(key=lambda p: p.timestamp)
    return kept


def price_range_ratio(values: Sequence[float]) -> float:
    """``(max - min) / mean``; 0.0 for empty input or a zero mean."""
    if not values:
        return 0.0
    return safe_div(max(values) - min(values), mean_safe(values))


def ratio_to_stability(
    ratio: float,
    settings: Optional[AnalysisSettings] = None,
) -> float:
    """Map a range ratio to a base score via the ordered band table."""
    s = resolve(settings)
    if ratio == 0:
        return PRICE_ZERO_RANGE_STABILITY
    for bound, score in s.price_ratio_bands:
        if ratio < bound:
            return score
    return s.price_ratio_floor_stability


def new_listing_boost(
    age_days: float,
    settings: Optional[AnalysisSettings] = None,
) -> float:
    """Linear boost from the max at day 0 down to 0 at the new-listing horizon."""
    s = resolve(settings)
    if age_days >= s.price_new_listing_days:
        return 0.0
    return max(
        0.0,
        s.price_new_listing_max_boost
        - (age_days / s.price_new_listing_days) * s.price_new_listing_max_boost,
    )


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def analyze_price_stability(
    points: Sequence[TimeSeriesPoint],
    settings: Optional[AnalysisSettings] = None,
    rng: Optional[random.Random] = None,
) -> PriceAnalysis:
    """
    Stability score and trend for a price series.

    Args:
        points:   Decoded price series (values in minor units).
        settings: Calibration overrides; ``None`` uses the defaults.
        rng:      Source for the jitter.  ``None`` builds a
                  ``random.Random(settings.jitter_seed)``.

    Returns a ``PriceAnalysis``; ``is_default`` is set when the series had
    fewer than 2 positive points and the placeholder score was returned.
    """
    s = resolve(settings)

    valid = to_major_units(points, s.price_minor_units)
    if len(valid) < s.price_min_valid_points:
        logger.debug("price stability: %d valid points, using default", len(valid))
        return PriceAnalysis.default(s.price_default_stability)

    age = listing_age_days(valid)
    analyzed, grace_applied = apply_grace_period(valid, age, s)

    bucketed = bucket_sustained_prices(analyzed, s)
    sustained_applied = len(bucketed) >= s.price_min_analysis_points
    final_points = bucketed if sustained_applied else analyzed

    values = [p.value for p in final_points]
    ratio = price_range_ratio(values)
    base = ratio_to_stability(ratio, s)

    score = base
    boost = new_listing_boost(age, s)
    if age < s.price_new_listing_days:
        score = min(s.price_new_listing_cap, score + boost)

    jitter = 0.0
    if ratio > 0 and s.price_jitter_enabled:
        source = rng if rng is not None else random.Random(s.jitter_seed)
        jitter = source.uniform(-s.price_jitter, s.price_jitter)
        score = clamp(score + jitter, s.price_jitter_min, s.price_jitter_max)

    details = PriceStabilityDetails(
        valid_points=len(valid),
        analyzed_points=len(analyzed),
        bucketed_points=len(bucketed),
        final_points=len(final_points),
        listing_age_days=round(age, 2),
        grace_applied=grace_applied,
        sustained_filter_applied=sustained_applied,
        min_price=min(values),
        max_price=max(values),
        mean_price=mean_safe(values),
        price_range_ratio=ratio,
        base_score=base,
        new_listing_boost=boost,
        jitter=jitter,
        consistency=consistency_breakdown(values, s),
    )

    logger.debug(
        "price stability: valid=%d grace=%d bucketed=%d age=%.1fd ratio=%.3f "
        "base=%.2f boost=%.2f jitter=%.3f final=%.3f",
        len(valid), len(analyzed), len(bucketed), age, ratio,
        base, boost, jitter, score,
    )

    return PriceAnalysis(
        trend=calculate_trend(values, s),
        stability=clamp(score, 0.0, 1.0),
        details=details,
    )
