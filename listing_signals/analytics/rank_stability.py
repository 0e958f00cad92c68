"""
listing_signals.analytics.rank_stability: Stability / volatility of a
sales-rank series.

For ranks, staying inside a good range matters far more than raw variance:
a listing bouncing between 2,000 and 8,000 is a strong, stable seller, while
one sitting flat at 400,000 is not.  The score therefore starts from a mild
coefficient-of-variation penalty and is then floored (or capped) by how
often the listing ranks under the good / fair thresholds.
"""

from __future__ import annotations

import logging
import statistics
from typing import Optional, Sequence

from listing_signals.analytics.trend import calculate_trend
from listing_signals.core.settings import AnalysisSettings, resolve
from listing_signals.core.utils import (
    clamp, safe_div, share_below, sorted_index_quantile,
)
from listing_signals.domain.models import RankAnalysis, TimeSeriesPoint

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tier table
# ---------------------------------------------------------------------------

def apply_floor_tiers(
    score: float,
    pct_good: float,
    pct_fair: float,
    settings: Optional[AnalysisSettings] = None,
) -> float:
    """
    Apply the first matching tier from ``settings.rank_floor_tiers``.

    Each tier is ``(metric, threshold, floor, boost)``: when the share of
    points under the metric's rank threshold strictly exceeds ``threshold``,
    the score is raised to ``floor`` and then ``boost`` is added (capped at
    1).  When no tier matches the score is capped instead.
    """
    s = resolve(settings)
    shares = {"good": pct_good, "fair": pct_fair}
    for metric, threshold, floor, boost in s.rank_floor_tiers:
        if shares[metric] > threshold:
            score = max(score, floor)
            if boost:
                score = min(1.0, score + boost)
            return score
    return min(score, s.rank_untiered_cap)


def seasonal_bonus(
    values: Sequence[float],
    settings: Optional[AnalysisSettings] = None,
) -> float:
    """Bonus when the best quarter of ranks is far better than the median.

    A recurring peak season looks like high variance; it should not read as
    instability.
    """
    s = resolve(settings)
    if len(values) < s.rank_seasonal_min_points:
        return 0.0
    p25 = sorted_index_quantile(values, 0.25)
    median = sorted_index_quantile(values, 0.5)
    return s.rank_seasonal_bonus if p25 < median * s.rank_seasonal_ratio else 0.0


# ---------------------------------------------------------------------------
# Stability score
# ---------------------------------------------------------------------------

def rank_stability_score(
    values: Sequence[float],
    settings: Optional[AnalysisSettings] = None,
) -> float:
    """Stability in [0, 1] for at least 2 rank values."""
    s = resolve(settings)

    pct_good = share_below(values, s.rank_good_threshold)
    pct_fair = share_below(values, s.rank_fair_threshold)

    # Never once under the good threshold: consistently bad is not stable.
    if pct_good == 0:
        logger.debug("rank stability: never under %d", s.rank_good_threshold)
        return s.rank_never_good_stability

    mean = statistics.fmean(values)
    std_dev = statistics.pstdev(values)
    cov = safe_div(std_dev, mean)

    base = max(0.0, 1.0 - cov / s.rank_cov_divisor)
    tiered = apply_floor_tiers(base, pct_good, pct_fair, s)
    bonus = seasonal_bonus(values, s)
    final = clamp(tiered + bonus, 0.0, 1.0)

    logger.debug(
        "rank stability: mean=%.0f std=%.0f cov=%.3f good=%.2f fair=%.2f "
        "base=%.3f tiered=%.3f seasonal=%.2f final=%.3f",
        mean, std_dev, cov, pct_good, pct_fair, base, tiered, bonus, final,
    )
    return final


def analyze_rank_stability(
    points: Sequence[TimeSeriesPoint],
    settings: Optional[AnalysisSettings] = None,
) -> RankAnalysis:
    """
    Stability, volatility and trend of a rank series.

    Fails closed: fewer than 2 points returns stability 0 / volatility 1
    and a default trend.  ``details`` is always ``None``; the time-weighted
    view lives in ``analytics.timeline``.
    """
    if len(points) < 2:
        return RankAnalysis.default()

    values = [p.value for p in points]
    stability = rank_stability_score(values, settings)
    return RankAnalysis(
        trend=calculate_trend(values, settings),
        stability=stability,
        volatility=1.0 - stability,
        details=None,
    )
