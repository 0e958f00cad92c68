"""
listing_signals.analytics.timeline: Time-weighted rank band scoring.

Where ``rank_stability`` counts points, this module weights each stretch of
history by how long it lasted: every consecutive pair of observations
contributes its time delta to the band its average rank falls in.  Gaps
longer than the max gap (listing out of stock, tracking paused) are skipped.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence

from listing_signals.core.constants import (
    TIMELINE_BANDS, TIMELINE_MAX_PENALTY, TIMELINE_SWING_PENALTY,
    TIMELINE_SWING_THRESHOLD,
)
from listing_signals.core.settings import AnalysisSettings, resolve
from listing_signals.core.utils import clamp
from listing_signals.domain.enums import PerformanceSummary
from listing_signals.domain.models import RankTimeline, TimelineScore, TimeSeriesPoint

logger = logging.getLogger(__name__)


def _empty_ranges() -> Dict[str, float]:
    return {key: 0.0 for key, _, _ in TIMELINE_BANDS}


def _band_for(rank: float) -> str:
    for key, upper, _ in TIMELINE_BANDS:
        if upper is None or rank < upper:
            return key
    return TIMELINE_BANDS[-1][0]


def volatility_penalty(points: Sequence[TimeSeriesPoint]) -> float:
    """2 points per step-to-step move above 50%, capped at 10."""
    swings = 0
    for prev, cur in zip(points, points[1:]):
        if prev.value and abs((cur.value - prev.value) / prev.value) > TIMELINE_SWING_THRESHOLD:
            swings += 1
    return min(TIMELINE_MAX_PENALTY, swings * TIMELINE_SWING_PENALTY)


def score_rank_timeline(
    points: Sequence[TimeSeriesPoint],
    settings: Optional[AnalysisSettings] = None,
) -> TimelineScore:
    """
    Score one window of rank history on a 0–100 scale.

    Returns an all-zero score when the window holds too few points.
    """
    s = resolve(settings)
    if len(points) < s.timeline_min_points:
        return TimelineScore(time_in_ranges=_empty_ranges())

    ordered = sorted(points, key=lambda p: p.timestamp)
    max_gap = timedelta(days=s.timeline_max_gap_days)

    times = {key: 0.0 for key in _empty_ranges()}
    total = 0.0
    for prev, cur in zip(ordered, ordered[1:]):
        delta = cur.timestamp - prev.timestamp
        if delta > max_gap:
            continue
        seconds = max(0.0, delta.total_seconds())
        times[_band_for((prev.value + cur.value) / 2)] += seconds
        total += seconds

    if total > 0:
        pct = {key: t / total * 100 for key, t in times.items()}
    else:
        pct = _empty_ranges()

    raw = sum(min(pct[key], 100.0) * weight for key, _, weight in TIMELINE_BANDS)
    score = clamp(raw, 0.0, 100.0)
    penalty = volatility_penalty(ordered)

    return TimelineScore(
        score=score,
        time_in_ranges=pct,
        volatility_penalty=penalty,
        final_score=clamp(raw - penalty, 0.0, 100.0),
    )


def summarize_performance(recent: float, mid: float, long: float) -> PerformanceSummary:
    """Label a listing from its 3-, 6- and 12-month final scores."""
    for label in PerformanceSummary:
        minimums = label.minimums
        if minimums and recent >= minimums[0] and mid >= minimums[1] and long >= minimums[2]:
            return label
    if recent < 40 or mid < 35 or long < 30:
        return PerformanceSummary.HIGHLY_VOLATILE
    if recent < long and mid < long:
        return PerformanceSummary.DECLINING
    return PerformanceSummary.EXTREMELY_VOLATILE


def analyze_rank_timeline(
    points: Sequence[TimeSeriesPoint],
    as_of: Optional[datetime] = None,
    settings: Optional[AnalysisSettings] = None,
) -> RankTimeline:
    """
    Score the trailing 3/6/12-month windows ending at ``as_of``.

    ``as_of`` defaults to the newest observation so the result depends only
    on the series itself.
    """
    s = resolve(settings)
    if not points:
        return RankTimeline(
            three_month=TimelineScore(time_in_ranges=_empty_ranges()),
            six_month=TimelineScore(time_in_ranges=_empty_ranges()),
            twelve_month=TimelineScore(time_in_ranges=_empty_ranges()),
        )

    end = as_of or max(p.timestamp for p in points)
    windows = []
    for days in s.timeline_windows_days:
        start = end - timedelta(days=days)
        windows.append(score_rank_timeline(
            [p for p in points if start <= p.timestamp <= end], s,
        ))
    three, six, twelve = windows

    summary = summarize_performance(three.final_score, six.final_score, twelve.final_score)
    logger.debug(
        "rank timeline: 3m=%.1f 6m=%.1f 12m=%.1f → %s",
        three.final_score, six.final_score, twelve.final_score, summary.value,
    )
    return RankTimeline(
        three_month=three,
        six_month=six,
        twelve_month=twelve,
        performance_summary=summary,
    )
