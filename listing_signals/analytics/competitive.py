"""
listing_signals.analytics.competitive: 1–10 sales-strength proxy from
average rank.

``score = clamp(10 - log10(avg_rank), 1, 10)``: an average rank of 1,000
scores 7, 100,000 scores 5, and anything past a billion floors at 1.
"""

from __future__ import annotations

import math
from typing import Sequence

from listing_signals.core.constants import COMPETITIVE_MAX_SCORE, COMPETITIVE_MIN_SCORE
from listing_signals.core.utils import clamp, format_count, mean_safe
from listing_signals.domain.models import CompetitivePosition, TimeSeriesPoint

INSUFFICIENT_RANK_DATA = "Insufficient rank data"


def score_competitive_position(points: Sequence[TimeSeriesPoint]) -> CompetitivePosition:
    if not points:
        return CompetitivePosition.insufficient(INSUFFICIENT_RANK_DATA)

    avg_rank = mean_safe([p.value for p in points])
    # A rank of 0 never comes from the provider; treat it as the best rank.
    raw = COMPETITIVE_MAX_SCORE - math.log10(avg_rank) if avg_rank > 0 else COMPETITIVE_MAX_SCORE
    score = clamp(raw, COMPETITIVE_MIN_SCORE, COMPETITIVE_MAX_SCORE)

    return CompetitivePosition(
        score=score,
        factors=[f"Average rank: {format_count(avg_rank)}"],
    )
