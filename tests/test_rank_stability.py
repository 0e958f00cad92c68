"""
Tests for listing_signals.analytics.rank_stability.

Covers:
  • a listing that always ranks well scores high despite variance
  • a listing bouncing between great and poor ranks scores low
  • never-good floor, fail-closed default, volatility = 1 - stability
  • floor tier table and seasonal bonus
"""

from __future__ import annotations

import dataclasses

import pytest

from listing_signals.analytics.rank_stability import (
    analyze_rank_stability, apply_floor_tiers, rank_stability_score,
    seasonal_bonus,
)
from listing_signals.core.settings import DEFAULT_SETTINGS
from listing_signals.domain.enums import TrendDirection


class TestRankStabilityScenarios:
    def test_consistently_good_listing(self, make_points):
        # 180 daily observations between 5k and 15k
        points = make_points([5_000 if i % 2 else 15_000 for i in range(180)])
        result = analyze_rank_stability(points)
        assert result.stability > 0.85
        assert result.volatility == pytest.approx(1 - result.stability)
        assert not result.is_default
        assert result.details is None

    def test_alternating_great_and_poor(self, make_points):
        points = make_points([5_000 if i % 2 == 0 else 300_000 for i in range(40)])
        result = analyze_rank_stability(points)
        assert result.stability < 0.3
        assert result.stability == pytest.approx(0.20)

    def test_never_under_good_threshold(self, make_points):
        result = analyze_rank_stability(make_points([200_000, 210_000, 190_000]))
        assert result.stability == pytest.approx(0.1)
        assert result.volatility == pytest.approx(0.9)

    def test_constant_fair_rank_is_floored(self, make_points):
        assert analyze_rank_stability(make_points([100_000] * 50)).stability == pytest.approx(0.1)

    def test_flat_top_rank_clamps_to_one(self, make_points):
        assert analyze_rank_stability(make_points([3_000] * 50)).stability == 1.0

    def test_single_point_fails_closed(self, make_points):
        result = analyze_rank_stability(make_points([1_000]))
        assert result.is_default
        assert result.stability == 0.0
        assert result.volatility == 1.0
        assert result.trend.is_default

    def test_empty_fails_closed(self):
        assert analyze_rank_stability([]).is_default

    def test_improving_rank_trend(self, make_points):
        # lower rank numbers are better; direction follows the raw numbers
        result = analyze_rank_stability(make_points([20_000, 20_000, 10_000, 10_000]))
        assert result.trend.direction == TrendDirection.DOWN

    def test_custom_good_threshold(self, make_points):
        points = make_points([30_000] * 10)
        strict = dataclasses.replace(DEFAULT_SETTINGS, rank_good_threshold=20_000)
        assert analyze_rank_stability(points, strict).stability == pytest.approx(0.1)

    def test_category(self, make_points):
        result = analyze_rank_stability(make_points([5_000] * 10))
        assert result.category == "Exceptionally Stable"


class TestFloorTiers:
    def test_top_tier_floor_and_boost(self):
        assert apply_floor_tiers(0.5, 0.96, 1.0) == pytest.approx(1.0)

    def test_second_tier(self):
        assert apply_floor_tiers(0.3, 0.91, 1.0) == pytest.approx(0.85)

    def test_floor_does_not_lower_high_base(self):
        assert apply_floor_tiers(0.9, 0.55, 0.6) == pytest.approx(0.9)

    def test_fair_tier(self):
        assert apply_floor_tiers(0.1, 0.0, 0.95) == pytest.approx(0.60)

    def test_threshold_is_strict(self):
        # exactly 50% good and fair matches no tier
        assert apply_floor_tiers(0.9, 0.5, 0.5) == pytest.approx(0.20)

    def test_untiered_cap(self):
        assert apply_floor_tiers(0.9, 0.1, 0.1) == pytest.approx(0.20)


class TestSeasonalBonus:
    def test_needs_enough_points(self):
        assert seasonal_bonus([1_000] * 10 + [100_000] * 30) == 0.0

    def test_peak_season_detected(self):
        values = [1_000] * 30 + [50_000] * 50
        assert seasonal_bonus(values) == pytest.approx(0.15)

    def test_flat_series_no_bonus(self):
        assert seasonal_bonus([5_000] * 80) == 0.0

    def test_zero_mean_has_no_variation_penalty(self):
        assert rank_stability_score([0, 0, 0]) == pytest.approx(1.0)

    def test_score_stays_in_unit_range(self):
        values = [1_000] * 20 + [40_000] * 60
        assert 0.0 <= rank_stability_score(values) <= 1.0
