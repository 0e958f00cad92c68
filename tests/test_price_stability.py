"""
Tests for listing_signals.analytics.price_stability.

Covers:
  • zero-variance price scores exactly 1.0
  • placeholder for sparse data
  • new-listing boost and cap
  • jitter: bounded, seedable, skipped for flat prices
  • sustained-price bucketing and grace period stages
  • band table lookup
"""

from __future__ import annotations

import dataclasses
import random
from datetime import datetime, timedelta, timezone

import pytest

from listing_signals.analytics.price_stability import (
    PriceObservation, analyze_price_stability, apply_grace_period,
    bucket_sustained_prices, listing_age_days, new_listing_boost,
    price_range_ratio, ratio_to_stability, to_major_units,
)
from listing_signals.core.settings import DEFAULT_SETTINGS

NO_JITTER = dataclasses.replace(DEFAULT_SETTINGS, price_jitter_enabled=False)
T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _obs(value: float, days: float = 0.0) -> PriceObservation:
    return PriceObservation(T0 + timedelta(days=days), value)


def _alternating_prices(n: int = 100) -> list:
    """Daily prices alternating $10.00 / $11.00 (in cents)."""
    return [1_000 if i % 2 == 0 else 1_100 for i in range(n)]


# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------

class TestAnalyzePriceStability:
    def test_zero_variance_scores_one(self, make_points):
        result = analyze_price_stability(make_points([1_999] * 101))
        assert result.stability == 1.0
        assert not result.is_default
        assert result.details.price_range_ratio == 0.0
        assert result.details.jitter == 0.0

    def test_sparse_data_placeholder(self, make_points):
        result = analyze_price_stability(make_points([0, 1_999]))
        assert result.is_default
        assert result.stability == pytest.approx(0.65)
        assert result.details is None
        assert result.trend.direction.value == "stable"
        assert result.trend.strength == 0.0

    def test_empty_placeholder(self):
        assert analyze_price_stability([]).stability == pytest.approx(0.65)

    def test_young_flat_listing_capped(self, make_points):
        result = analyze_price_stability(make_points([1_000] * 60), NO_JITTER)
        assert result.stability == pytest.approx(0.95)
        assert result.details.new_listing_boost > 0

    def test_band_score_without_jitter(self, make_points):
        result = analyze_price_stability(make_points(_alternating_prices()), NO_JITTER)
        # ratio = 1 / 10.5 ≈ 0.095 → < 0.10 band
        assert result.details.price_range_ratio == pytest.approx(1 / 10.5)
        assert result.stability == pytest.approx(0.85)
        assert result.details.grace_applied

    def test_jitter_bounded(self, make_points):
        points = make_points(_alternating_prices())
        for seed in range(20):
            result = analyze_price_stability(points, rng=random.Random(seed))
            assert 0.85 - 0.015 <= result.stability <= 0.85 + 0.015
            assert result.stability == pytest.approx(0.85 + result.details.jitter)

    def test_jitter_reproducible(self, make_points):
        points = make_points(_alternating_prices())
        a = analyze_price_stability(points, rng=random.Random(7))
        b = analyze_price_stability(points, rng=random.Random(7))
        assert a.stability == b.stability

    def test_jitter_seed_from_settings(self, make_points):
        points = make_points(_alternating_prices())
        seeded = dataclasses.replace(DEFAULT_SETTINGS, jitter_seed=11)
        assert (
            analyze_price_stability(points, seeded).stability
            == analyze_price_stability(points, seeded).stability
        )

    def test_bucketing_dampens_short_spikes(self, make_points):
        # Every 6 hours for 180 days; base cycles $10/$11/$12 with a one-off
        # spike every 18th observation.
        values = []
        for i in range(720):
            if i % 18 == 17:
                values.append((13 + i // 18) * 100)
            else:
                values.append((10 + i % 3) * 100)
        points = make_points(values, step=timedelta(hours=6))

        result = analyze_price_stability(points, NO_JITTER)
        raw_ratio = price_range_ratio([v / 100 for v in values])

        assert result.details.sustained_filter_applied
        assert result.details.bucketed_points < result.details.analyzed_points
        assert result.details.price_range_ratio < raw_ratio

    def test_trend_reported(self, make_points):
        result = analyze_price_stability(make_points([1_000] * 50 + [2_000] * 50), NO_JITTER)
        assert result.trend.direction.value == "up"

    def test_stability_in_unit_range(self, make_points):
        result = analyze_price_stability(make_points([100, 10_000] * 30))
        assert 0.0 <= result.stability <= 1.0


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

class TestStages:
    def test_to_major_units_drops_non_positive(self, make_points):
        converted = to_major_units(make_points([0, 1_999, 2_500]))
        assert [p.value for p in converted] == [19.99, 25.0]

    def test_listing_age(self):
        assert listing_age_days([_obs(1, 0), _obs(1, 12.5)]) == pytest.approx(12.5)
        assert listing_age_days([_obs(1)]) == 0.0

    def test_grace_skipped_for_old_listings(self):
        points = [_obs(10, d) for d in range(0, 400, 10)]
        kept, applied = apply_grace_period(points, 390)
        assert not applied
        assert len(kept) == len(points)

    def test_grace_drops_launch_window(self):
        points = [_obs(10, d) for d in range(60)]
        kept, applied = apply_grace_period(points, 59)
        assert applied
        assert kept[0].timestamp == T0 + timedelta(days=30)

    def test_grace_reverted_when_too_few_remain(self):
        points = [_obs(10, d) for d in range(33)]
        kept, applied = apply_grace_period(points, 32)
        assert not applied
        assert len(kept) == 33

    def test_sustained_level_kept(self):
        points = [_obs(10, 0), _obs(10, 5), _obs(10, 10)]
        assert len(bucket_sustained_prices(points)) == 3

    def test_transient_level_collapses_to_median(self):
        points = [_obs(50, 0), _obs(50, 0.25), _obs(50, 0.5)]
        kept = bucket_sustained_prices(points)
        assert kept == [points[1]]

    def test_buckets_round_half_up(self):
        points = [_obs(10.49, 0), _obs(10.5, 0.1)]
        assert len(bucket_sustained_prices(points)) == 2

    def test_bucketed_output_chronological(self):
        points = [_obs(20, 0), _obs(10, 1), _obs(20, 6), _obs(15, 7)]
        kept = bucket_sustained_prices(points)
        assert [p.timestamp for p in kept] == sorted(p.timestamp for p in kept)


class TestBands:
    @pytest.mark.parametrize("ratio, expected", [
        (0.0, 1.0),
        (0.005, 0.97),
        (0.01, 0.93),
        (0.12, 0.78),
        (0.74, 0.43),
        (0.8, 0.35),
    ])
    def test_ratio_to_stability(self, ratio, expected):
        assert ratio_to_stability(ratio) == pytest.approx(expected)

    def test_price_range_ratio_empty(self):
        assert price_range_ratio([]) == 0.0

    def test_price_range_ratio_zero_mean(self):
        assert price_range_ratio([0.0, 0.0]) == 0.0

    def test_new_listing_boost_linear(self):
        assert new_listing_boost(0) == pytest.approx(0.25)
        assert new_listing_boost(45) == pytest.approx(0.125)
        assert new_listing_boost(90) == 0.0
