"""
Unit tests for listing_signals.core.utils.

Tests cover:
  • Safe division and clamping
  • Mean / coefficient of variation
  • Sorted-index quantiles
  • Count formatting and stability categories
"""

import pytest

from listing_signals.core.utils import (
    clamp, format_count, mean_safe, population_cv, safe_div, share_below,
    sorted_index_quantile, stability_category,
)


class TestSafeDiv:
    def test_normal(self):
        assert safe_div(10, 4) == pytest.approx(2.5)

    def test_zero_denominator(self):
        assert safe_div(10, 0) == 0.0
        assert safe_div(10, 0, default=-1.0) == -1.0


class TestClamp:
    def test_inside(self):
        assert clamp(0.5, 0.0, 1.0) == 0.5

    def test_bounds(self):
        assert clamp(-2, 0.0, 1.0) == 0.0
        assert clamp(7, 0.0, 1.0) == 1.0


class TestStatistics:
    def test_mean_safe_empty(self):
        assert mean_safe([]) == 0.0

    def test_mean_safe(self):
        assert mean_safe([1, 2, 3]) == pytest.approx(2.0)

    def test_population_cv(self):
        # mean 5, population stdev 3
        assert population_cv([2, 8]) == pytest.approx(0.6)

    def test_population_cv_degenerate(self):
        assert population_cv([5]) == 0.0
        assert population_cv([0, 0]) == 0.0

    def test_share_below_is_strict(self):
        assert share_below([1, 2, 3, 4], 3) == pytest.approx(0.5)
        assert share_below([], 3) == 0.0


class TestSortedIndexQuantile:
    def test_no_interpolation(self):
        assert sorted_index_quantile([4, 1, 3, 2], 0.5) == 3

    def test_index_clamped(self):
        assert sorted_index_quantile([1, 2, 3], 1.0) == 3

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            sorted_index_quantile([], 0.5)


class TestFormatting:
    def test_format_count(self):
        assert format_count(12_345.6) == "12,346"
        assert format_count(999) == "999"

    @pytest.mark.parametrize("stability, label", [
        (0.95, "Exceptionally Stable"),
        (0.90, "Exceptionally Stable"),
        (0.80, "Very Stable"),
        (0.65, "Moderately Stable"),
        (0.45, "Somewhat Volatile"),
        (0.10, "Highly Volatile"),
    ])
    def test_stability_category(self, stability, label):
        assert stability_category(stability) == label
