"""
listing_signals.core.settings: Per-call calibration for the analyzers.

``AnalysisSettings`` bundles every threshold the analyzers read, defaulted
from ``core.constants``.  Override a value for one call with::

    settings = dataclasses.replace(DEFAULT_SETTINGS, rank_good_threshold=40_000)
    analyze_rank_stability(points, settings=settings)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from listing_signals.core import constants as C


@dataclass(frozen=True)
class AnalysisSettings:
    # Trend
    trend_change_threshold: float = C.TREND_CHANGE_THRESHOLD
    trend_confidence:       float = C.TREND_CONFIDENCE

    # Outlier filter / consistency breakdown
    outlier_min_samples:      int   = C.OUTLIER_MIN_SAMPLES
    outlier_iqr_multiplier:   float = C.OUTLIER_IQR_MULTIPLIER
    out_of_stock_min_samples: int   = C.OUT_OF_STOCK_MIN_SAMPLES

    # Rank stability
    rank_good_threshold:        int   = C.RANK_GOOD_THRESHOLD
    rank_fair_threshold:        int   = C.RANK_FAIR_THRESHOLD
    rank_never_good_stability:  float = C.RANK_NEVER_GOOD_STABILITY
    rank_cov_divisor:           float = C.RANK_COV_DIVISOR
    rank_floor_tiers:           Tuple = C.RANK_FLOOR_TIERS
    rank_untiered_cap:          float = C.RANK_UNTIERED_CAP
    rank_seasonal_min_points:   int   = C.RANK_SEASONAL_MIN_POINTS
    rank_seasonal_ratio:        float = C.RANK_SEASONAL_RATIO
    rank_seasonal_bonus:        float = C.RANK_SEASONAL_BONUS

    # Rank timeline
    timeline_min_points:   int   = C.TIMELINE_MIN_POINTS
    timeline_max_gap_days: int   = C.TIMELINE_MAX_GAP_DAYS
    timeline_windows_days: Tuple = C.TIMELINE_WINDOWS_DAYS

    # Price stability
    price_minor_units:           int   = C.PRICE_MINOR_UNITS
    price_min_valid_points:      int   = C.PRICE_MIN_VALID_POINTS
    price_default_stability:     float = C.PRICE_DEFAULT_STABILITY
    price_grace_max_age_days:    int   = C.PRICE_GRACE_MAX_AGE_DAYS
    price_grace_period_days:     int   = C.PRICE_GRACE_PERIOD_DAYS
    price_min_analysis_points:   int   = C.PRICE_MIN_ANALYSIS_POINTS
    price_sustained_days:        float = C.PRICE_SUSTAINED_DAYS
    price_ratio_bands:           Tuple = C.PRICE_RATIO_BANDS
    price_ratio_floor_stability: float = C.PRICE_RATIO_FLOOR_STABILITY
    price_new_listing_days:      int   = C.PRICE_NEW_LISTING_DAYS
    price_new_listing_max_boost: float = C.PRICE_NEW_LISTING_MAX_BOOST
    price_new_listing_cap:       float = C.PRICE_NEW_LISTING_CAP
    price_jitter_enabled:        bool  = True
    price_jitter:                float = C.PRICE_JITTER
    price_jitter_min:            float = C.PRICE_JITTER_MIN
    price_jitter_max:            float = C.PRICE_JITTER_MAX

    # Channel selection
    price_primary_channel:    int   = C.CHANNEL_PRICE_PRIMARY
    price_fallback_channels:  Tuple = C.PRICE_FALLBACK_CHANNELS
    min_price_channel_points: int   = C.MIN_PRICE_CHANNEL_POINTS
    rank_channel:             int   = C.CHANNEL_SALES_RANK
    sales_channel:            int   = C.CHANNEL_SALES_ESTIMATE

    # Seed used by callers that want reproducible jitter across a batch
    jitter_seed: Optional[int] = None

    @property
    def price_channel_candidates(self) -> Tuple[int, ...]:
        """Primary price channel followed by the fallbacks, in probe order."""
        return (self.price_primary_channel,) + tuple(self.price_fallback_channels)

    @classmethod
    def from_env(cls) -> "AnalysisSettings":
        """Defaults plus the jitter knobs from ``listing_signals.config``."""
        from listing_signals import config

        return cls(
            price_jitter_enabled=config.PRICE_JITTER_ENABLED,
            jitter_seed=config.PRICE_JITTER_SEED,
        )


DEFAULT_SETTINGS = AnalysisSettings()


def resolve(settings: Optional[AnalysisSettings]) -> AnalysisSettings:
    """Return ``settings`` or the module defaults when ``None``."""
    return settings if settings is not None else DEFAULT_SETTINGS


def resolve_from_env(settings: Optional[AnalysisSettings]) -> AnalysisSettings:
    """Return ``settings`` or ``AnalysisSettings.from_env()`` when ``None``.

    Used by the batch entry points, which honour the process configuration;
    the analyzers themselves fall back to the plain defaults.
    """
    return settings if settings is not None else AnalysisSettings.from_env()
