"""
Listing Signals: Calibration constants.

Every domain number lives here. If you find a literal in an analyzer that is
not a local variable, it belongs here instead.  Analyzers read these through
``listing_signals.core.settings.AnalysisSettings`` so callers can override
them per call.
"""

from datetime import datetime, timezone

# ---------------------------------------------------------------------------
# Raw channel encoding
# ---------------------------------------------------------------------------

# Offsets in a channel are minutes since this instant.
SERIES_EPOCH: datetime = datetime(2011, 1, 1, tzinfo=timezone.utc)
MINUTE_MS: int = 60_000
DAY_MS: int = 24 * 60 * MINUTE_MS

# Channel indexes inside a bundle's ``csv`` map
CHANNEL_PRICE_PRIMARY: int = 0
CHANNEL_PRICE_NEW: int = 1
CHANNEL_PRICE_USED: int = 2
CHANNEL_SALES_RANK: int = 3
CHANNEL_SALES_ESTIMATE: int = 11
CHANNEL_PRICE_ALT: int = 16

# Price fallbacks, probed in this order when the primary is too sparse
PRICE_FALLBACK_CHANNELS: tuple = (CHANNEL_PRICE_NEW, CHANNEL_PRICE_USED, CHANNEL_PRICE_ALT)
MIN_PRICE_CHANNEL_POINTS: int = 2

# Listing identifiers are fixed-width alphanumeric codes
IDENTIFIER_LENGTH: int = 10
UNKNOWN_TITLE: str = "Unknown Product"

# ---------------------------------------------------------------------------
# Trend
# ---------------------------------------------------------------------------

TREND_CHANGE_THRESHOLD: float = 0.05   # |change| must exceed this to leave "stable"
TREND_CONFIDENCE: float = 0.8          # fixed, independent of sample size

# ---------------------------------------------------------------------------
# Outlier filter
# ---------------------------------------------------------------------------

OUTLIER_MIN_SAMPLES: int = 5
OUTLIER_IQR_MULTIPLIER: float = 1.5
OUT_OF_STOCK_MIN_SAMPLES: int = 10
OUT_OF_STOCK_Q1_FRACTION: float = 0.5

# Composite weights for the consistency breakdown (sum to 1.0)
CONSISTENCY_WEIGHT: float = 0.4
CHANGE_WEIGHT: float = 0.3
OUT_OF_STOCK_WEIGHT: float = 0.3

# ---------------------------------------------------------------------------
# Rank stability
# ---------------------------------------------------------------------------

RANK_GOOD_THRESHOLD: int = 50_000
RANK_FAIR_THRESHOLD: int = 100_000

# Returned when the listing never ranks better than RANK_GOOD_THRESHOLD
RANK_NEVER_GOOD_STABILITY: float = 0.1

# cov is divided by this before being subtracted from 1
RANK_COV_DIVISOR: float = 3.0

# Ordered, first match wins: (metric, threshold, floor, boost).
# No tier matching caps the score at RANK_UNTIERED_CAP instead.
#   metric "good" = share of points under RANK_GOOD_THRESHOLD
#   metric "fair" = share of points under RANK_FAIR_THRESHOLD
RANK_FLOOR_TIERS: tuple = (
    ("good", 0.95, 0.85, 0.15),
    ("good", 0.90, 0.75, 0.10),
    ("good", 0.80, 0.65, 0.05),
    ("fair", 0.90, 0.60, 0.0),
    ("good", 0.50, 0.40, 0.0),
    ("fair", 0.50, 0.30, 0.0),
)
# Applied when no tier matches
RANK_UNTIERED_CAP: float = 0.20

RANK_SEASONAL_MIN_POINTS: int = 60
RANK_SEASONAL_RATIO: float = 0.5       # p25 < median * ratio → seasonal
RANK_SEASONAL_BONUS: float = 0.15

# ---------------------------------------------------------------------------
# Rank timeline
# ---------------------------------------------------------------------------

TIMELINE_MIN_POINTS: int = 10
TIMELINE_MAX_GAP_DAYS: int = 30
TIMELINE_WINDOWS_DAYS: tuple = (90, 180, 365)

# (band key, exclusive upper bound or None, score weight per percent)
TIMELINE_BANDS: tuple = (
    ("under10k", 10_000, 0.9),
    ("under25k", 25_000, 0.75),
    ("under50k", 50_000, 0.6),
    ("under100k", 100_000, -0.2),
    ("under250k", 250_000, -0.4),
    ("above250k", None, -0.6),
)
TIMELINE_SWING_THRESHOLD: float = 0.5
TIMELINE_SWING_PENALTY: float = 2.0
TIMELINE_MAX_PENALTY: float = 10.0

# ---------------------------------------------------------------------------
# Price stability
# ---------------------------------------------------------------------------

PRICE_MINOR_UNITS: int = 100           # stored integers are cents
PRICE_MIN_VALID_POINTS: int = 2
PRICE_DEFAULT_STABILITY: float = 0.65  # placeholder when data is too sparse

PRICE_GRACE_MAX_AGE_DAYS: int = 365    # grace only applies to younger listings
PRICE_GRACE_PERIOD_DAYS: int = 30
PRICE_MIN_ANALYSIS_POINTS: int = 5     # below this, a filter stage is reverted
PRICE_SUSTAINED_DAYS: float = 3.0

# Ordered, first match wins: ratio < bound → score. Ratio == 0 is handled first.
PRICE_ZERO_RANGE_STABILITY: float = 1.0
PRICE_RATIO_BANDS: tuple = (
    (0.01, 0.97),
    (0.03, 0.93),
    (0.05, 0.90),
    (0.10, 0.85),
    (0.15, 0.78),
    (0.20, 0.73),
    (0.25, 0.68),
    (0.30, 0.63),
    (0.40, 0.57),
    (0.50, 0.50),
    (0.75, 0.43),
)
PRICE_RATIO_FLOOR_STABILITY: float = 0.35

PRICE_NEW_LISTING_DAYS: int = 90
PRICE_NEW_LISTING_MAX_BOOST: float = 0.25
PRICE_NEW_LISTING_CAP: float = 0.95

PRICE_JITTER: float = 0.015
PRICE_JITTER_MIN: float = 0.35
PRICE_JITTER_MAX: float = 0.99

# ---------------------------------------------------------------------------
# Competitive position
# ---------------------------------------------------------------------------

COMPETITIVE_MAX_SCORE: float = 10.0
COMPETITIVE_MIN_SCORE: float = 1.0
COMPETITIVE_NO_DATA_SCORE: float = 0.0

# ---------------------------------------------------------------------------
# Stability categories: (minimum percent, label), first match wins
# ---------------------------------------------------------------------------

STABILITY_CATEGORIES: tuple = (
    (90, "Exceptionally Stable"),
    (75, "Very Stable"),
    (60, "Moderately Stable"),
    (40, "Somewhat Volatile"),
)
STABILITY_CATEGORY_FLOOR: str = "Highly Volatile"

# ---------------------------------------------------------------------------
# History provider
# ---------------------------------------------------------------------------

PROVIDER_BASE_URL: str = "https://api.keepa.com"
PROVIDER_DOMAIN: int = 1
PROVIDER_HISTORY_DAYS: int = 180
