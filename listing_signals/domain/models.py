"""
listing_signals.domain.models: Canonical result dataclasses.

These are the single source of truth for data flowing out of the engine.
Every entity is created fresh per analysis call; nothing here is cached or
mutated after the analyzer that built it returns.

``to_dict()`` produces the camelCase wire shape consumed by the market
scoring and presentation layers; timestamps serialize as epoch
milliseconds.

Import pattern::

    from listing_signals.domain.models import ListingAnalysisResult, TimeSeriesPoint
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from listing_signals.core.constants import (
    COMPETITIVE_NO_DATA_SCORE, PRICE_DEFAULT_STABILITY, UNKNOWN_TITLE,
)
from listing_signals.core.utils import stability_category
from listing_signals.domain.enums import (
    AnalysisStatus, PerformanceSummary, TrendDirection,
)


# ---------------------------------------------------------------------------
# Normalized series
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TimeSeriesPoint:
    """One decoded observation.  Built only by the series normalizer."""
    timestamp: datetime     # timezone-aware UTC
    value:     float        # never negative

    @property
    def timestamp_ms(self) -> int:
        return int(round(self.timestamp.timestamp() * 1000))

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp_ms, "value": self.value}


# ---------------------------------------------------------------------------
# Trend
# ---------------------------------------------------------------------------

@dataclass
class TrendResult:
    direction:  TrendDirection = TrendDirection.STABLE
    strength:   float = 0.0     # [0, 1]
    confidence: float = 0.0     # [0, 1]
    is_default: bool = False    # True when not computed from data

    @classmethod
    def default(cls) -> "TrendResult":
        return cls(is_default=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "direction":  self.direction.value,
            "strength":   self.strength,
            "confidence": self.confidence,
            "isDefault":  self.is_default,
        }


# ---------------------------------------------------------------------------
# Rank analysis
# ---------------------------------------------------------------------------

@dataclass
class RankAnalysis:
    """Stability / volatility of a sales-rank series plus its trend."""
    trend:      TrendResult = field(default_factory=TrendResult.default)
    stability:  float = 0.0
    volatility: float = 1.0     # always 1 - stability
    details:    Optional[Dict[str, Any]] = None
    is_default: bool = False

    @classmethod
    def default(cls) -> "RankAnalysis":
        """Fail-closed result for series too short to measure."""
        return cls(is_default=True)

    @property
    def category(self) -> str:
        return stability_category(self.stability)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trend":      self.trend.to_dict(),
            "stability":  self.stability,
            "volatility": self.volatility,
            "details":    self.details,
            "category":   self.category,
            "isDefault":  self.is_default,
        }


# ---------------------------------------------------------------------------
# Price analysis
# ---------------------------------------------------------------------------

@dataclass
class ConsistencyBreakdown:
    """Composite dispersion measures over an outlier-filtered value set."""
    stability:           float = 1.0
    volatility:          float = 0.0
    consistency_score:   float = 1.0
    change_score:        float = 0.0
    out_of_stock_impact: float = 0.0
    samples_used:        int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stability":         self.stability,
            "volatility":        self.volatility,
            "consistencyScore":  self.consistency_score,
            "changeScore":       self.change_score,
            "outOfStockImpact":  self.out_of_stock_impact,
            "samplesUsed":       self.samples_used,
        }


@dataclass
class PriceStabilityDetails:
    """Intermediate values of the price-stability pipeline."""
    valid_points:      int = 0
    analyzed_points:   int = 0       # after the launch grace period
    bucketed_points:   int = 0       # after sustained-price bucketing
    final_points:      int = 0
    listing_age_days:  float = 0.0
    grace_applied:     bool = False
    sustained_filter_applied: bool = False
    min_price:         float = 0.0
    max_price:         float = 0.0
    mean_price:        float = 0.0
    price_range_ratio: float = 0.0
    base_score:        float = 0.0
    new_listing_boost: float = 0.0
    jitter:            float = 0.0
    consistency:       ConsistencyBreakdown = field(default_factory=ConsistencyBreakdown)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "validPoints":            self.valid_points,
            "analyzedPoints":         self.analyzed_points,
            "bucketedPoints":         self.bucketed_points,
            "finalPoints":            self.final_points,
            "listingAgeDays":         self.listing_age_days,
            "gracePeriodApplied":     self.grace_applied,
            "sustainedFilterApplied": self.sustained_filter_applied,
            "minPrice":               self.min_price,
            "maxPrice":               self.max_price,
            "meanPrice":              self.mean_price,
            "priceRangeRatio":        self.price_range_ratio,
            "baseScore":              self.base_score,
            "newListingBoost":        self.new_listing_boost,
            "jitter":                 self.jitter,
            "consistency":            self.consistency.to_dict(),
        }


@dataclass
class PriceAnalysis:
    trend:      TrendResult = field(default_factory=TrendResult.default)
    stability:  float = PRICE_DEFAULT_STABILITY
    details:    Optional[PriceStabilityDetails] = None
    is_default: bool = False

    @classmethod
    def default(cls, stability: float = PRICE_DEFAULT_STABILITY) -> "PriceAnalysis":
        """Low-confidence placeholder: callers must read it as "unknown"."""
        return cls(stability=stability, is_default=True)

    @property
    def category(self) -> str:
        return stability_category(self.stability)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trend":     self.trend.to_dict(),
            "stability": self.stability,
            "details":   self.details.to_dict() if self.details else None,
            "category":  self.category,
            "isDefault": self.is_default,
        }


# ---------------------------------------------------------------------------
# Competitive position
# ---------------------------------------------------------------------------

@dataclass
class CompetitivePosition:
    score:      float = COMPETITIVE_NO_DATA_SCORE    # [1, 10], 0 = no data
    factors:    List[str] = field(default_factory=list)
    is_default: bool = False

    @classmethod
    def insufficient(cls, message: str) -> "CompetitivePosition":
        return cls(score=COMPETITIVE_NO_DATA_SCORE, factors=[message], is_default=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score":     self.score,
            "factors":   list(self.factors),
            "isDefault": self.is_default,
        }


# ---------------------------------------------------------------------------
# Rank timeline
# ---------------------------------------------------------------------------

@dataclass
class TimelineScore:
    """Time-weighted rank band shares for one trailing window."""
    score:              float = 0.0
    time_in_ranges:     Dict[str, float] = field(default_factory=dict)   # percent
    volatility_penalty: float = 0.0
    final_score:        float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score":             self.score,
            "timeInRanges":      dict(self.time_in_ranges),
            "volatilityPenalty": self.volatility_penalty,
            "finalScore":        self.final_score,
        }


@dataclass
class RankTimeline:
    three_month:  TimelineScore = field(default_factory=TimelineScore)
    six_month:    TimelineScore = field(default_factory=TimelineScore)
    twelve_month: TimelineScore = field(default_factory=TimelineScore)
    performance_summary: PerformanceSummary = PerformanceSummary.HIGHLY_VOLATILE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "threeMonth":         self.three_month.to_dict(),
            "sixMonth":           self.six_month.to_dict(),
            "twelveMonth":        self.twelve_month.to_dict(),
            "performanceSummary": self.performance_summary.value,
        }


# ---------------------------------------------------------------------------
# Per-listing result
# ---------------------------------------------------------------------------

@dataclass
class ListingSeries:
    title: str = UNKNOWN_TITLE
    rank:  List[TimeSeriesPoint] = field(default_factory=list)
    price: List[TimeSeriesPoint] = field(default_factory=list)
    sales: List[TimeSeriesPoint] = field(default_factory=list)
    price_channel: Optional[int] = None     # channel the price series came from

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title":        self.title,
            "rank":         [p.to_dict() for p in self.rank],
            "price":        [p.to_dict() for p in self.price],
            "sales":        [p.to_dict() for p in self.sales],
            "priceChannel": self.price_channel,
        }


@dataclass
class ListingAnalysis:
    rank:                 RankAnalysis = field(default_factory=RankAnalysis.default)
    price:                PriceAnalysis = field(default_factory=PriceAnalysis.default)
    competitive_position: CompetitivePosition = field(
        default_factory=lambda: CompetitivePosition.insufficient("Insufficient data")
    )
    rank_timeline:        RankTimeline = field(default_factory=RankTimeline)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank":                self.rank.to_dict(),
            "price":               self.price.to_dict(),
            "competitivePosition": self.competitive_position.to_dict(),
            "rankTimeline":        self.rank_timeline.to_dict(),
        }


@dataclass
class ListingAnalysisResult:
    """
    Full engine output for one listing.

    An ``error``-status result still carries a structurally complete,
    default-filled ``analysis`` so consumers never branch on shape.
    """
    identifier: str
    status:     AnalysisStatus = AnalysisStatus.OK
    series:     ListingSeries = field(default_factory=ListingSeries)
    analysis:   ListingAnalysis = field(default_factory=ListingAnalysis)
    error:      Optional[str] = None

    @classmethod
    def failed(cls, identifier: str, error: str) -> "ListingAnalysisResult":
        return cls(identifier=identifier, status=AnalysisStatus.ERROR, error=error)

    @property
    def ok(self) -> bool:
        return self.status is AnalysisStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identifier": self.identifier,
            "status":     self.status.value,
            "error":      self.error,
            "seriesData": self.series.to_dict(),
            "analysis":   self.analysis.to_dict(),
        }

    def to_response(self):
        """Validate through the Pydantic wire schema."""
        from listing_signals.api.schemas import ListingAnalysisResponse

        return ListingAnalysisResponse.model_validate(self.to_dict())
