"""
Listing Signals: Wire schemas (Pydantic).

Mirrors ``ListingAnalysisResult.to_dict()`` so downstream consumers (the
market-scoring aggregator, the presentation layer) get:
  • Runtime validation / coercion of every field
  • A stable, documented contract independent of the internal dataclasses
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared primitives
# ---------------------------------------------------------------------------

class PointSchema(BaseModel):
    timestamp: int                    # epoch milliseconds
    value: float = Field(ge=0)


class TrendSchema(BaseModel):
    direction: Literal["up", "down", "stable"] = "stable"
    strength: float = Field(0.0, ge=0, le=1)
    confidence: float = Field(0.0, ge=0, le=1)
    isDefault: bool = False


# ---------------------------------------------------------------------------
# Analysis blocks
# ---------------------------------------------------------------------------

class RankAnalysisSchema(BaseModel):
    trend: TrendSchema
    stability: float = Field(ge=0, le=1)
    volatility: float = Field(ge=0, le=1)
    details: Optional[dict] = None
    category: str
    isDefault: bool = False


class ConsistencySchema(BaseModel):
    stability: float
    volatility: float
    consistencyScore: float
    changeScore: float
    outOfStockImpact: float
    samplesUsed: int


class PriceDetailsSchema(BaseModel):
    validPoints: int
    analyzedPoints: int
    bucketedPoints: int
    finalPoints: int
    listingAgeDays: float
    gracePeriodApplied: bool
    sustainedFilterApplied: bool
    minPrice: float
    maxPrice: float
    meanPrice: float
    priceRangeRatio: float
    baseScore: float
    newListingBoost: float
    jitter: float
    consistency: ConsistencySchema


class PriceAnalysisSchema(BaseModel):
    trend: TrendSchema
    stability: float = Field(ge=0, le=1)
    details: Optional[PriceDetailsSchema] = None
    category: str
    isDefault: bool = False


class CompetitivePositionSchema(BaseModel):
    score: float = Field(ge=0, le=10)
    factors: List[str] = Field(default_factory=list)
    isDefault: bool = False


class TimelineScoreSchema(BaseModel):
    score: float = Field(ge=0, le=100)
    timeInRanges: Dict[str, float] = Field(default_factory=dict)
    volatilityPenalty: float = 0.0
    finalScore: float = Field(ge=0, le=100)


class RankTimelineSchema(BaseModel):
    threeMonth: TimelineScoreSchema
    sixMonth: TimelineScoreSchema
    twelveMonth: TimelineScoreSchema
    performanceSummary: str


class AnalysisSchema(BaseModel):
    rank: RankAnalysisSchema
    price: PriceAnalysisSchema
    competitivePosition: CompetitivePositionSchema
    rankTimeline: RankTimelineSchema


class SeriesDataSchema(BaseModel):
    title: str
    rank: List[PointSchema] = Field(default_factory=list)
    price: List[PointSchema] = Field(default_factory=list)
    sales: List[PointSchema] = Field(default_factory=list)
    priceChannel: Optional[int] = None


# ---------------------------------------------------------------------------
# Per-listing result
# ---------------------------------------------------------------------------

class ListingAnalysisResponse(BaseModel):
    """One analyzed listing, ready for the scoring and presentation layers."""

    identifier: str
    status: Literal["ok", "error"]
    error: Optional[str] = None
    seriesData: SeriesDataSchema
    analysis: AnalysisSchema

    class Config:
        json_schema_extra = {
            "example": {
                "identifier": "B00EXAMPLE",
                "status": "ok",
                "analysis": {
                    "rank": {"stability": 0.92, "volatility": 0.08},
                    "competitivePosition": {"score": 5.6},
                },
            }
        }
