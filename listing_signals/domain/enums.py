"""
listing_signals.domain.enums: All enumerations used across the engine.

Keep this module import-clean (stdlib only).
"""

from enum import Enum


# ---------------------------------------------------------------------------
# Trend direction
# ---------------------------------------------------------------------------

class TrendDirection(str, Enum):
    UP     = "up"
    DOWN   = "down"
    STABLE = "stable"


# ---------------------------------------------------------------------------
# Per-listing result status
# ---------------------------------------------------------------------------

class AnalysisStatus(str, Enum):
    OK    = "ok"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Rank timeline performance summary (display only)
# ---------------------------------------------------------------------------

class PerformanceSummary(str, Enum):
    """
    Coarse label derived from the 3/6/12-month timeline scores.

    Thresholds are checked from the best label down; the first label whose
    three minimums are all met wins.
    """
    EXCEPTIONAL           = "Exceptional"
    HIGHLY_CONSISTENT     = "Highly Consistent"
    CONSISTENT            = "Consistent"
    MODERATELY_CONSISTENT = "Moderately Consistent"
    INCONSISTENT          = "Inconsistent"
    HIGHLY_VOLATILE       = "Highly Volatile"
    DECLINING             = "Declining"
    EXTREMELY_VOLATILE    = "Extremely Volatile"

    @property
    def minimums(self) -> tuple:
        """(recent, mid, long) minimum final scores, or () for fallback labels."""
        return {
            "Exceptional":           (90, 85, 80),
            "Highly Consistent":     (80, 75, 70),
            "Consistent":            (70, 65, 60),
            "Moderately Consistent": (60, 55, 50),
            "Inconsistent":          (50, 45, 40),
        }.get(self.value, ())
