"""
Process configuration for Listing Signals.
All settings come from environment variables for 12-factor deployment.

Calibration values for the analyzers live in ``core.constants`` and are
overridden per call through ``core.settings.AnalysisSettings``; this module
only carries process-level knobs.

The batch entry points in ``engine`` read PRICE_JITTER_ENABLED,
PRICE_JITTER_SEED and ANALYSIS_MAX_WORKERS whenever the caller passes no
settings or worker count.  Calling an analyzer directly uses the plain
defaults.
"""

import os

from listing_signals.core.constants import (
    PROVIDER_BASE_URL, PROVIDER_DOMAIN, PROVIDER_HISTORY_DAYS,
)


def _env_bool(name: str, default: bool = False) -> bool:
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _env_optional_int(name: str):
    val = os.environ.get(name, "").strip()
    return int(val) if val else None


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()

# ---------------------------------------------------------------------------
# History provider
# ---------------------------------------------------------------------------
HISTORY_PROVIDER_URL = os.environ.get("HISTORY_PROVIDER_URL", PROVIDER_BASE_URL).rstrip("/")
HISTORY_PROVIDER_KEY = os.environ.get("HISTORY_PROVIDER_KEY", "")
HISTORY_PROVIDER_DOMAIN = int(os.environ.get("HISTORY_PROVIDER_DOMAIN", str(PROVIDER_DOMAIN)))
# Trailing days of history requested per batch.
HISTORY_WINDOW_DAYS = int(os.environ.get("HISTORY_WINDOW_DAYS", str(PROVIDER_HISTORY_DAYS)))
HISTORY_PROVIDER_TIMEOUT_SECONDS = float(os.environ.get("HISTORY_PROVIDER_TIMEOUT_SECONDS", "30"))
HISTORY_PROVIDER_MAX_RETRIES = int(os.environ.get("HISTORY_PROVIDER_MAX_RETRIES", "3"))

# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------
# Price-stability jitter: keep the ±1.5% perturbation unless disabled.
PRICE_JITTER_ENABLED = _env_bool("PRICE_JITTER_ENABLED", True)
# Fixed seed for reproducible jitter (unset = fresh entropy per batch).
PRICE_JITTER_SEED = _env_optional_int("PRICE_JITTER_SEED")
# Thread pool size for batch analysis (1 = sequential).
ANALYSIS_MAX_WORKERS = max(1, int(os.environ.get("ANALYSIS_MAX_WORKERS", "1")))
