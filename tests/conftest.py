"""
Pytest configuration and shared fixtures.

Fixtures available to all tests:
  • encode(values, ...)      : build a flat (offset, value) channel
  • make_points(values, ...) : decoded TimeSeriesPoints, one per step
  • make_bundle(...)         : raw provider bundle for one listing
"""

from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import pytest

# Ensure the project root is on the path so all package imports resolve.
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from listing_signals.data_pipeline.normalizer import decode_series, epoch_offset  # noqa: E402

DEFAULT_START = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Channel factories
# ---------------------------------------------------------------------------

def _encode(
    values: Sequence[float],
    start: datetime = DEFAULT_START,
    step: timedelta = timedelta(days=1),
) -> List[int]:
    flat: List[int] = []
    for i, v in enumerate(values):
        flat.extend([epoch_offset(start + step * i), v])
    return flat


def _points(
    values: Sequence[float],
    start: datetime = DEFAULT_START,
    step: timedelta = timedelta(days=1),
):
    return decode_series(_encode(values, start, step))


def _bundle(
    asin: str = "B00TEST001",
    rank: Optional[Sequence[float]] = None,
    price: Optional[Sequence[float]] = None,
    sales: Optional[Sequence[float]] = None,
    title: Optional[str] = "Test Product",
    extra_channels: Optional[dict] = None,
    start: datetime = DEFAULT_START,
) -> dict:
    csv: List[Optional[List[int]]] = [None] * 17
    if price is not None:
        csv[0] = _encode(price, start)
    if rank is not None:
        csv[3] = _encode(rank, start)
    if sales is not None:
        csv[11] = _encode(sales, start)
    for idx, values in (extra_channels or {}).items():
        csv[idx] = _encode(values, start)
    bundle = {"asin": asin, "csv": csv}
    if title is not None:
        bundle["title"] = title
    return bundle


@pytest.fixture
def encode():
    return _encode


@pytest.fixture
def make_points():
    return _points


@pytest.fixture
def make_bundle():
    return _bundle
