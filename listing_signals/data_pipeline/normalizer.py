"""
Listing Signals: Raw channel decoder and bundle validator.

Converts the provider's compact channel encoding into sorted
``TimeSeriesPoint`` lists, picks the price channel, cleans listing
identifiers and validates the batch envelope.

All functions are pure (no I/O).
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timedelta
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from listing_signals.core.constants import IDENTIFIER_LENGTH, SERIES_EPOCH
from listing_signals.core.errors import InputError, PerItemDataError, TransportError
from listing_signals.domain.models import TimeSeriesPoint

logger = logging.getLogger(__name__)

_NON_IDENTIFIER_CHARS = re.compile(r"[^A-Z0-9]")


# ---------------------------------------------------------------------------
# Public: flat channel → TimeSeriesPoints
# ---------------------------------------------------------------------------

def decode_series(data: Optional[Sequence[float]]) -> List[TimeSeriesPoint]:
    """Decode alternating ``(minute_offset, value)`` pairs.

    Pairs with a negative offset or a negative value are "no observation"
    sentinels and are skipped, as are pairs holding NaN or infinity.  An
    odd trailing element is dropped.  The result is sorted ascending by
    timestamp since providers do not guarantee input order.

    Returns an empty list for ``None`` or empty input.

    Raises
    ------
    ValueError
        If an offset lies beyond the range of representable dates.
    """
    if not data:
        return []

    points: List[TimeSeriesPoint] = []
    for i in range(0, len(data) - 1, 2):
        offset, value = data[i], data[i + 1]
        if offset is None or value is None:
            continue
        if not (math.isfinite(offset) and math.isfinite(value)):
            continue
        if offset < 0 or value < 0:
            continue
        try:
            timestamp = SERIES_EPOCH + timedelta(minutes=offset)
        except OverflowError as exc:
            raise ValueError(f"minute offset {offset} is out of range") from exc
        points.append(TimeSeriesPoint(timestamp=timestamp, value=value))

    points.sort(key=lambda p: p.timestamp)
    return points


def values_of(points: Sequence[TimeSeriesPoint]) -> List[float]:
    """Extract the value column from a decoded series."""
    return [p.value for p in points]


def epoch_offset(ts: datetime) -> int:
    """Inverse of the decoder's time mapping: minutes since the series epoch."""
    return int((ts - SERIES_EPOCH).total_seconds() // 60)


# ---------------------------------------------------------------------------
# Channel lookup
# ---------------------------------------------------------------------------

def _is_numeric_sequence(raw: Any) -> bool:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        return False
    return all(v is None or (isinstance(v, Real) and not isinstance(v, bool)) for v in raw)


def get_channel(identifier: str, channels: Any, index: int) -> Optional[Sequence[float]]:
    """Return the raw sequence for ``index`` or ``None`` when absent.

    ``channels`` is either a list indexed by position (``None`` entries mean
    "absent") or a mapping keyed by int or str index.

    Raises
    ------
    PerItemDataError
        If the channel exists but is not a numeric sequence.
    """
    if isinstance(channels, Mapping):
        raw = channels.get(index, channels.get(str(index)))
    elif isinstance(channels, Sequence) and not isinstance(channels, (str, bytes)):
        raw = channels[index] if 0 <= index < len(channels) else None
    else:
        raise PerItemDataError(identifier, "channel map must be a list or mapping")

    if raw is None:
        return None
    if not _is_numeric_sequence(raw):
        raise PerItemDataError(identifier, f"channel {index} is not a numeric sequence")
    return raw


def decode_channel(identifier: str, channels: Any, index: int) -> List[TimeSeriesPoint]:
    """Decode one channel; undecodable data raises ``PerItemDataError``."""
    try:
        return decode_series(get_channel(identifier, channels, index))
    except ValueError as exc:
        raise PerItemDataError(identifier, f"channel {index}: {exc}") from exc


def select_price_series(
    identifier: str,
    channels: Any,
    candidates: Sequence[int],
    min_points: int = 2,
) -> Tuple[Optional[int], List[TimeSeriesPoint]]:
    """Pick the price series from an ordered list of candidate channels.

    The first candidate (the primary) wins outright when it decodes to at
    least ``min_points`` points.  Otherwise every candidate is decoded and
    the one with the most points is kept; earlier candidates win ties.

    Returns ``(channel_index, points)``; the index is ``None`` when no
    candidate yielded any point.
    """
    if not candidates:
        return None, []

    decoded = [(idx, decode_channel(identifier, channels, idx)) for idx in candidates]
    primary_idx, primary = decoded[0]
    if len(primary) >= min_points:
        return primary_idx, primary

    best_idx, best = primary_idx, primary
    for idx, points in decoded[1:]:
        if len(points) > len(best):
            best_idx, best = idx, points
    if best_idx != primary_idx:
        logger.debug(
            "%s: primary price channel %d had %d points; using channel %d (%d points)",
            identifier, primary_idx, len(primary), best_idx, len(best),
        )
    return (best_idx if best else None), best


# ---------------------------------------------------------------------------
# Identifier cleaning
# ---------------------------------------------------------------------------

def clean_identifier(raw: Any) -> Optional[str]:
    """Uppercase, strip non-alphanumerics; ``None`` unless exactly 10 chars."""
    if not isinstance(raw, str):
        return None
    cleaned = _NON_IDENTIFIER_CHARS.sub("", raw.strip().upper())
    return cleaned if len(cleaned) == IDENTIFIER_LENGTH else None


def clean_identifiers(raw_ids: Optional[Sequence[Any]]) -> List[str]:
    """Clean a batch of identifiers, dropping invalid ones and duplicates.

    Raises
    ------
    InputError
        If no identifier survives cleaning.
    """
    if not raw_ids:
        raise InputError("No valid listing identifiers provided")

    seen = set()
    cleaned: List[str] = []
    for raw in raw_ids:
        ident = clean_identifier(raw)
        if ident is None:
            logger.debug("Dropping invalid identifier %r", raw)
            continue
        if ident not in seen:
            seen.add(ident)
            cleaned.append(ident)

    if not cleaned:
        raise InputError("No valid listing identifiers provided")
    return cleaned


# ---------------------------------------------------------------------------
# Envelope validation
# ---------------------------------------------------------------------------

def parse_envelope(envelope: Any) -> Dict[str, Mapping[str, Any]]:
    """Index the provider's batch response by identifier.

    Products without a usable identifier are skipped here; the orchestrator
    reports them as missing.

    Raises
    ------
    TransportError
        If the envelope is not a mapping, carries an ``error`` member, or has
        no ``products`` list.
    """
    if not isinstance(envelope, Mapping):
        raise TransportError("History response is not a JSON object")

    error = envelope.get("error")
    if error:
        message = error.get("message") if isinstance(error, Mapping) else str(error)
        raise TransportError(f"History provider error: {message or 'unknown'}")

    products = envelope.get("products")
    if not isinstance(products, list):
        raise TransportError("History response has no products list")

    bundles: Dict[str, Mapping[str, Any]] = {}
    for product in products:
        if not isinstance(product, Mapping):
            continue
        ident = clean_identifier(product.get("asin"))
        if ident is None:
            logger.warning("Skipping product without a valid identifier: %r", product.get("asin"))
            continue
        bundles[ident] = product
    return bundles
