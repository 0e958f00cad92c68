"""
Listing Signals: Analysis orchestrator.

Turns raw channel bundles into ``ListingAnalysisResult`` records:

    bundle → decode channels → rank / price / competitive / timeline → result

Each listing is analyzed independently from its own bundle, so a malformed
bundle only degrades that listing to an ``error`` record; batch-level
failures (no valid identifiers, broken envelope) raise instead.

Usage::

    results = analyze_envelope(["B00EXAMPLE"], provider_response)
    payload = [r.to_dict() for r in results]
"""

from __future__ import annotations

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional, Sequence

from listing_signals import config
from listing_signals.analytics.competitive import score_competitive_position
from listing_signals.analytics.price_stability import analyze_price_stability
from listing_signals.analytics.rank_stability import analyze_rank_stability
from listing_signals.analytics.timeline import analyze_rank_timeline
from listing_signals.core.constants import UNKNOWN_TITLE
from listing_signals.core.errors import PerItemDataError
from listing_signals.core.settings import AnalysisSettings, resolve, resolve_from_env
from listing_signals.data_pipeline.normalizer import (
    clean_identifier, clean_identifiers, decode_channel, parse_envelope,
    select_price_series,
)
from listing_signals.domain.models import (
    ListingAnalysis, ListingAnalysisResult, ListingSeries,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Single listing
# ---------------------------------------------------------------------------

def _channels_of(identifier: str, bundle: Any) -> Any:
    if bundle is None:
        raise PerItemDataError(identifier, "no history returned for listing")
    if not isinstance(bundle, Mapping):
        raise PerItemDataError(identifier, "listing bundle is not an object")
    channels = bundle.get("csv")
    if channels is None:
        raise PerItemDataError(identifier, "listing bundle has no channel data")
    return channels


def build_series(
    identifier: str,
    bundle: Any,
    settings: Optional[AnalysisSettings] = None,
) -> ListingSeries:
    """Decode the rank, price and sales channels of one bundle.

    Raises
    ------
    PerItemDataError
        If the bundle or one of its channels is malformed.
    """
    s = resolve(settings)
    channels = _channels_of(identifier, bundle)

    rank = decode_channel(identifier, channels, s.rank_channel)
    sales = decode_channel(identifier, channels, s.sales_channel)
    price_channel, price = select_price_series(
        identifier, channels, s.price_channel_candidates, s.min_price_channel_points,
    )

    title = bundle.get("title")
    return ListingSeries(
        title=title if isinstance(title, str) and title else UNKNOWN_TITLE,
        rank=rank,
        price=price,
        sales=sales,
        price_channel=price_channel,
    )


def analyze_listing(
    identifier: str,
    bundle: Any,
    settings: Optional[AnalysisSettings] = None,
    rng: Optional[random.Random] = None,
) -> ListingAnalysisResult:
    """
    Analyze one listing.  Never raises for bad per-listing data.

    Args:
        identifier: Cleaned listing identifier.
        bundle:     Raw provider record (``{"asin", "title", "csv"}``) or
                    ``None`` when the provider returned nothing.
        settings:   Calibration overrides; ``None`` reads the jitter knobs
                    from the process configuration.
        rng:        Jitter source for the price analyzer.

    Returns an ``ok`` result, or an ``error`` result with default-filled
    analysis fields when the bundle is missing or malformed.
    """
    s = resolve_from_env(settings)
    try:
        series = build_series(identifier, bundle, s)
    except PerItemDataError as exc:
        logger.warning("Listing %s degraded to error: %s", identifier, exc.reason)
        return ListingAnalysisResult.failed(identifier, exc.reason)

    analysis = ListingAnalysis(
        rank=analyze_rank_stability(series.rank, s),
        price=analyze_price_stability(series.price, s, rng),
        competitive_position=score_competitive_position(series.rank),
        rank_timeline=analyze_rank_timeline(series.rank, settings=s),
    )

    logger.debug(
        "Listing %s: rank=%d price=%d (channel %s) sales=%d → rank_stab=%.2f "
        "price_stab=%.2f competitive=%.1f",
        identifier, len(series.rank), len(series.price), series.price_channel,
        len(series.sales), analysis.rank.stability, analysis.price.stability,
        analysis.competitive_position.score,
    )
    return ListingAnalysisResult(identifier=identifier, series=series, analysis=analysis)


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------

def _index_bundles(bundles: Mapping[str, Any]) -> Dict[str, Any]:
    indexed: Dict[str, Any] = {}
    for key, bundle in bundles.items():
        indexed[clean_identifier(key) or key] = bundle
    return indexed


def analyze_batch(
    identifiers: Sequence[str],
    bundles: Mapping[str, Any],
    settings: Optional[AnalysisSettings] = None,
    rng: Optional[random.Random] = None,
    max_workers: Optional[int] = None,
) -> List[ListingAnalysisResult]:
    """
    Analyze every requested listing against pre-fetched bundles.

    Identifiers are cleaned first (``InputError`` when none survive).  The
    output has one result per cleaned identifier, in request order;
    identifiers with no bundle come back as ``error`` results.

    Each listing gets its own jitter source seeded from ``rng`` before any
    work starts, so results do not depend on ``max_workers``.  With no
    ``settings``, the jitter switch and seed come from ``config``; with no
    ``max_workers``, the pool size does too.
    """
    s = resolve_from_env(settings)
    ids = clean_identifiers(identifiers)
    lookup = _index_bundles(bundles)

    batch_rng = rng if rng is not None else random.Random(s.jitter_seed)
    listing_rngs = [random.Random(batch_rng.getrandbits(64)) for _ in ids]

    workers = max_workers if max_workers is not None else config.ANALYSIS_MAX_WORKERS

    def _run(i: int) -> ListingAnalysisResult:
        ident = ids[i]
        return analyze_listing(ident, lookup.get(ident), s, listing_rngs[i])

    if workers > 1 and len(ids) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(_run, range(len(ids))))
    else:
        results = [_run(i) for i in range(len(ids))]

    failed = sum(1 for r in results if not r.ok)
    logger.info(
        "Analyzed %d listings (%d ok, %d error)", len(results), len(results) - failed, failed,
    )
    return results


def analyze_envelope(
    identifiers: Sequence[str],
    envelope: Any,
    settings: Optional[AnalysisSettings] = None,
    rng: Optional[random.Random] = None,
    max_workers: Optional[int] = None,
) -> List[ListingAnalysisResult]:
    """
    Validate a provider batch response and analyze it.

    Raises
    ------
    InputError
        If no identifier is valid.
    TransportError
        If the envelope is malformed or reports an error.
    """
    ids = clean_identifiers(identifiers)
    bundles = parse_envelope(envelope)
    return analyze_batch(ids, bundles, settings=settings, rng=rng, max_workers=max_workers)
