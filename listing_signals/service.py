"""
Listing Signals: Batch service.

Glue for callers that want "identifiers in, results out": one provider
fetch per batch, then the pure engine run off the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import List, Optional, Sequence

from listing_signals.core.settings import AnalysisSettings
from listing_signals.data_pipeline.fetcher import HistoryFetcher
from listing_signals.data_pipeline.normalizer import clean_identifiers
from listing_signals.domain.models import ListingAnalysisResult
from listing_signals.engine import analyze_envelope

logger = logging.getLogger(__name__)


async def analyze_identifiers(
    identifiers: Sequence[str],
    fetcher: HistoryFetcher,
    settings: Optional[AnalysisSettings] = None,
    rng: Optional[random.Random] = None,
    max_workers: Optional[int] = None,
) -> List[ListingAnalysisResult]:
    """
    Fetch history for ``identifiers`` once and analyze every listing.

    ``InputError`` is raised before any request when no identifier is
    valid; ``TransportError`` from the fetch propagates unchanged.
    """
    ids = clean_identifiers(identifiers)
    envelope = await fetcher.fetch_products(ids)

    # Analysis is CPU-bound; run it in a thread to avoid blocking the loop.
    loop = asyncio.get_running_loop()
    results = await loop.run_in_executor(
        None, lambda: analyze_envelope(ids, envelope, settings, rng, max_workers),
    )
    logger.info("Batch of %d listings analyzed", len(results))
    return results
