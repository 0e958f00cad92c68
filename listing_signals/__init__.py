"""
listing_signals: Time-series competitive-signal analysis engine.

Import surface::

    from listing_signals.engine import analyze_batch, analyze_listing
    from listing_signals.data_pipeline.normalizer import decode_series
    from listing_signals.analytics.rank_stability import analyze_rank_stability
    from listing_signals.analytics.price_stability import analyze_price_stability

Logging is silent until the host configures it; see ``core.logging``.
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
