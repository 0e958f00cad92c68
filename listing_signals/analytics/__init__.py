"""
listing_signals.analytics: Trend, outlier filtering, stability scoring,
rank timelines and competitive position.

Import surface::

    from listing_signals.analytics.trend           import calculate_trend
    from listing_signals.analytics.rank_stability  import analyze_rank_stability
    from listing_signals.analytics.price_stability import analyze_price_stability
    from listing_signals.analytics.competitive     import score_competitive_position
    from listing_signals.analytics.timeline        import analyze_rank_timeline
"""
