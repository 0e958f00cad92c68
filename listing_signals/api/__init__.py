"""listing_signals.api: Pydantic wire schemas for engine output."""
