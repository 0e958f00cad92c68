"""
listing_signals.domain: Canonical data models and enumerations.

This package defines the source-of-truth types shared across every layer
of the engine. Nothing in here imports from other listing_signals
sub-packages except ``core`` helpers.
"""
