"""
Listing Signals: Exception taxonomy.

``InputError`` and ``TransportError`` fail a whole batch and reach the
caller.  ``PerItemDataError`` never leaves the orchestrator: it is turned
into an ``error``-status result for the one listing that raised it.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for every error raised by the analysis engine."""


class InputError(EngineError, ValueError):
    """The batch contains no usable listing identifiers."""


class TransportError(EngineError):
    """The upstream history fetch failed or returned a malformed envelope."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PerItemDataError(EngineError):
    """A single listing's raw bundle is missing or cannot be decoded."""

    def __init__(self, identifier: str, message: str) -> None:
        super().__init__(f"{identifier}: {message}")
        self.identifier = identifier
        self.reason = message
