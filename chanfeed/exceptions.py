"""Typed exceptions raised or reported by the feed client."""

from __future__ import annotations

from typing import Any


class FeedError(Exception):
    """Base exception for all chanfeed errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DecodeError(FeedError):
    """An inbound frame could not be decoded.

    Carries the original payload and the underlying parse failure. Reported
    through the client's ``error`` event, never raised to the transport.
    """

    def __init__(self, raw: str | bytes, error: Exception) -> None:
        super().__init__("invalid message, see raw and error", {"error": str(error)})
        self.raw = raw
        self.error = error


class ConfigurationError(FeedError):
    """A handler was registered without a filter it requires."""

    def __init__(self, missing: str) -> None:
        super().__init__(f"missing required filter: {missing}", {"missing": missing})
        self.missing = missing


class NotConnectedError(FeedError):
    """A frame was sent while no connection is open."""
    pass
