"""Exception types of the tradeboard pipeline.

Only I/O and structured-input problems are exceptions. Everything after
normalization (classification, gates, filter, sort) represents uncertainty as
``None`` / NA and never raises.
"""

from __future__ import annotations

EXCERPT_LIMIT = 200


def excerpt(text: object, limit: int = EXCERPT_LIMIT) -> str:
    """Bounded, single-line excerpt of offending input for error messages."""
    s = str(text if text is not None else "")
    s = " ".join(s.split())
    if len(s) > limit:
        return s[: limit - 1] + "…"
    return s


class TradeboardError(Exception):
    """Base class for all errors raised by tradeboard."""


class FetchFailure(TradeboardError):
    """A named resource (manifest, descriptor, CSV, stats file) could not be retrieved."""

    def __init__(self, location: str, reason: str):
        self.location = str(location)
        self.reason = str(reason)
        super().__init__(f"{self.location}: {self.reason}")


class ParseFailure(TradeboardError):
    """Structured input is malformed (invalid JSON, required field missing)."""

    def __init__(self, message: str, source: object = None):
        self.excerpt = excerpt(source) if source is not None else ""
        self.message = message
        text = message if not self.excerpt else f"{message} (excerpt: {self.excerpt!r})"
        super().__init__(text)


class InvalidGatePreset(TradeboardError, ValueError):
    """A gate preset definition is unknown or malformed."""
