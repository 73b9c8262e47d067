"""
Error taxonomy for the rules engine.

Missing mastery records are not errors: the tracker initialises a fresh
record instead. Everything else is raised to the caller as one of these.
"""

from __future__ import annotations


class PrepEngineError(Exception):
    """Base class for all prep-engine errors."""


class InvalidInputError(PrepEngineError, ValueError):
    """Out-of-range accuracy, negative counts or otherwise malformed input."""


class PersistenceError(PrepEngineError):
    """The storage collaborator failed to read or write."""


def require_percentage(name: str, value: float) -> float:
    """Validate a 0-100 percentage, failing fast instead of clamping."""
    if value is None or not 0 <= value <= 100:
        raise InvalidInputError(f"{name} must be within [0, 100], got {value!r}")
    return float(value)


def require_non_negative(name: str, value: float) -> float:
    """Validate a count or duration that may not be negative."""
    if value is None or value < 0:
        raise InvalidInputError(f"{name} must be non-negative, got {value!r}")
    return value
