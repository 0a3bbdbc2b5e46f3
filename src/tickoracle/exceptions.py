"""
Exception hierarchy for the tickoracle price adapter.

Every failure aborts the query that raised it. Feed errors are marked
recoverable because callers are expected to treat them as "oracle temporarily
unavailable" and retry on a later call; math and configuration errors are not.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class OracleAdapterError(Exception):
    """Base exception for all adapter errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the same query may succeed later
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable


class ConfigurationError(OracleAdapterError):
    """Raised when construction-time configuration is missing or invalid."""
    pass


# ==================== Feed Errors ====================


class FeedError(OracleAdapterError):
    """Raised when an upstream price sample cannot be used."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)


class StaleFeedError(FeedError):
    """Raised when a sample's age exceeds the configured maximum age."""

    def __init__(self, feed_id: str, age: int, max_age: int) -> None:
        super().__init__(
            f"Price feed {feed_id} is stale: age {age}s exceeds max age {max_age}s",
            details={"feed_id": feed_id, "age": age, "max_age": max_age},
        )
        self.feed_id = feed_id
        self.age = age
        self.max_age = max_age


class InvalidPriceError(FeedError):
    """Raised when a sample's mantissa is zero or negative."""

    def __init__(self, feed_id: str, mantissa: int) -> None:
        super().__init__(
            f"Price feed {feed_id} returned non-positive price {mantissa}",
            details={"feed_id": feed_id, "mantissa": mantissa},
        )
        self.feed_id = feed_id
        self.mantissa = mantissa


class FeedUnavailableError(FeedError):
    """Raised when the upstream source refuses or fails to answer."""
    pass


# ==================== Price Math Errors ====================


class PriceMathError(OracleAdapterError):
    """Base class for fixed-point and tick conversion failures."""
    pass


class ScaleOverflowError(PriceMathError):
    """Raised when a decimal-scale combination leaves the representable range.

    Covers ratios that overflow the Q128 domain, ratios that underflow to zero
    and ratios whose tick falls outside the consumer's tick bounds.
    """
    pass


class TickOutOfRangeError(PriceMathError):
    """Raised when a tick is outside [MIN_TICK, MAX_TICK]."""

    def __init__(self, tick: int) -> None:
        super().__init__(f"Tick {tick} out of range", details={"tick": tick})
        self.tick = tick


class ObservationIndexError(OracleAdapterError, IndexError):
    """Raised for observation indexes outside the emulated ring."""

    def __init__(self, index: int, ring_size: int) -> None:
        super().__init__(
            f"Observation index {index} outside [0, {ring_size})",
            details={"index": index, "ring_size": ring_size},
        )
        self.index = index
