"""
Upstream price-source boundary.

A feed answers with the latest push-style sample for a feed id. Samples are
value objects: they are fetched fresh on every query and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol


@dataclass(frozen=True)
class PriceSample:
    """A price of ``mantissa * 10**exponent`` published at ``publish_time``."""

    mantissa: int
    exponent: int
    publish_time: int

    def as_decimal(self) -> Decimal:
        """Human-readable price, for display only."""
        return Decimal(self.mantissa).scaleb(self.exponent)

    def age(self, now: int) -> int:
        return now - self.publish_time


class PriceFeed(Protocol):
    """Interface that upstream price sources must implement."""

    def get_latest_price(self, feed_id: str) -> PriceSample:
        """Latest sample for ``feed_id``, with no freshness check."""
        ...

    def get_price_no_older_than(self, feed_id: str, max_age: int) -> PriceSample:
        """Latest sample for ``feed_id``; raises StaleFeedError when older than ``max_age``."""
        ...
