"""Upstream price sources and the staleness guard."""

from .base import PriceFeed, PriceSample
from .hermes import HermesPriceFeed, normalize_feed_id
from .memory import InMemoryPriceFeed
from .staleness import check_sample, read_fresh_sample

__all__ = [
    "PriceFeed",
    "PriceSample",
    "HermesPriceFeed",
    "InMemoryPriceFeed",
    "normalize_feed_id",
    "check_sample",
    "read_fresh_sample",
]
