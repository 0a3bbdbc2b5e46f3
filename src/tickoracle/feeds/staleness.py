"""Staleness and sign checks applied to every sample before it is priced."""

from __future__ import annotations

import logging

from ..config import StalenessPolicy
from ..exceptions import InvalidPriceError, StaleFeedError
from .base import PriceFeed, PriceSample

logger = logging.getLogger(__name__)


def check_sample(feed_id: str, sample: PriceSample, policy: StalenessPolicy, now: int) -> PriceSample:
    """
    Validate an already-fetched sample.

    A sample whose age equals ``max_age`` is still fresh. A publish time ahead
    of ``now`` gives a negative age and is accepted.

    Raises:
        StaleFeedError: age > max_age
        InvalidPriceError: mantissa <= 0
    """
    age = sample.age(now)
    if age > policy.max_age:
        logger.warning(
            "Rejected stale price sample",
            extra={
                "event": "feed.stale",
                "feed_id": feed_id,
                "age": age,
                "max_age": policy.max_age,
            },
        )
        raise StaleFeedError(feed_id, age, policy.max_age)

    if sample.mantissa <= 0:
        logger.warning(
            "Rejected non-positive price sample",
            extra={"event": "feed.invalid_price", "feed_id": feed_id, "mantissa": sample.mantissa},
        )
        raise InvalidPriceError(feed_id, sample.mantissa)

    return sample


def read_fresh_sample(feed: PriceFeed, feed_id: str, policy: StalenessPolicy, now: int) -> PriceSample:
    """Fetch the latest sample for ``feed_id`` and validate it against ``policy``."""
    sample = feed.get_latest_price(feed_id)
    return check_sample(feed_id, sample, policy, now)
