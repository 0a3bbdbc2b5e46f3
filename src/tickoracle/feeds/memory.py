"""
In-process price feed.

Holds the last pushed sample per feed id. Used for simulations, the CLI's
offline mode and tests, and behaves like an on-chain push oracle: whoever owns
the feed pushes updates, readers only ever see the latest one.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

from ..exceptions import FeedUnavailableError, StaleFeedError
from .base import PriceSample

logger = logging.getLogger(__name__)


class InMemoryPriceFeed:
    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.time
        self._samples: Dict[str, PriceSample] = {}

    def update_price(
        self,
        feed_id: str,
        mantissa: int,
        exponent: int,
        publish_time: Optional[int] = None,
    ) -> PriceSample:
        """Push a new sample; ``publish_time`` defaults to the feed's clock."""
        if publish_time is None:
            publish_time = int(self._clock())
        sample = PriceSample(mantissa=int(mantissa), exponent=int(exponent), publish_time=int(publish_time))
        self._samples[feed_id] = sample
        logger.debug(
            "Price pushed",
            extra={
                "event": "feed.memory.update",
                "feed_id": feed_id,
                "mantissa": sample.mantissa,
                "exponent": sample.exponent,
                "publish_time": sample.publish_time,
            },
        )
        return sample

    def remove_price(self, feed_id: str) -> None:
        self._samples.pop(feed_id, None)

    def get_latest_price(self, feed_id: str) -> PriceSample:
        try:
            return self._samples[feed_id]
        except KeyError:
            raise FeedUnavailableError(
                f"Price feed {feed_id} not found", details={"feed_id": feed_id}
            ) from None

    def get_price_no_older_than(self, feed_id: str, max_age: int) -> PriceSample:
        sample = self.get_latest_price(feed_id)
        age = sample.age(int(self._clock()))
        if age > max_age:
            raise StaleFeedError(feed_id, age, max_age)
        return sample
