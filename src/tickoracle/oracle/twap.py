"""
Consumer-side TWAP helper.

Mirrors how a pool consumer turns two cumulative-tick observations into a
time-weighted mean tick, so callers and tests can read the adapter the way an
on-chain integration would.
"""

from __future__ import annotations

import logging

from ..core.tick_math import tick_to_price
from .adapter import PriceOracleAdapter

logger = logging.getLogger(__name__)


def consult(oracle: PriceOracleAdapter, seconds_ago: int) -> int:
    """
    Arithmetic mean tick over the last ``seconds_ago`` seconds.

    Rounded toward negative infinity, as the consumer's oracle library does.
    """
    if isinstance(seconds_ago, bool) or not isinstance(seconds_ago, int) or seconds_ago <= 0:
        raise ValueError("seconds_ago must be a positive integer")

    tick_cumulatives, _ = oracle.observe([seconds_ago, 0])
    delta = tick_cumulatives[1] - tick_cumulatives[0]
    mean_tick = delta // seconds_ago

    logger.debug(
        "TWAP consulted",
        extra={"event": "twap.consult", "seconds_ago": seconds_ago, "mean_tick": mean_tick},
    )
    return mean_tick


def consult_price(oracle: PriceOracleAdapter, seconds_ago: int) -> float:
    """Mean price over the window as a float, for display."""
    return tick_to_price(consult(oracle, seconds_ago))
