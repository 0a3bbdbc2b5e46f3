"""
Pull-style pool oracle backed by a push-style price feed.

Exposes the slot0 / observations / observe / increaseObservationCardinalityNext
surface a Uniswap V3 pool consumer reads, answering every call from the feed's
current price:

    feed sample -> staleness guard -> Q128 ratio (single or cross)
    -> tick -> orientation -> sqrt price / synthetic history

The pipeline runs in full on every call and reads the clock once, so a query
is a pure function of (feed state, clock reading, configuration). Nothing is
cached between calls and any failure aborts the whole query.

Example usage:
    feed = HermesPriceFeed()
    oracle = create_adapter(feed, AdapterConfig(feed_id=ETH_USD, decimal_difference=-12))
    sqrt_price, tick, *_ = oracle.slot0()
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol, Sequence

from ..config import AdapterConfig
from ..core.fixed_point import combine_samples, normalize_sample
from ..core.history import (
    Observation,
    ObserveResult,
    Slot0,
    observation_timestamp,
    synthetic_observation,
    synthetic_observe,
    synthetic_slot0,
)
from ..core.tick_math import (
    DEFAULT_TICK_PRECISION,
    MAX_TICK,
    MAX_TICK_PRECISION,
    MIN_TICK,
    invert_tick,
    ratio_to_tick,
    tick_to_sqrt_price,
)
from ..exceptions import ConfigurationError, ScaleOverflowError
from ..feeds.base import PriceFeed
from ..feeds.staleness import read_fresh_sample

logger = logging.getLogger(__name__)


class PriceOracleAdapter(Protocol):
    """Read surface shared by the single-feed and dual-feed adapters."""

    def current_tick(self) -> int:
        ...

    def slot0(self) -> Slot0:
        ...

    def observations(self, index: int) -> Observation:
        ...

    def observe(self, seconds_agos: Sequence[int]) -> ObserveResult:
        ...

    def increase_observation_cardinality_next(self, observation_cardinality_next: int) -> None:
        ...

    def snapshot(self) -> Slot0:
        ...

    def observation_at(self, index: int) -> Observation:
        ...

    def observe_ages(self, seconds_agos: Sequence[int]) -> ObserveResult:
        ...

    def bump_cardinality(self, observation_cardinality_next: int) -> None:
        ...


class _SyntheticPoolOracle:
    """Query surface common to both adapters; subclasses supply ``_tick_at``."""

    def __init__(
        self,
        feed: PriceFeed,
        config: AdapterConfig,
        clock: Optional[Callable[[], float]] = None,
        precision: int = DEFAULT_TICK_PRECISION,
    ) -> None:
        if not 1 <= precision <= MAX_TICK_PRECISION:
            raise ConfigurationError(f"precision must be within [1, {MAX_TICK_PRECISION}]")
        self._feed = feed
        self._config = config
        self._clock = clock or time.time
        self._precision = precision

    # ==================== Configuration ====================

    @property
    def config(self) -> AdapterConfig:
        return self._config

    @property
    def feed_id(self) -> str:
        return self._config.feed_id

    @property
    def max_age(self) -> int:
        return self._config.max_age

    @property
    def decimal_difference(self) -> int:
        return self._config.decimal_difference

    @property
    def precision(self) -> int:
        return self._precision

    # ==================== Pipeline ====================

    def _now(self) -> int:
        return int(self._clock())

    def _tick_at(self, now: int) -> int:
        raise NotImplementedError

    def _ratio_tick(self, ratio_x128: int, invert: bool = False) -> int:
        tick = invert_tick(ratio_to_tick(ratio_x128, self._precision), invert)
        if not MIN_TICK <= tick <= MAX_TICK:
            raise ScaleOverflowError(
                f"Derived tick {tick} outside [{MIN_TICK}, {MAX_TICK}]",
                details={"tick": tick},
            )
        return tick

    # ==================== Pool surface ====================

    def current_tick(self) -> int:
        return self._tick_at(self._now())

    def slot0(self) -> Slot0:
        """Current sqrt price and tick; the ring always reports itself full."""
        tick = self._tick_at(self._now())
        sqrt_price_x96 = tick_to_sqrt_price(tick)
        logger.debug(
            "slot0 served",
            extra={"event": "adapter.slot0", "feed_id": self.feed_id, "tick": tick},
        )
        return synthetic_slot0(tick, sqrt_price_x96)

    def observations(self, index: int) -> Observation:
        now = self._now()
        observation_timestamp(index, now)
        tick = self._tick_at(now)
        return synthetic_observation(tick, index, now)

    def observe(self, seconds_agos: Sequence[int]) -> ObserveResult:
        seconds_agos = list(seconds_agos)
        now = self._now()
        tick = self._tick_at(now)
        logger.debug(
            "observe served",
            extra={
                "event": "adapter.observe",
                "feed_id": self.feed_id,
                "tick": tick,
                "count": len(seconds_agos),
            },
        )
        return synthetic_observe(tick, seconds_agos, now)

    def increase_observation_cardinality_next(self, observation_cardinality_next: int) -> None:
        """Accepted and ignored; the synthetic ring is always at full cardinality."""
        logger.debug(
            "Cardinality increase ignored",
            extra={
                "event": "adapter.cardinality_noop",
                "requested": observation_cardinality_next,
            },
        )

    snapshot = slot0
    observation_at = observations
    observe_ages = observe
    bump_cardinality = increase_observation_cardinality_next


class SingleFeedOracleAdapter(_SyntheticPoolOracle):
    """Pool oracle for one feed, optionally reporting the reciprocal price."""

    def __init__(
        self,
        feed: PriceFeed,
        config: AdapterConfig,
        clock: Optional[Callable[[], float]] = None,
        precision: int = DEFAULT_TICK_PRECISION,
    ) -> None:
        if config.dual:
            raise ConfigurationError("SingleFeedOracleAdapter requires a config without quote_feed_id")
        super().__init__(feed, config, clock=clock, precision=precision)

    @property
    def invert(self) -> bool:
        return self._config.invert

    def _tick_at(self, now: int) -> int:
        sample = read_fresh_sample(self._feed, self._config.feed_id, self._config.staleness, now)
        ratio = normalize_sample(sample, self._config.decimal_difference, label=self._config.feed_id)
        return self._ratio_tick(ratio, invert=self._config.invert)


class DualFeedOracleAdapter(_SyntheticPoolOracle):
    """
    Pool oracle for the cross price of two feeds sharing a quote asset.

    Reports feed_id / quote_feed_id, e.g. ETH/USD over BTC/USD gives ETH/BTC.
    Both samples are checked independently and either failure aborts the read.
    """

    def __init__(
        self,
        feed: PriceFeed,
        config: AdapterConfig,
        clock: Optional[Callable[[], float]] = None,
        precision: int = DEFAULT_TICK_PRECISION,
    ) -> None:
        if not config.dual:
            raise ConfigurationError("DualFeedOracleAdapter requires quote_feed_id")
        super().__init__(feed, config, clock=clock, precision=precision)

    @property
    def quote_feed_id(self) -> str:
        return self._config.quote_feed_id

    def _tick_at(self, now: int) -> int:
        policy = self._config.staleness
        base = read_fresh_sample(self._feed, self._config.feed_id, policy, now)
        quote = read_fresh_sample(self._feed, self._config.quote_feed_id, policy, now)
        ratio = combine_samples(base, quote, self._config.decimal_difference)
        return self._ratio_tick(ratio)


def create_adapter(
    feed: PriceFeed,
    config: AdapterConfig,
    clock: Optional[Callable[[], float]] = None,
    precision: int = DEFAULT_TICK_PRECISION,
) -> PriceOracleAdapter:
    """Build the adapter variant selected by ``config``."""
    adapter_cls = DualFeedOracleAdapter if config.dual else SingleFeedOracleAdapter
    adapter = adapter_cls(feed, config, clock=clock, precision=precision)
    logger.info(
        "Oracle adapter created",
        extra={
            "event": "adapter.created",
            "mode": "dual" if config.dual else "single",
            "feed_id": config.feed_id,
            "quote_feed_id": config.quote_feed_id,
            "max_age": config.max_age,
            "decimal_difference": config.decimal_difference,
            "invert": config.invert,
        },
    )
    return adapter
