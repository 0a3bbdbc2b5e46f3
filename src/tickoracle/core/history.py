"""
Synthetic observation history.

A pool oracle keeps a ring of (timestamp, tickCumulative) observations and
consumers derive a TWAP as the slope between two of them. The adapter has no
trade history, so every observation is generated on demand from the current
tick alone: tickCumulative = tick * timestamp. Any two observations taken
with the same tick therefore have a slope of exactly that tick, and every
TWAP window a consumer asks for resolves to the current price.

Nothing is stored. Index and age queries are pure functions of
(tick, index or age, now).
"""

from __future__ import annotations

from typing import NamedTuple, Sequence

from ..exceptions import ObservationIndexError

# Consumers treat the ring as full: the latest observation always sits in the
# last slot of a 65535-slot ring.
OBSERVATION_RING_SIZE = 65535
OBSERVATION_INDEX = OBSERVATION_RING_SIZE - 1


class Slot0(NamedTuple):
    sqrt_price_x96: int
    tick: int
    observation_index: int
    observation_cardinality: int
    observation_cardinality_next: int
    fee_protocol: int
    unlocked: bool


class Observation(NamedTuple):
    block_timestamp: int
    tick_cumulative: int
    seconds_per_liquidity_cumulative_x128: int
    initialized: bool


class ObserveResult(NamedTuple):
    tick_cumulatives: list[int]
    seconds_per_liquidity_cumulative_x128s: list[int]


def synthetic_slot0(tick: int, sqrt_price_x96: int) -> Slot0:
    return Slot0(
        sqrt_price_x96=sqrt_price_x96,
        tick=tick,
        observation_index=OBSERVATION_INDEX,
        observation_cardinality=OBSERVATION_RING_SIZE,
        observation_cardinality_next=OBSERVATION_RING_SIZE,
        fee_protocol=0,
        unlocked=True,
    )


def observation_timestamp(index: int, now: int) -> int:
    """Timestamp of ring slot ``index``; the last slot is ``now``."""
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError("observation index must be an integer")
    if not 0 <= index < OBSERVATION_RING_SIZE:
        raise ObservationIndexError(index, OBSERVATION_RING_SIZE)
    return now - OBSERVATION_INDEX + index


def synthetic_observation(tick: int, index: int, now: int) -> Observation:
    """Observation stored in slot ``index`` of a ring that only ever saw ``tick``."""
    timestamp = observation_timestamp(index, now)
    return Observation(
        block_timestamp=timestamp,
        tick_cumulative=tick * timestamp,
        seconds_per_liquidity_cumulative_x128=0,
        initialized=True,
    )


def synthetic_observe(tick: int, seconds_agos: Sequence[int], now: int) -> ObserveResult:
    """
    Cumulative ticks ``seconds_agos[i]`` seconds before ``now``, in input order.

    Ages have no upper bound: the synthetic ring reaches arbitrarily far back.
    """
    tick_cumulatives = []
    for age in seconds_agos:
        if isinstance(age, bool) or not isinstance(age, int):
            raise TypeError("observation ages must be integers")
        if age < 0:
            raise ValueError(f"observation age must be non-negative, got {age}")
        tick_cumulatives.append(tick * (now - age))

    return ObserveResult(
        tick_cumulatives=tick_cumulatives,
        seconds_per_liquidity_cumulative_x128s=[0] * len(tick_cumulatives),
    )
