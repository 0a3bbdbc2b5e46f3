"""Price math: fixed-point normalization, tick conversion and synthetic history."""

from .fixed_point import MAX_RATIO_X128, Q128, combine_samples, normalize_sample
from .history import (
    OBSERVATION_INDEX,
    OBSERVATION_RING_SIZE,
    Observation,
    ObserveResult,
    Slot0,
    synthetic_observation,
    synthetic_observe,
    synthetic_slot0,
)
from .tick_math import (
    DEFAULT_TICK_PRECISION,
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    Q96,
    invert_tick,
    log2_x64,
    ratio_to_tick,
    sqrt_price_to_tick,
    tick_to_sqrt_price,
)

__all__ = [
    "Q128",
    "Q96",
    "MAX_RATIO_X128",
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
    "DEFAULT_TICK_PRECISION",
    "OBSERVATION_RING_SIZE",
    "OBSERVATION_INDEX",
    "normalize_sample",
    "combine_samples",
    "log2_x64",
    "ratio_to_tick",
    "invert_tick",
    "tick_to_sqrt_price",
    "sqrt_price_to_tick",
    "Slot0",
    "Observation",
    "ObserveResult",
    "synthetic_slot0",
    "synthetic_observation",
    "synthetic_observe",
]
