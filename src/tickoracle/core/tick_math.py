"""
Tick math for Uniswap V3 style consumers.

Price representation:
- tick = log_1.0001(price), an integer bucket index
- sqrt price is Q64.96 (sqrt(price) * 2**96)

ratio_to_tick goes from a Q128 price ratio to a tick through a binary
logarithm refined bit by bit. tick_to_sqrt_price is the consumer's canonical
tick -> sqrt price mapping and is the only way the adapter produces a sqrt
price. The adapter therefore snaps the price to a tick first and derives the
sqrt price from that tick, so its sqrt price is coarser than a native pool's,
where the sqrt price is exact and the tick is derived from it.
"""

from __future__ import annotations

import logging

from ..exceptions import ScaleOverflowError, TickOutOfRangeError
from .fixed_point import MAX_RATIO_X128

logger = logging.getLogger(__name__)

# Constants
MIN_TICK = -887272
MAX_TICK = 887272
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

Q96 = 1 << 96
MAX_UINT256 = (1 << 256) - 1

# Fractional bits of the binary logarithm; at 13 bits the centred, rounded tick
# stays within 0.93 of the exact value
DEFAULT_TICK_PRECISION = 13
MAX_TICK_PRECISION = 64

# 2**64 / log2(1.0001), truncated
LOG2_TO_TICK = 127869479499801913173570

# 2**128 / sqrt(1.0001)**(2**i) for i = 0..19
_SQRT_RATIO_MULTIPLIERS = (
    (0x1, 340265354078544963557816517032075149313),
    (0x2, 340248342086729790484326174814286782778),
    (0x4, 340214320654664324051920982716015181260),
    (0x8, 340146287995602323631171512101879684304),
    (0x10, 340010263488231146823593991679159461444),
    (0x20, 339738377640345403697157401104375502016),
    (0x40, 339195258003219555707034227454543997025),
    (0x80, 338111622100601834656805679988414885971),
    (0x100, 335954724994790223023589805789778977700),
    (0x200, 331682121138379247127172139078559817300),
    (0x400, 323299236684853023288211250268160618739),
    (0x800, 307163716377032989948697243942600083929),
    (0x1000, 277268403626896220162999269216087595045),
    (0x2000, 225923453940442621947126027127485391333),
    (0x4000, 149997214084966997727330242082538205943),
    (0x8000, 66119101136024775622716233608466517926),
    (0x10000, 12847376061809297530290974190478138313),
    (0x20000, 485053260817066172746253684029974020),
    (0x40000, 691415978906521570653435304214168),
    (0x80000, 1404880482679654955896180642),
)


def most_significant_bit(x: int) -> int:
    """Index of the highest set bit of a positive integer."""
    if x <= 0:
        raise ValueError("most_significant_bit requires a positive integer")
    return x.bit_length() - 1


def log2_x64(ratio_x128: int, precision: int = DEFAULT_TICK_PRECISION) -> int:
    """
    Signed binary logarithm of a Q128 ratio as a Q64.64 number.

    The integer part comes from the most significant bit. The ratio is then
    normalized into [1, 2) and squared ``precision`` times; each square that
    reaches 2 contributes the next fractional bit, most significant first.
    The result is truncated toward negative infinity, so ratios below one give
    negative logarithms rather than absolute values.
    """
    if not 0 < ratio_x128 < MAX_RATIO_X128:
        raise ScaleOverflowError(
            "Price ratio outside (0, 2^128)", details={"ratio_x128": ratio_x128}
        )
    if not 1 <= precision <= MAX_TICK_PRECISION:
        raise ValueError(f"precision must be within [1, {MAX_TICK_PRECISION}]")

    msb = most_significant_bit(ratio_x128)

    # r is Q1.127 in [1, 2)
    if msb >= 128:
        r = ratio_x128 >> (msb - 127)
    else:
        r = ratio_x128 << (127 - msb)

    log_2 = (msb - 128) << 64

    bit = 1 << 63
    for _ in range(precision):
        r = (r * r) >> 127
        if r >> 128:
            r >>= 1
            log_2 |= bit
        bit >>= 1

    return log_2


def ratio_to_tick(ratio_x128: int, precision: int = DEFAULT_TICK_PRECISION) -> int:
    """
    Approximate log_1.0001 of a Q128 ratio, rounded to the nearest tick.

    The truncated logarithm is shifted to the middle of its last-bit interval
    before conversion, which keeps the result within 0.93 ticks of the exact
    value at the default precision.
    """
    log_2 = log2_x64(ratio_x128, precision)
    log_2 += (1 << 64) >> (precision + 1)

    # Q64.64 * (2**64 / log2(1.0001)) is log_1.0001 in Q128.128
    log_10001 = log_2 * LOG2_TO_TICK
    tick = (log_10001 + (1 << 127)) >> 128

    logger.debug(
        "Converted ratio to tick",
        extra={"event": "tick.converted", "tick": tick, "precision": precision},
    )
    return tick


def invert_tick(tick: int, invert: bool) -> int:
    """Express the tick for the reciprocal price when ``invert`` is set."""
    return -tick if invert else tick


def tick_to_sqrt_price(tick: int) -> int:
    """
    Convert tick to sqrt price in Q64.96 format.

    sqrt_price = 1.0001^(tick/2) * 2^96, rounded up. Matches the consumer's
    getSqrtRatioAtTick bit for bit.
    """
    abs_tick = abs(tick)
    if abs_tick > MAX_TICK:
        raise TickOutOfRangeError(tick)

    ratio = 1 << 128
    for bit, multiplier in _SQRT_RATIO_MULTIPLIERS:
        if abs_tick & bit:
            ratio = (ratio * multiplier) >> 128

    if tick > 0:
        ratio = MAX_UINT256 // ratio

    # Q128.128 -> Q64.96, rounding up
    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def sqrt_price_to_tick(sqrt_price: int) -> int:
    """
    Greatest tick whose sqrt price is <= ``sqrt_price``.

    tick = floor(log_1.0001(sqrt_price^2))
    """
    if sqrt_price < MIN_SQRT_RATIO or sqrt_price >= MAX_SQRT_RATIO:
        raise ScaleOverflowError("Sqrt price out of range", details={"sqrt_price": sqrt_price})

    low, high = MIN_TICK, MAX_TICK
    while low < high:
        mid = (low + high + 1) // 2
        if tick_to_sqrt_price(mid) <= sqrt_price:
            low = mid
        else:
            high = mid - 1
    return low


def tick_to_price(tick: int) -> float:
    """Convert tick to a floating point price (for display)."""
    return 1.0001 ** tick
