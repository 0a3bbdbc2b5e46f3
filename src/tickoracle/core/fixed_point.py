"""
Fixed-point price normalization.

Turns mantissa/exponent samples into Q128 ratios (128 fractional bits) in the
target market's raw-unit convention. The decimal adjustment reconciles a feed
quoted in whole-token units with a market whose tokens have different
decimals: a positive decimal_difference multiplies the ratio by
10**decimal_difference, a negative one divides it.

Each ratio is produced by a single floor division of exact integers, so the
only rounding is the final truncation to 128 fractional bits.
"""

from __future__ import annotations

import logging

from ..exceptions import InvalidPriceError, ScaleOverflowError
from ..feeds.base import PriceSample

logger = logging.getLogger(__name__)

RESOLUTION = 128
Q128 = 1 << RESOLUTION

# Ratios live in the open interval (0, 2**128) in real terms
MAX_RATIO_X128 = 1 << 256


def _scaled_ratio(numerator: int, denominator: int, scale: int) -> int:
    """
    Return floor(numerator / denominator * 10**scale * 2**128).

    Raises:
        ScaleOverflowError: if the result is zero or not below 2**256
    """
    if scale >= 0:
        # 10**scale > 2**(3*scale), so past this point the ratio cannot fit
        if 3 * scale > 256 + denominator.bit_length():
            raise ScaleOverflowError(
                f"Decimal scale 10^{scale} overflows the Q128 price range",
                details={"scale": scale},
            )
        ratio = numerator * Q128 * 10**scale // denominator
    else:
        # Same bound from below: the quotient is already zero
        if -3 * scale >= numerator.bit_length() + RESOLUTION:
            raise ScaleOverflowError(
                f"Decimal scale 10^{scale} underflows the Q128 price range",
                details={"scale": scale},
            )
        ratio = numerator * Q128 // (denominator * 10**-scale)

    if ratio == 0:
        raise ScaleOverflowError(
            f"Price ratio underflows to zero at decimal scale 10^{scale}",
            details={"scale": scale},
        )
    if ratio >= MAX_RATIO_X128:
        raise ScaleOverflowError(
            f"Price ratio overflows the Q128 range at decimal scale 10^{scale}",
            details={"scale": scale},
        )
    return ratio


def _require_positive(label: str, mantissa: int) -> None:
    if mantissa <= 0:
        raise InvalidPriceError(label, mantissa)


def normalize_sample(sample: PriceSample, decimal_difference: int = 0, label: str = "price") -> int:
    """
    Q128 ratio of a single sample after the decimal adjustment.

    The effective scale exponent is ``sample.exponent + decimal_difference``.
    """
    _require_positive(label, sample.mantissa)
    scale = sample.exponent + decimal_difference
    ratio = _scaled_ratio(sample.mantissa, 1, scale)
    logger.debug(
        "Normalized price sample",
        extra={"event": "price.normalized", "feed": label, "scale": scale},
    )
    return ratio


def combine_samples(
    numerator: PriceSample,
    denominator: PriceSample,
    decimal_difference: int = 0,
) -> int:
    """
    Q128 cross ratio numerator / denominator of two samples sharing a quote asset.

    The effective scale exponent is
    ``numerator.exponent - denominator.exponent + decimal_difference``.
    """
    _require_positive("numerator", numerator.mantissa)
    _require_positive("denominator", denominator.mantissa)
    scale = numerator.exponent - denominator.exponent + decimal_difference
    ratio = _scaled_ratio(numerator.mantissa, denominator.mantissa, scale)
    logger.debug(
        "Combined price samples",
        extra={"event": "price.combined", "scale": scale},
    )
    return ratio
