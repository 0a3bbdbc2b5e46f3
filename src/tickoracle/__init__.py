"""
tickoracle - Uniswap V3 style pool oracle backed by push price feeds.

Translates mantissa/exponent price samples into the slot0 / observe surface a
concentrated-liquidity pool consumer expects:
- Staleness-checked ingestion from Pyth Hermes or an in-process feed
- Q128 price normalization with decimal-scale reconciliation
- Cross prices from two feeds sharing a quote asset
- Bounded-error price -> tick conversion
- Synthetic, always-consistent observation history for TWAP readers
"""

from .config import AdapterConfig, MarketAdjustment, StalenessPolicy
from .exceptions import (
    ConfigurationError,
    FeedError,
    FeedUnavailableError,
    InvalidPriceError,
    ObservationIndexError,
    OracleAdapterError,
    PriceMathError,
    ScaleOverflowError,
    StaleFeedError,
    TickOutOfRangeError,
)
from .feeds import HermesPriceFeed, InMemoryPriceFeed, PriceFeed, PriceSample
from .oracle import (
    DualFeedOracleAdapter,
    PriceOracleAdapter,
    SingleFeedOracleAdapter,
    consult,
    create_adapter,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "AdapterConfig",
    "MarketAdjustment",
    "StalenessPolicy",
    # Feeds
    "PriceFeed",
    "PriceSample",
    "HermesPriceFeed",
    "InMemoryPriceFeed",
    # Adapters
    "PriceOracleAdapter",
    "SingleFeedOracleAdapter",
    "DualFeedOracleAdapter",
    "create_adapter",
    "consult",
    # Errors
    "OracleAdapterError",
    "ConfigurationError",
    "FeedError",
    "StaleFeedError",
    "InvalidPriceError",
    "FeedUnavailableError",
    "PriceMathError",
    "ScaleOverflowError",
    "TickOutOfRangeError",
    "ObservationIndexError",
]
