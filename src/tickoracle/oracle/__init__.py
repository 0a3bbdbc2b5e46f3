"""Pool-oracle adapters over push-style price feeds."""

from .adapter import (
    DualFeedOracleAdapter,
    PriceOracleAdapter,
    SingleFeedOracleAdapter,
    create_adapter,
)
from .twap import consult, consult_price

__all__ = [
    "PriceOracleAdapter",
    "SingleFeedOracleAdapter",
    "DualFeedOracleAdapter",
    "create_adapter",
    "consult",
    "consult_price",
]
