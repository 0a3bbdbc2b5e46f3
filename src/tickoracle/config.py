"""
tickoracle configuration

Construction-time settings for an adapter. Values are validated once and held
in frozen dataclasses for the adapter's lifetime; nothing here is mutated
after an adapter is built.

Settings may come from keyword arguments, from environment variables
(``TICKORACLE_*``) or from a YAML mapping with the same keys in lowercase.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "TICKORACLE_"

DEFAULT_MAX_AGE = int(os.getenv("TICKORACLE_DEFAULT_MAX_AGE", "60"))
DEFAULT_HERMES_URL = os.getenv("TICKORACLE_HERMES_URL", "https://hermes.pyth.network")
DEFAULT_HTTP_TIMEOUT = float(os.getenv("TICKORACLE_HTTP_TIMEOUT", "10"))

# decimal_difference is stored as an int8 by the consumers of this adapter
MIN_DECIMAL_DIFFERENCE = -128
MAX_DECIMAL_DIFFERENCE = 127

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{key} must be a boolean, got {value!r}")


def _parse_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}") from exc


@dataclass(frozen=True)
class StalenessPolicy:
    """Maximum tolerated sample age in seconds."""

    max_age: int

    def __post_init__(self) -> None:
        if isinstance(self.max_age, bool) or not isinstance(self.max_age, int):
            raise ConfigurationError("max_age must be an integer number of seconds")
        if self.max_age < 0:
            raise ConfigurationError("max_age must be non-negative")


@dataclass(frozen=True)
class MarketAdjustment:
    """
    Decimal-scale reconciliation between a human-unit feed and a raw-unit market.

    decimal_difference is token1 decimals minus token0 decimals of the target
    market. A positive value multiplies the feed ratio by 10**decimal_difference,
    a negative one divides it. ``invert`` only applies in single-feed mode.
    """

    decimal_difference: int = 0
    invert: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.decimal_difference, bool) or not isinstance(self.decimal_difference, int):
            raise ConfigurationError("decimal_difference must be an integer")
        if not MIN_DECIMAL_DIFFERENCE <= self.decimal_difference <= MAX_DECIMAL_DIFFERENCE:
            raise ConfigurationError(
                f"decimal_difference must be within [{MIN_DECIMAL_DIFFERENCE}, "
                f"{MAX_DECIMAL_DIFFERENCE}], got {self.decimal_difference}"
            )

    @classmethod
    def from_token_decimals(
        cls, token0_decimals: int, token1_decimals: int, invert: bool = False
    ) -> "MarketAdjustment":
        """Build an adjustment from the target market's token decimals."""
        for name, value in (("token0_decimals", token0_decimals), ("token1_decimals", token1_decimals)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigurationError(f"{name} must be a non-negative integer")
        return cls(decimal_difference=token1_decimals - token0_decimals, invert=invert)


@dataclass(frozen=True)
class AdapterConfig:
    """
    Immutable adapter configuration.

    A ``quote_feed_id`` selects dual-feed mode: the adapter then reports the
    cross price feed_id / quote_feed_id. Reciprocal orientation in dual-feed
    mode is obtained by swapping the two ids, so ``invert`` is rejected there.
    """

    feed_id: str
    quote_feed_id: Optional[str] = None
    max_age: int = DEFAULT_MAX_AGE
    decimal_difference: int = 0
    invert: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.feed_id, str) or not self.feed_id.strip():
            raise ConfigurationError("feed_id is required")
        object.__setattr__(self, "feed_id", self.feed_id.strip())

        if self.quote_feed_id is not None:
            if not isinstance(self.quote_feed_id, str) or not self.quote_feed_id.strip():
                raise ConfigurationError("quote_feed_id must be a non-empty string when set")
            object.__setattr__(self, "quote_feed_id", self.quote_feed_id.strip())
            if self.quote_feed_id.lower() == self.feed_id.lower():
                raise ConfigurationError("feed_id and quote_feed_id must differ")
            if self.invert:
                raise ConfigurationError(
                    "invert is not supported in dual-feed mode; swap feed_id and quote_feed_id instead"
                )

        # Run the component validators so errors surface at construction time
        StalenessPolicy(self.max_age)
        MarketAdjustment(self.decimal_difference, self.invert)

    @property
    def dual(self) -> bool:
        return self.quote_feed_id is not None

    @property
    def staleness(self) -> StalenessPolicy:
        return StalenessPolicy(self.max_age)

    @property
    def adjustment(self) -> MarketAdjustment:
        return MarketAdjustment(self.decimal_difference, self.invert)

    # ==================== Loaders ====================

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AdapterConfig":
        """Build a config from a mapping using lowercase keys."""
        if not isinstance(data, Mapping):
            raise ConfigurationError("configuration must be a mapping")

        known = {"feed_id", "quote_feed_id", "max_age", "decimal_difference", "invert"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"unknown configuration keys: {', '.join(sorted(unknown))}")

        feed_id = data.get("feed_id")
        if feed_id is None:
            raise ConfigurationError("feed_id is required")
        quote_feed_id = data.get("quote_feed_id") or None

        return cls(
            feed_id=str(feed_id),
            quote_feed_id=str(quote_feed_id) if quote_feed_id is not None else None,
            max_age=_parse_int(data.get("max_age", DEFAULT_MAX_AGE), "max_age"),
            decimal_difference=_parse_int(data.get("decimal_difference", 0), "decimal_difference"),
            invert=_parse_bool(data.get("invert", False), "invert"),
        )

    @classmethod
    def from_env(
        cls, prefix: str = ENV_PREFIX, environ: Optional[Mapping[str, str]] = None
    ) -> "AdapterConfig":
        """Read ``<prefix>FEED_ID``, ``QUOTE_FEED_ID``, ``MAX_AGE``,
        ``DECIMAL_DIFFERENCE`` and ``INVERT`` from the environment."""
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        for key in ("feed_id", "quote_feed_id", "max_age", "decimal_difference", "invert"):
            value = env.get(f"{prefix}{key.upper()}", "").strip()
            if value:
                data[key] = value

        config = cls.from_mapping(data)
        logger.debug(
            "Adapter configuration loaded from environment",
            extra={"event": "config.loaded", "source": "env", "dual": config.dual},
        )
        return config

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AdapterConfig":
        """Load a config from a YAML file holding a single mapping."""
        config_path = Path(path)
        try:
            with config_path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle)
        except OSError as exc:
            raise ConfigurationError(f"cannot read configuration file {config_path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"invalid YAML in {config_path}: {exc}") from exc

        config = cls.from_mapping(data or {})
        logger.debug(
            "Adapter configuration loaded from file",
            extra={"event": "config.loaded", "source": str(config_path), "dual": config.dual},
        )
        return config
