"""
Pyth Hermes REST client.

Reads the latest aggregate price for a feed id from a Hermes-compatible
endpoint (``GET /v2/updates/price/latest``). Every call goes to the network;
the adapter never caches samples between queries.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from ..config import DEFAULT_HERMES_URL, DEFAULT_HTTP_TIMEOUT
from ..exceptions import FeedUnavailableError, StaleFeedError
from .base import PriceSample

logger = logging.getLogger(__name__)

LATEST_PRICE_PATH = "/v2/updates/price/latest"


def normalize_feed_id(feed_id: str) -> str:
    """Lowercase hex id without the ``0x`` prefix, as Hermes reports it."""
    normalized = (feed_id or "").strip().lower()
    if normalized.startswith("0x"):
        normalized = normalized[2:]
    return normalized


class HermesPriceFeed:
    """Client for Hermes price queries."""

    def __init__(
        self,
        base_url: str = DEFAULT_HERMES_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._clock = clock or time.time

    def _request(self, feed_id: str) -> Dict[str, Any]:
        url = f"{self.base_url}{LATEST_PRICE_PATH}"
        logger.debug("Hermes request: GET %s id=%s", url, feed_id)
        try:
            response = self.session.get(
                url,
                params={"ids[]": feed_id, "parsed": "true"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            logger.debug("Hermes response: status=%d", response.status_code)
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(
                "Hermes API error: %s",
                e,
                extra={"event": "feed.hermes.request_failed", "feed_id": feed_id},
            )
            raise FeedUnavailableError(
                f"Hermes API error: {e}", details={"feed_id": feed_id}
            ) from e
        except ValueError as e:
            raise FeedUnavailableError(
                "Hermes returned a non-JSON response", details={"feed_id": feed_id}
            ) from e

    def get_latest_price(self, feed_id: str) -> PriceSample:
        wanted = normalize_feed_id(feed_id)
        if not wanted:
            raise FeedUnavailableError("Empty feed id")
        payload = self._request(wanted)

        entries = payload.get("parsed") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            raise FeedUnavailableError(
                "Malformed Hermes response: missing parsed price list", details={"feed_id": feed_id}
            )
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            if normalize_feed_id(str(entry.get("id", ""))) != wanted:
                continue
            return self._parse_price(feed_id, entry.get("price"))

        raise FeedUnavailableError(
            f"Price feed {feed_id} not found in Hermes response", details={"feed_id": feed_id}
        )

    def get_price_no_older_than(self, feed_id: str, max_age: int) -> PriceSample:
        sample = self.get_latest_price(feed_id)
        age = sample.age(int(self._clock()))
        if age > max_age:
            raise StaleFeedError(feed_id, age, max_age)
        return sample

    @staticmethod
    def _parse_price(feed_id: str, price: Any) -> PriceSample:
        # Hermes encodes the int64 mantissa as a decimal string
        try:
            return PriceSample(
                mantissa=int(price["price"]),
                exponent=int(price["expo"]),
                publish_time=int(price["publish_time"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise FeedUnavailableError(
                f"Malformed price payload for feed {feed_id}", details={"feed_id": feed_id}
            ) from e
