"""
External price-feed collaborators.

A feed exposes ``fetch_current_prices()`` returning a list of
``{"metal_type", "purity", "rate_per_gram"}`` dicts at current market price,
and raises UpstreamUnavailableError on any failure.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests

from suvarna.core.config import settings
from suvarna.core.errors import UpstreamUnavailableError
from suvarna.core.money import round_money, to_decimal

logger = logging.getLogger(__name__)

# Fixed quotations used when no market-data URL is configured
STATIC_RATES = [
    {"metal_type": "gold", "purity": "24K", "rate_per_gram": Decimal("6500")},
    {"metal_type": "gold", "purity": "22K", "rate_per_gram": Decimal("6000")},
    {"metal_type": "gold", "purity": "18K", "rate_per_gram": Decimal("5000")},
    {"metal_type": "silver", "purity": "Standard", "rate_per_gram": Decimal("80")},
    {"metal_type": "silver", "purity": "Sterling", "rate_per_gram": Decimal("85")},
]


class StaticRateFeed:
    def __init__(self, rates: Optional[List[Dict[str, Any]]] = None):
        self._rates = [dict(r) for r in (rates if rates is not None else STATIC_RATES)]

    def fetch_current_prices(self) -> List[Dict[str, Any]]:
        return [dict(r) for r in self._rates]


class HttpRateFeed:
    def __init__(self, url: str, api_key: Optional[str] = None, timeout: float = 10.0):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def fetch_current_prices(self) -> List[Dict[str, Any]]:
        try:
            response = requests.get(self.url, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout as exc:
            raise UpstreamUnavailableError(f"Price feed timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise UpstreamUnavailableError(f"Price feed request failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamUnavailableError("Price feed returned invalid JSON") from exc

        return parse_feed_payload(payload)


def parse_feed_payload(payload: Any) -> List[Dict[str, Any]]:
    """Accept ``{"rates": [...]}`` or a bare list; rates are rounded to 2 places"""
    rows = payload.get("rates") if isinstance(payload, dict) else payload
    if not isinstance(rows, list):
        raise UpstreamUnavailableError("Price feed payload has no rate list")

    rates = []
    for row in rows:
        if not isinstance(row, dict):
            raise UpstreamUnavailableError(f"Price feed row is not an object: {row!r}")
        try:
            metal_type = row.get("metal_type", row.get("metalType"))
            purity = row["purity"]
            raw_rate = row.get("rate_per_gram", row.get("ratePerGram"))
            rate = round_money(to_decimal(raw_rate, field="rate_per_gram"))
        except (KeyError, ValueError) as exc:
            raise UpstreamUnavailableError(f"Price feed row is malformed: {row!r}") from exc
        rates.append({"metal_type": metal_type, "purity": purity, "rate_per_gram": rate})
    return rates


def default_feed():
    if settings.uses_static_feed:
        logger.info("no rate feed URL configured, using static quotations")
        return StaticRateFeed()
    return HttpRateFeed(
        settings.rate_feed_url,
        api_key=settings.rate_feed_api_key,
        timeout=settings.rate_feed_timeout_seconds,
    )
