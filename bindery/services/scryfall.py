"""Card catalog lookups against the Scryfall API.

Only used to refresh prices of cards already placed in a binder.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from bindery.config import settings
from bindery.models.failure import CatalogError, NotFoundError

logger = logging.getLogger(__name__)

_USER_AGENT = "Bindery/1.0"

# Checked in order; the first printing finish with a price wins
_PRICE_KEYS = ("usd", "usd_foil", "usd_etched")


def extract_price_usd(card: dict[str, Any]) -> float | None:
    """Pick the USD price of a catalog card, preferring non-foil."""
    prices = card.get("prices") or {}
    for key in _PRICE_KEYS:
        raw = prices.get(key)
        if raw:
            try:
                return float(raw)
            except (TypeError, ValueError):
                logger.warning("Unparseable %s price %r for %s", key, raw, card.get("id"))
    return None


class ScryfallClient:
    """Async client for single-card lookups."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        self.base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.scryfall_timeout

    async def fetch_card(self, scryfall_id: str) -> dict[str, Any]:
        """
        Fetch one card by Scryfall id.

        Raises:
            NotFoundError: Catalog has no card with this id
            CatalogError: Request failed or returned garbage
        """
        # ids come from stored rows; keep them inside a single path segment
        segment = quote(scryfall_id, safe="")
        url = f"{self.base_url}/cards/{segment}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, headers={"User-Agent": _USER_AGENT}
            ) as client:
                response = await client.get(url)
                if response.status_code == 404:
                    raise NotFoundError("Catalog card", scryfall_id)
                response.raise_for_status()
                data: dict[str, Any] = response.json()
        except httpx.HTTPError as e:
            logger.error("Catalog lookup for %s failed: %s", scryfall_id, e)
            raise CatalogError("Card catalog is unavailable", detail=str(e)) from e
        except ValueError as e:
            raise CatalogError("Card catalog returned invalid data", detail=str(e)) from e

        return data

    async def fetch_price_usd(self, scryfall_id: str) -> float | None:
        card = await self.fetch_card(scryfall_id)
        return extract_price_usd(card)


def get_catalog_client() -> ScryfallClient:
    """FastAPI dependency for the catalog client."""
    return ScryfallClient()
