"""Tests for Scryfall catalog lookups."""

import httpx
import pytest
import respx

from bindery.models.failure import CatalogError, NotFoundError
from bindery.services.scryfall import ScryfallClient, extract_price_usd

CARD_URL = "https://api.scryfall.com/cards/abc-123"


@pytest.fixture
def catalog() -> ScryfallClient:
    return ScryfallClient(base_url="https://api.scryfall.com/", timeout=5.0)


class TestExtractPrice:
    def test_prefers_non_foil(self) -> None:
        card = {"prices": {"usd": "1.50", "usd_foil": "9.99"}}

        assert extract_price_usd(card) == 1.5

    def test_falls_back_to_foil_then_etched(self) -> None:
        assert extract_price_usd({"prices": {"usd": None, "usd_foil": "4.00"}}) == 4.0
        assert extract_price_usd({"prices": {"usd": None, "usd_etched": "7.25"}}) == 7.25

    def test_no_price(self) -> None:
        assert extract_price_usd({"prices": {"usd": None, "eur": "1.00"}}) is None
        assert extract_price_usd({}) is None

    def test_unparseable_price_skipped(self) -> None:
        card = {"id": "x", "prices": {"usd": "n/a", "usd_foil": "2.00"}}

        assert extract_price_usd(card) == 2.0


class TestScryfallClient:
    @respx.mock
    async def test_fetch_card(self, catalog: ScryfallClient) -> None:
        route = respx.get(CARD_URL).mock(
            return_value=httpx.Response(200, json={"id": "abc-123", "name": "Opt"})
        )

        card = await catalog.fetch_card("abc-123")

        assert card["name"] == "Opt"
        assert route.called
        assert route.calls.last.request.headers["User-Agent"] == "Bindery/1.0"

    @respx.mock
    async def test_fetch_price(self, catalog: ScryfallClient) -> None:
        respx.get(CARD_URL).mock(
            return_value=httpx.Response(200, json={"id": "abc-123", "prices": {"usd": "0.25"}})
        )

        assert await catalog.fetch_price_usd("abc-123") == 0.25

    @respx.mock
    async def test_unknown_card_is_not_found(self, catalog: ScryfallClient) -> None:
        respx.get(CARD_URL).mock(return_value=httpx.Response(404, json={"object": "error"}))

        with pytest.raises(NotFoundError):
            await catalog.fetch_card("abc-123")

    @respx.mock
    async def test_server_error_is_catalog_error(self, catalog: ScryfallClient) -> None:
        respx.get(CARD_URL).mock(return_value=httpx.Response(503))

        with pytest.raises(CatalogError) as exc_info:
            await catalog.fetch_card("abc-123")

        assert exc_info.value.retryable is True
        assert exc_info.value.status_code == 502

    @respx.mock
    async def test_timeout_is_catalog_error(self, catalog: ScryfallClient) -> None:
        respx.get(CARD_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(CatalogError):
            await catalog.fetch_card("abc-123")

    @respx.mock
    async def test_invalid_json_is_catalog_error(self, catalog: ScryfallClient) -> None:
        respx.get(CARD_URL).mock(return_value=httpx.Response(200, content=b"<html>"))

        with pytest.raises(CatalogError, match="invalid data"):
            await catalog.fetch_card("abc-123")

    @respx.mock
    async def test_id_is_escaped_into_one_path_segment(self, catalog: ScryfallClient) -> None:
        route = respx.get(host="api.scryfall.com").mock(
            return_value=httpx.Response(200, json={"id": "x", "name": "Opt"})
        )

        await catalog.fetch_card("../sets/khm?page=2")

        request = route.calls.last.request
        assert request.url.raw_path == b"/cards/..%2Fsets%2Fkhm%3Fpage%3D2"
        assert request.url.query == b""
