"""
Tests unitaires pour DoubanClient.

La note Douban est un complement : sans cle, sans correspondance ou en cas
d'erreur, find_rating() retourne None sans lever d'exception.
"""

import httpx
import pytest
import respx

from src.adapters.api.douban_client import DoubanClient
from src.core.value_objects import ContentType

API = "https://api.douban.com/v2"

SEARCH_RESPONSE = {
    "count": 2,
    "subjects": [
        {"id": "1", "title": "盗梦空间 幕后", "original_title": "", "rating": {"average": 0}},
        {"id": "3541415", "title": "盗梦空间", "original_title": "Inception", "rating": {"average": 9.4}},
    ],
}


@pytest.fixture
def douban_client() -> DoubanClient:
    return DoubanClient(api_key="douban-key")


class TestDoubanClient:
    """Tests pour DoubanClient.find_rating()."""

    @pytest.mark.asyncio
    async def test_disabled_without_key(self) -> None:
        """Sans cle, aucune requete n'est faite."""
        client = DoubanClient(api_key=None)
        assert not client.enabled
        assert await client.find_rating("盗梦空间", ContentType.MOVIE) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_returns_rating_of_first_match(self, douban_client: DoubanClient) -> None:
        """La note du premier resultat correspondant au titre est retenue."""
        route = respx.get(f"{API}/movie/search").mock(
            return_value=httpx.Response(200, json=SEARCH_RESPONSE)
        )

        rating = await douban_client.find_rating("Inception", ContentType.MOVIE)

        assert rating == 9.4
        assert route.calls.last.request.url.params["q"] == "Inception"
        await douban_client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_zero_average_gives_none(self, douban_client: DoubanClient) -> None:
        """Une note 0 (pas assez de votes) est ignoree."""
        respx.get(f"{API}/movie/search").mock(
            return_value=httpx.Response(200, json=SEARCH_RESPONSE)
        )

        assert await douban_client.find_rating("幕后", ContentType.MOVIE) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_match_returns_none(self, douban_client: DoubanClient) -> None:
        respx.get(f"{API}/tv/search").mock(
            return_value=httpx.Response(200, json={"subjects": []})
        )

        assert await douban_client.find_rating("绝命毒师", ContentType.TV) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_returns_none(self, douban_client: DoubanClient) -> None:
        """Une erreur HTTP est journalisee, pas propagee."""
        respx.get(f"{API}/movie/search").mock(return_value=httpx.Response(403))

        assert await douban_client.find_rating("盗梦空间", ContentType.MOVIE) is None
