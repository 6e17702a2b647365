"""
Client Douban pour la recherche de notes.

L'acces a l'API Douban est restreint : sans cle configuree, le client reste
inactif et find_rating() retourne None. La note n'est qu'un complement,
une erreur reseau est donc journalisee mais jamais propagee.
"""

from typing import Optional

import httpx
from loguru import logger

from src.adapters.api.retry import RateLimitError, TransientAPIError, request_with_retry
from src.core.value_objects import ContentType


class DoubanClient:
    """Recherche de la note Douban d'un film ou d'une serie par titre."""

    DOUBAN_BASE_URL = "https://api.douban.com/v2"

    def __init__(self, api_key: Optional[str]) -> None:
        self._api_key = api_key
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.DOUBAN_BASE_URL,
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=15.0,
            )
        return self._client

    async def search(self, query: str, content_type: ContentType, limit: int = 5) -> list[dict]:
        """Resultats bruts de la recherche Douban (liste 'subjects')."""
        response = await request_with_retry(
            self._get_client(),
            "GET",
            f"/{content_type.value}/search",
            max_attempts=3,
            params={"q": query, "count": limit},
        )
        return response.json().get("subjects", [])

    @staticmethod
    def _matches(title: str, subject: dict) -> bool:
        wanted = title.lower()
        candidates = [
            (subject.get("title") or "").lower(),
            (subject.get("original_title") or "").lower(),
        ]
        return any(c and (wanted in c or c in wanted) for c in candidates)

    async def find_rating(self, title: str, content_type: ContentType) -> Optional[float]:
        """
        Note Douban (0-10) du premier resultat correspondant au titre.

        Retourne None si le client est inactif, si rien ne correspond
        ou si l'API est injoignable.
        """
        if not self.enabled:
            logger.debug("Douban non configure, note ignoree", title=title)
            return None

        try:
            subjects = await self.search(title, content_type)
        except (httpx.HTTPError, RateLimitError, TransientAPIError) as e:
            logger.warning("Recherche Douban impossible", title=title, error=str(e))
            return None

        for subject in subjects:
            if self._matches(title, subject):
                average = (subject.get("rating") or {}).get("average")
                return float(average) if average else None
        return None

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
