"""
Client TMDB pour la recherche et la recuperation de metadonnees.

Implemente IMetadataClient pour les films et les series. Toutes les
requetes passent par le cache disque puis par request_with_retry.

Usage:
    cache = APICache()
    client = TMDBClient(api_key="your_key", cache=cache, language="zh-CN")
    results = await client.search("Inception", ContentType.MOVIE)
    details = await client.get_details(ContentType.MOVIE, 27205)
    await client.close()
"""

from typing import Any, Optional

import httpx

from src.adapters.api.cache import APICache
from src.adapters.api.retry import request_with_retry
from src.core.exceptions import ServiceUnavailableError
from src.core.ports.api_clients import (
    CastCredit,
    ContentDetails,
    IMetadataClient,
    PersonDetails,
    SearchResult,
)
from src.core.value_objects import ContentType


def _none_if_empty(value: Any) -> Any:
    """TMDB renvoie souvent "" a la place de null (dates, chemins)."""
    return value if value not in ("", None) else None


class TMDBClient(IMetadataClient):
    """
    Client API TMDB.

    Attributes:
        TMDB_BASE_URL: URL de base de l'API TMDB v3
        TMDB_IMAGE_BASE_URL: URL de base des images, a completer par taille et chemin
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"

    def __init__(
        self,
        api_key: Optional[str],
        cache: APICache,
        language: str = "zh-CN",
    ) -> None:
        """
        Initialise le client TMDB.

        Args:
            api_key: Cle API v3 ou jeton de lecture v4 (None : client inactif)
            cache: Cache des reponses
            language: Langue des metadonnees demandees a TMDB
        """
        self._api_key = api_key
        self._cache = cache
        self._language = language
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    @property
    def language(self) -> str:
        return self._language

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, le cree si necessaire (lazy init).

        Deux modes d'authentification :
        - cle API v3 (32 caracteres) : parametre api_key
        - jeton de lecture v4 (long JWT) : en-tete Bearer
        """
        if not self._api_key:
            raise ServiceUnavailableError("TMDB API key is not configured")

        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            params = {}
            if len(self._api_key) > 40:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=self.TMDB_BASE_URL,
                headers=headers,
                params=params,
                timeout=30.0,
            )
        return self._client

    async def _get_json(self, path: str, **params) -> Optional[dict]:
        """GET sur l'API, None si la ressource n'existe pas (404)."""
        client = self._get_client()
        params.setdefault("language", self._language)
        try:
            response = await request_with_retry(client, "GET", path, params=params)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise
        return response.json()

    @classmethod
    def image_url(cls, path: Optional[str], size: str = "w500") -> Optional[str]:
        """URL complete d'une image TMDB (None si pas de chemin)."""
        if not path:
            return None
        return f"{cls.TMDB_IMAGE_BASE_URL}/{size}{path}"

    # ------------------------------------------------------------------
    # Recherche
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        content_type: ContentType,
        page: int = 1,
    ) -> list[SearchResult]:
        """Recherche des films ou des series par titre (cache 24h)."""
        cache_key = f"tmdb:{self._language}:search:{content_type.value}:{query}:{page}"

        async def fetch() -> list[SearchResult]:
            data = await self._get_json(
                f"/search/{content_type.value}",
                query=query,
                page=page,
                include_adult="false",
            )
            return [self._to_search_result(item, content_type) for item in (data or {}).get("results", [])]

        return await self._cache.get_or_fetch(cache_key, fetch, APICache.SEARCH_TTL)

    @staticmethod
    def _to_search_result(item: dict, content_type: ContentType) -> SearchResult:
        if content_type is ContentType.MOVIE:
            title, original, date = item.get("title"), item.get("original_title"), item.get("release_date")
        else:
            title, original, date = item.get("name"), item.get("original_name"), item.get("first_air_date")
        return SearchResult(
            tmdb_id=item["id"],
            title=title or original or "",
            original_title=original,
            date=_none_if_empty(date),
            overview=_none_if_empty(item.get("overview")),
            poster_path=_none_if_empty(item.get("poster_path")),
            rating=item.get("vote_average"),
            content_type=content_type,
        )

    # ------------------------------------------------------------------
    # Fiches
    # ------------------------------------------------------------------

    async def get_details(
        self, content_type: ContentType, tmdb_id: int
    ) -> Optional[ContentDetails]:
        """Fiche detaillee d'un film ou d'une serie (cache 7 jours)."""
        cache_key = f"tmdb:{self._language}:details:{content_type.value}:{tmdb_id}"

        async def fetch() -> Optional[ContentDetails]:
            if content_type is ContentType.MOVIE:
                data = await self._get_json(f"/movie/{tmdb_id}")
                return self._to_movie_details(data) if data else None
            data = await self._get_json(f"/tv/{tmdb_id}", append_to_response="external_ids")
            return self._to_tv_details(data) if data else None

        return await self._cache.get_or_fetch(cache_key, fetch, APICache.DETAILS_TTL)

    async def refresh_details(
        self, content_type: ContentType, tmdb_id: int
    ) -> Optional[ContentDetails]:
        """Comme get_details, mais ignore la version en cache."""
        await self._cache.delete(f"tmdb:{self._language}:details:{content_type.value}:{tmdb_id}")
        return await self.get_details(content_type, tmdb_id)

    @staticmethod
    def _genre_names(data: dict) -> tuple[str, ...]:
        return tuple(g["name"] for g in data.get("genres", []) if g.get("name"))

    def _to_movie_details(self, data: dict) -> ContentDetails:
        return ContentDetails(
            tmdb_id=data["id"],
            content_type=ContentType.MOVIE,
            title=data.get("title") or data.get("original_title") or "",
            original_title=_none_if_empty(data.get("original_title")),
            overview=_none_if_empty(data.get("overview")),
            date=_none_if_empty(data.get("release_date")),
            runtime=data.get("runtime") or None,
            genres=self._genre_names(data),
            poster_path=_none_if_empty(data.get("poster_path")),
            backdrop_path=_none_if_empty(data.get("backdrop_path")),
            imdb_id=_none_if_empty(data.get("imdb_id")),
            vote_average=data.get("vote_average"),
        )

    def _to_tv_details(self, data: dict) -> ContentDetails:
        external_ids = data.get("external_ids") or {}
        return ContentDetails(
            tmdb_id=data["id"],
            content_type=ContentType.TV,
            title=data.get("name") or data.get("original_name") or "",
            original_title=_none_if_empty(data.get("original_name")),
            overview=_none_if_empty(data.get("overview")),
            date=_none_if_empty(data.get("first_air_date")),
            last_date=_none_if_empty(data.get("last_air_date")),
            number_of_seasons=data.get("number_of_seasons"),
            number_of_episodes=data.get("number_of_episodes"),
            genres=self._genre_names(data),
            poster_path=_none_if_empty(data.get("poster_path")),
            backdrop_path=_none_if_empty(data.get("backdrop_path")),
            imdb_id=_none_if_empty(external_ids.get("imdb_id")),
            vote_average=data.get("vote_average"),
        )

    async def get_credits(
        self, content_type: ContentType, tmdb_id: int
    ) -> list[CastCredit]:
        """Distribution d'un contenu, triee par ordre du generique."""
        cache_key = f"tmdb:{self._language}:credits:{content_type.value}:{tmdb_id}"

        async def fetch() -> list[CastCredit]:
            data = await self._get_json(f"/{content_type.value}/{tmdb_id}/credits")
            cast = [
                CastCredit(
                    tmdb_id=member["id"],
                    name=member.get("name") or member.get("original_name") or "",
                    original_name=_none_if_empty(member.get("original_name")),
                    character=_none_if_empty(member.get("character")),
                    order=member.get("order", index),
                    profile_path=_none_if_empty(member.get("profile_path")),
                    gender=member.get("gender"),
                )
                for index, member in enumerate((data or {}).get("cast", []))
            ]
            return sorted(cast, key=lambda c: c.order)

        return await self._cache.get_or_fetch(cache_key, fetch, APICache.DETAILS_TTL)

    async def get_person(self, tmdb_id: int) -> Optional[PersonDetails]:
        """Fiche d'une personne (cache 7 jours)."""
        cache_key = f"tmdb:{self._language}:person:{tmdb_id}"

        async def fetch() -> Optional[PersonDetails]:
            data = await self._get_json(f"/person/{tmdb_id}")
            if not data:
                return None
            return PersonDetails(
                tmdb_id=data["id"],
                name=data.get("name") or "",
                biography=_none_if_empty(data.get("biography")),
                birthday=_none_if_empty(data.get("birthday")),
                deathday=_none_if_empty(data.get("deathday")),
                gender=data.get("gender"),
                profile_path=_none_if_empty(data.get("profile_path")),
            )

        return await self._cache.get_or_fetch(cache_key, fetch, APICache.DETAILS_TTL)

    async def get_genres(self, content_type: ContentType) -> list[str]:
        """Noms des genres TMDB pour un type de contenu."""
        cache_key = f"tmdb:{self._language}:genres:{content_type.value}"

        async def fetch() -> list[str]:
            data = await self._get_json(f"/genre/{content_type.value}/list")
            return [g["name"] for g in (data or {}).get("genres", []) if g.get("name")]

        return await self._cache.get_or_fetch(cache_key, fetch, APICache.DETAILS_TTL)

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
