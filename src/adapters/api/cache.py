"""
Cache disque des reponses TMDB.

Le proxy de l'admin, l'import et le rafraichissement interrogent souvent les
memes fiches a quelques minutes d'intervalle : diskcache evite de repasser
par le reseau et survit aux redemarrages du serveur.

TTL :
- recherches : 24 heures
- fiches (details, casting, personnes, genres) : 7 jours
"""

import asyncio
from functools import partial
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from diskcache import Cache


class APICache:
    """
    Cache asynchrone avec TTL.

    Les operations diskcache sont bloquantes : elles sont executees dans
    l'executor par defaut de la boucle.
    """

    SEARCH_TTL = 24 * 60 * 60
    DETAILS_TTL = 7 * 24 * 60 * 60

    def __init__(self, cache_dir: str | Path = ".cache/api") -> None:
        self._cache = Cache(str(cache_dir))

    async def _run(self, func, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    async def get(self, key: str) -> Optional[Any]:
        """Valeur associee a key, ou None si absente ou expiree."""
        return await self._run(self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Stocke value sous key pour ttl secondes."""
        await self._run(self._cache.set, key, value, expire=ttl)

    async def delete(self, key: str) -> None:
        """Invalide une entree (ex: avant un rafraichissement force)."""
        await self._run(self._cache.delete, key)

    async def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        ttl: int,
    ) -> Any:
        """
        Retourne la valeur en cache, ou l'obtient via fetch() et la stocke.

        Les resultats None (ressource inconnue) ne sont pas mis en cache.
        """
        cached = await self.get(key)
        if cached is not None:
            return cached
        value = await fetch()
        if value is not None:
            await self.set(key, value, ttl)
        return value

    async def clear(self) -> None:
        """Supprime toutes les entrees du cache."""
        await self._run(self._cache.clear)

    def close(self) -> None:
        self._cache.close()
