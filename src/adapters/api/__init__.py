"""
Clients API externes.

- TMDBClient : metadonnees films/series (import, rafraichissement, proxy admin)
- DoubanClient : recherche de la note Douban d'un contenu

Infrastructure partagee:
- APICache : cache disque avec TTL (recherche 24h, fiches 7j)
- request_with_retry : relance sur 429 et erreurs passageres
"""

from src.adapters.api.cache import APICache
from src.adapters.api.retry import (
    RateLimitError,
    TransientAPIError,
    request_with_retry,
    with_retry,
)

__all__ = [
    "APICache",
    "RateLimitError",
    "TransientAPIError",
    "request_with_retry",
    "with_retry",
]
