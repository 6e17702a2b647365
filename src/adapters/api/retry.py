"""
Relance des appels HTTP sortants (TMDB, Douban, telechargement d'images).

Deux familles d'erreurs sont relancees :
- 429 Too Many Requests : on respecte l'en-tete Retry-After s'il est fourni
- 502/503/504 et erreurs de transport : backoff exponentiel avec jitter

Les autres statuts (400, 401, 404...) sont propages sans relance.

Usage:
    response = await request_with_retry(client, "GET", "/movie/603")
"""

from typing import Optional

import httpx
from loguru import logger
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

TRANSIENT_STATUSES = frozenset({502, 503, 504})


class RateLimitError(Exception):
    """
    Levee quand l'API retourne 429 Too Many Requests.

    Attributes:
        retry_after: Secondes a attendre (en-tete Retry-After), ou None.
    """

    def __init__(self, retry_after: Optional[float] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s")


class TransientAPIError(Exception):
    """Erreur passagere cote serveur ou reseau, susceptible de disparaitre."""


class _RetryAfterOrBackoff:
    """Attente tenacity : Retry-After si connu, sinon backoff exponentiel."""

    def __init__(self, max_wait: float) -> None:
        self._max_wait = max_wait
        self._backoff = wait_random_exponential(multiplier=1, min=1, max=max_wait)

    def __call__(self, retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, RateLimitError) and exc.retry_after is not None:
            return min(float(exc.retry_after), self._max_wait)
        return self._backoff(retry_state)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Nouvelle tentative d'appel API",
        attempt=retry_state.attempt_number,
        error=str(exc),
    )


def with_retry(max_attempts: int = 5, max_wait: float = 60):
    """
    Decorateur relancant une coroutine sur RateLimitError et TransientAPIError.

    Args:
        max_attempts: Nombre maximum de tentatives
        max_wait: Attente maximale entre deux tentatives, en secondes
    """
    return retry(
        retry=retry_if_exception_type((RateLimitError, TransientAPIError)),
        wait=_RetryAfterOrBackoff(max_wait),
        stop=stop_after_attempt(max_attempts),
        before_sleep=_log_retry,
        reraise=True,
    )


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        # Forme date HTTP : on laisse le backoff decider
        return None


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 5,
    max_wait: float = 60,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec relance automatique.

    Args:
        client: Client httpx async a utiliser
        method: Methode HTTP (GET, POST, etc.)
        url: URL (absolue ou relative a base_url du client)
        max_attempts: Nombre maximum de tentatives
        max_wait: Attente maximale entre deux tentatives
        **kwargs: Arguments passes a client.request()

    Returns:
        httpx.Response en cas de succes (2xx)

    Raises:
        RateLimitError: 429 persistant apres epuisement des tentatives
        TransientAPIError: 5xx passager ou erreur reseau persistante
        httpx.HTTPStatusError: Pour les autres erreurs HTTP
    """

    @with_retry(max_attempts=max_attempts, max_wait=max_wait)
    async def _do_request() -> httpx.Response:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            raise TransientAPIError(f"{method} {url}: {exc}") from exc

        if response.status_code == 429:
            raise RateLimitError(_parse_retry_after(response.headers.get("Retry-After")))
        if response.status_code in TRANSIENT_STATUSES:
            raise TransientAPIError(f"{method} {url}: HTTP {response.status_code}")
        response.raise_for_status()
        return response

    return await _do_request()
