"""
Rafraichissement des metadonnees TMDB des contenus deja importes.

Seules les donnees issues de TMDB sont reecrites (titres, resume, dates,
duree ou nombre de saisons, genres, chemins d'images, note TMDB). Les
champs geres par l'administrateur sont preserves : statut de visionnage,
note Douban, avis, lien de lecture et visibilite.

Quand TMDB change le chemin du poster ou du backdrop, l'URL hebergee
correspondante est videe pour que le pipeline d'images recopie la
nouvelle image.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

import httpx
from loguru import logger
from sqlmodel import Session

from src.adapters.api.retry import RateLimitError, TransientAPIError
from src.core.ports.api_clients import ContentDetails, IMetadataClient
from src.core.value_objects import ContentType
from src.infrastructure.persistence.models import ContentBase, MovieModel, dump_genres
from src.infrastructure.persistence.repositories import SQLModelContentRepository
from src.services.operation_logger import LogAction, LogDescriptionBuilder, OperationLogger
from src.utils.helpers import clean_title, filter_localized_genres, parse_date


@dataclass
class RefreshStats:
    """Bilan d'un rafraichissement."""

    success: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    refreshed: list[ContentBase] = field(default_factory=list, repr=False)

    @property
    def total(self) -> int:
        return self.success + self.failed

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "failed": self.failed,
            "total": self.total,
            "errors": self.errors,
        }


def apply_details(content: ContentBase, details: ContentDetails, language: str) -> None:
    """Reporte une fiche TMDB sur un contenu existant."""
    if isinstance(content, MovieModel):
        content.title = clean_title(details.title) or content.title
        content.original_title = clean_title(details.original_title)
        content.release_date = parse_date(details.date)
        content.runtime = details.runtime
    else:
        content.name = clean_title(details.title) or content.name
        content.original_name = clean_title(details.original_title)
        content.first_air_date = parse_date(details.date)
        content.last_air_date = parse_date(details.last_date)
        content.number_of_seasons = details.number_of_seasons
        content.number_of_episodes = details.number_of_episodes

    content.overview = details.overview
    content.genres_json = dump_genres(filter_localized_genres(details.genres, language))
    content.imdb_id = details.imdb_id or content.imdb_id
    content.tmdb_rating = details.vote_average

    if details.poster_path != content.poster_path:
        content.poster_path = details.poster_path
        content.poster_url = None
    if details.backdrop_path != content.backdrop_path:
        content.backdrop_path = details.backdrop_path
        content.backdrop_url = None


class MetadataRefreshService:
    """Relit les fiches TMDB et met a jour le catalogue."""

    def __init__(
        self,
        session: Session,
        tmdb_client: IMetadataClient,
        language: str = "zh-CN",
    ) -> None:
        self._client = tmdb_client
        self._language = language
        self._contents = SQLModelContentRepository(session)
        self._oplog = OperationLogger(session)

    async def refresh_one(self, content: ContentBase) -> ContentBase:
        """
        Rafraichit un contenu.

        Raises:
            LookupError: TMDB ne connait plus ce contenu
        """
        content_type = ContentType.MOVIE if isinstance(content, MovieModel) else ContentType.TV
        details = await self._client.refresh_details(content_type, content.tmdb_id)
        if details is None:
            raise LookupError(f"TMDB {content_type.value} {content.tmdb_id} not found")
        apply_details(content, details, self._language)
        return self._contents.save(content)

    async def _refresh_many(
        self, content_type: ContentType, ids: Iterable[int], stats: RefreshStats
    ) -> None:
        for content_id in ids:
            content = self._contents.get_by_id(content_type, content_id)
            if content is None:
                stats.failed += 1
                stats.errors.append(f"{content_type.value} {content_id}: not found")
                continue
            try:
                stats.refreshed.append(await self.refresh_one(content))
                stats.success += 1
            except (LookupError, httpx.HTTPError, RateLimitError, TransientAPIError) as e:
                stats.failed += 1
                stats.errors.append(f"{content.display_title}: {e}")
                logger.warning(
                    "Echec du rafraichissement TMDB",
                    title=content.display_title,
                    error=str(e),
                )

    async def refresh(
        self,
        movie_ids: Optional[list[int]] = None,
        tv_ids: Optional[list[int]] = None,
        refresh_all: bool = False,
        user_id: Optional[int] = None,
    ) -> RefreshStats:
        """
        Rafraichit les contenus designes, ou tous les contenus visibles.

        Un seul contenu donne lieu a une entree REFRESH_TMDB_METADATA,
        plusieurs a une entree BATCH_REFRESH_TMDB.
        """
        if refresh_all:
            movie_ids = self._contents.list_ids(ContentType.MOVIE, visible_only=True)
            tv_ids = self._contents.list_ids(ContentType.TV, visible_only=True)

        stats = RefreshStats()
        await self._refresh_many(ContentType.MOVIE, movie_ids or [], stats)
        await self._refresh_many(ContentType.TV, tv_ids or [], stats)

        if stats.total == 1 and stats.refreshed:
            content = stats.refreshed[0]
            entity_type = (
                ContentType.MOVIE if isinstance(content, MovieModel) else ContentType.TV
            ).entity_type
            self._oplog.log(
                LogAction.REFRESH_TMDB_METADATA,
                entity_type,
                LogDescriptionBuilder.tmdb_refresh(entity_type, content.display_title),
                user_id=user_id,
                resource=content,
            )
        elif stats.total > 1:
            self._oplog.log(
                LogAction.BATCH_REFRESH_TMDB,
                ContentType.MOVIE.entity_type if movie_ids else ContentType.TV.entity_type,
                f"Batch refreshed TMDB metadata ({stats.success} succeeded, {stats.failed} failed)",
                user_id=user_id,
                metadata={
                    "movieIds": list(movie_ids or []),
                    "tvShowIds": list(tv_ids or []),
                    "refreshAll": refresh_all,
                    **stats.to_dict(),
                },
            )

        logger.info("Rafraichissement TMDB termine", **stats.to_dict())
        return stats
