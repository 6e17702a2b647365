"""
Import de films et de series depuis TMDB.

Un import cree la fiche du contenu puis les dix premiers membres du
casting. Les acteurs deja connus (meme tmdb_id) sont reutilises ; une
erreur sur un membre du casting est journalisee sans interrompre l'import.

Les images ne sont pas copiees a l'import, sauf demande explicite
(process_images=True) : le pipeline d'images s'en charge sinon en differe.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from src.core.exceptions import ContentAlreadyExistsError, NotFoundError
from src.core.ports.api_clients import CastCredit, ContentDetails, IMetadataClient
from src.core.value_objects import ContentType
from src.infrastructure.persistence.models import (
    ActorModel,
    ContentBase,
    MovieModel,
    TvShowModel,
    dump_genres,
)
from src.infrastructure.persistence.repositories import (
    SQLModelActorRepository,
    SQLModelContentRepository,
)
from src.services.image_processor import ContentImagesResult, ImageProcessor
from src.services.operation_logger import LogAction, OperationLogger
from src.utils.constants import CAST_IMPORT_LIMIT
from src.utils.helpers import clean_title, filter_localized_genres, parse_date


@dataclass
class ImportResult:
    """Resultat d'un import."""

    content: ContentBase
    cast_imported: int = 0
    cast_errors: list[str] = field(default_factory=list)
    images: Optional[ContentImagesResult] = None


def build_content(details: ContentDetails, language: str) -> ContentBase:
    """Construit le modele d'un nouveau contenu a partir de sa fiche TMDB."""
    common = dict(
        tmdb_id=details.tmdb_id,
        overview=details.overview,
        genres_json=dump_genres(filter_localized_genres(details.genres, language)),
        poster_path=details.poster_path,
        backdrop_path=details.backdrop_path,
        imdb_id=details.imdb_id,
        tmdb_rating=details.vote_average,
    )
    if details.content_type is ContentType.MOVIE:
        return MovieModel(
            title=clean_title(details.title),
            original_title=clean_title(details.original_title),
            release_date=parse_date(details.date),
            runtime=details.runtime,
            **common,
        )
    return TvShowModel(
        name=clean_title(details.title),
        original_name=clean_title(details.original_title),
        first_air_date=parse_date(details.date),
        last_air_date=parse_date(details.last_date),
        number_of_seasons=details.number_of_seasons,
        number_of_episodes=details.number_of_episodes,
        **common,
    )


class TMDBImportService:
    """Importe un contenu TMDB et son casting dans le catalogue."""

    def __init__(
        self,
        session: Session,
        tmdb_client: IMetadataClient,
        image_processor: Optional[ImageProcessor] = None,
        language: str = "zh-CN",
    ) -> None:
        self._session = session
        self._client = tmdb_client
        self._image_processor = image_processor
        self._language = language
        self._contents = SQLModelContentRepository(session)
        self._actors = SQLModelActorRepository(session)
        self._oplog = OperationLogger(session)

    async def import_content(
        self,
        content_type: ContentType,
        tmdb_id: int,
        user_id: Optional[int] = None,
        process_images: bool = False,
    ) -> ImportResult:
        """
        Importe un film ou une serie.

        Raises:
            ContentAlreadyExistsError: le tmdb_id est deja au catalogue
            NotFoundError: TMDB ne connait pas ce tmdb_id
        """
        existing = self._contents.get_by_tmdb_id(content_type, tmdb_id)
        if existing is not None:
            raise ContentAlreadyExistsError(
                f'"{existing.display_title}" already exists in the catalog',
                existing_id=existing.id,
            )

        details, credits = await asyncio.gather(
            self._client.get_details(content_type, tmdb_id),
            self._client.get_credits(content_type, tmdb_id),
        )
        if details is None:
            raise NotFoundError(f"TMDB {content_type.value} {tmdb_id} not found")

        content = self._contents.save(build_content(details, self._language))
        result = ImportResult(content=content)
        self._import_cast(content, credits[:CAST_IMPORT_LIMIT], result)

        self._oplog.log(
            LogAction.IMPORT_FROM_TMDB,
            content_type.entity_type,
            f'Imported {content_type.label} "{content.display_title}" from TMDB',
            user_id=user_id,
            resource=content,
            metadata={"castImported": result.cast_imported},
        )
        logger.info(
            "Contenu importe depuis TMDB",
            type=content_type.value,
            tmdb_id=tmdb_id,
            title=content.display_title,
            cast=result.cast_imported,
        )

        if process_images and self._image_processor is not None:
            result.images = await self._image_processor.process_content_with_actors(content)
        return result

    def _import_cast(
        self, content: ContentBase, credits: list[CastCredit], result: ImportResult
    ) -> None:
        for credit in credits:
            try:
                actor = self._actors.get_by_tmdb_id(credit.tmdb_id)
                if actor is None:
                    actor = self._actors.save(
                        ActorModel(
                            tmdb_id=credit.tmdb_id,
                            name=clean_title(credit.name),
                            original_name=credit.original_name,
                            gender=credit.gender,
                            profile_path=credit.profile_path,
                        )
                    )
                if self._contents.add_cast_member(content, actor, credit.character, credit.order):
                    result.cast_imported += 1
            except SQLAlchemyError as e:
                self._session.rollback()
                result.cast_errors.append(f"{credit.name}: {e}")
                logger.warning(
                    "Echec de l'import d'un acteur",
                    actor=credit.name,
                    tmdb_id=credit.tmdb_id,
                    error=str(e),
                )
