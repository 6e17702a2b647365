"""
Pipeline d'images : copie des images TMDB vers le stockage objet.

Les contenus et acteurs importes ne referencent d'abord que les chemins
TMDB (poster_path, backdrop_path, profile_path). Ce service telecharge
chaque image a la taille voulue et la depose sur le stockage :

- poster    : w500               -> {movie|tv}/{tmdb_id}/poster.jpg
- backdrop  : w1280              -> {movie|tv}/{tmdb_id}/backdrop.jpg
- profil    : w276_and_h350_face -> actor/{tmdb_id}/profile.jpg

Une image n'est traitee que si son chemin TMDB est connu et que son URL
hebergee est encore vide : relancer le pipeline ne refait rien.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger
from sqlmodel import Session

from src.adapters.api.tmdb_client import TMDBClient
from src.core.exceptions import ServiceUnavailableError, StorageError
from src.core.ports.storage import IObjectStorage
from src.core.value_objects import ContentType, EntityType
from src.infrastructure.persistence.models import ActorModel, ContentBase, content_type_of
from src.infrastructure.persistence.repositories import (
    SQLModelActorRepository,
    SQLModelContentRepository,
)
from src.services.operation_logger import LogAction, LogDescriptionBuilder, OperationLogger
from src.utils.constants import BACKDROP_SIZE, POSTER_SIZE, PROFILE_SIZE

# Erreurs d'une image isolee : le lot continue, l'erreur est consignee
IMAGE_ERRORS = (StorageError, ServiceUnavailableError)
STORAGE_DISABLED = "Object storage is not configured"


@dataclass
class ContentImagesResult:
    """Bilan du traitement d'un contenu et de son casting."""

    content_processed: bool = False
    actors_processed: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "contentProcessed": self.content_processed,
            "actorsProcessed": self.actors_processed,
            "errors": self.errors,
        }


@dataclass
class ImageBatchResult:
    """Bilan d'un traitement par lot."""

    processed_content: int = 0
    processed_actors: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "processedContent": self.processed_content,
            "processedActors": self.processed_actors,
            "errors": self.errors,
        }


class ImageProcessor:
    """Copie les images TMDB manquantes vers le stockage objet."""

    def __init__(self, session: Session, storage: IObjectStorage) -> None:
        self._storage = storage
        self._contents = SQLModelContentRepository(session)
        self._actors = SQLModelActorRepository(session)
        self._oplog = OperationLogger(session)

    async def _copy(self, path: str, size: str, key: str) -> str:
        return await self._storage.upload_from_url(TMDBClient.image_url(path, size), key)

    async def process_content(self, content: ContentBase) -> bool:
        """
        Copie le poster et le backdrop d'un contenu si necessaire.

        Returns:
            True si au moins une image a ete deposee
        """
        prefix = f"{content_type_of(content).value}/{content.tmdb_id}"
        changed = False

        if content.poster_path and not content.poster_url:
            content.poster_url = await self._copy(
                content.poster_path, POSTER_SIZE, f"{prefix}/poster.jpg"
            )
            changed = True
        if content.backdrop_path and not content.backdrop_url:
            content.backdrop_url = await self._copy(
                content.backdrop_path, BACKDROP_SIZE, f"{prefix}/backdrop.jpg"
            )
            changed = True

        if changed:
            self._contents.save(content)
            logger.info("Images du contenu deposees", key=prefix)
        return changed

    async def process_actor(self, actor: ActorModel) -> bool:
        """Copie la photo d'un acteur si necessaire."""
        if not actor.profile_path or actor.profile_url:
            return False
        actor.profile_url = await self._copy(
            actor.profile_path, PROFILE_SIZE, f"actor/{actor.tmdb_id}/profile.jpg"
        )
        self._actors.save(actor)
        return True

    async def process_content_with_actors(self, content: ContentBase) -> ContentImagesResult:
        """Traite un contenu puis chaque acteur de son casting."""
        result = ContentImagesResult()
        if not self._storage.enabled:
            result.errors.append(STORAGE_DISABLED)
            logger.warning(
                "Stockage objet non configure, images ignorees", title=content.display_title
            )
            return result

        try:
            result.content_processed = await self.process_content(content)
        except IMAGE_ERRORS as e:
            result.errors.append(f"{content.display_title}: {e}")
            logger.warning("Echec des images du contenu", title=content.display_title, error=str(e))

        for _, actor in self._contents.get_cast(content):
            try:
                if await self.process_actor(actor):
                    result.actors_processed += 1
            except IMAGE_ERRORS as e:
                result.errors.append(f"{actor.name}: {e}")
                logger.warning("Echec de la photo d'acteur", actor=actor.name, error=str(e))
        return result

    async def process_by_id(
        self, content_type: ContentType, content_id: int, user_id: Optional[int] = None
    ) -> Optional[ContentImagesResult]:
        """
        Comme process_content_with_actors, a partir d'un ID (None si inconnu).

        Ecrit une entree PROCESS_IMAGES au journal.
        """
        content = self._contents.get_by_id(content_type, content_id)
        if content is None:
            return None
        result = await self.process_content_with_actors(content)
        self._oplog.log(
            LogAction.PROCESS_IMAGES,
            content_type.entity_type,
            LogDescriptionBuilder.image_processing(content_type.entity_type, content.display_title),
            user_id=user_id,
            resource=content,
            metadata=result.to_dict(),
        )
        return result

    async def batch_process(self, limit: int = 10, user_id: Optional[int] = None) -> ImageBatchResult:
        """
        Traite un lot de contenus et d'acteurs sans images hebergees.

        Le lot comprend ceil(limit/2) films, ceil(limit/2) series et
        min(limit, 5) acteurs.
        """
        result = ImageBatchResult()
        if not self._storage.enabled:
            result.errors.append(STORAGE_DISABLED)
            logger.warning("Stockage objet non configure, lot ignore")
            return result
        per_type = math.ceil(limit / 2)

        pending = self._contents.list_missing_images(ContentType.MOVIE, per_type)
        pending += self._contents.list_missing_images(ContentType.TV, per_type)
        for content in pending:
            try:
                if await self.process_content(content):
                    result.processed_content += 1
            except IMAGE_ERRORS as e:
                result.errors.append(f"{content.display_title}: {e}")

        for actor in self._actors.list_missing_profile(min(limit, 5)):
            try:
                if await self.process_actor(actor):
                    result.processed_actors += 1
            except IMAGE_ERRORS as e:
                result.errors.append(f"{actor.name}: {e}")

        logger.info(
            "Traitement d'images par lot termine",
            content=result.processed_content,
            actors=result.processed_actors,
            errors=len(result.errors),
        )
        self._oplog.log(
            LogAction.BATCH_PROCESS_IMAGES,
            EntityType.SYSTEM,
            (
                f"Batch processed images: {result.processed_content} contents, "
                f"{result.processed_actors} actors"
            ),
            user_id=user_id,
            metadata={"limit": limit, **result.to_dict()},
        )
        return result
