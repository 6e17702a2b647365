"""
Journal des operations d'administration.

Chaque operation metier (import, edition, suppression, connexion...) ajoute
une entree dans operation_logs. L'ecriture est volontairement tolerante :
une erreur de journalisation est tracee via loguru mais n'interrompt jamais
l'operation qui l'a declenchee.

Chaque entree embarque un instantane de la ressource visee (nom, type, id,
operateur) pour rester lisible apres la suppression de celle-ci.
"""

from typing import Any, Optional

from loguru import logger
from sqlmodel import Session

from src.core.value_objects import ContentType, EntityType, WatchStatus
from src.infrastructure.persistence.models import (
    ContentBase,
    OperationLogModel,
    content_type_of,
)
from src.infrastructure.persistence.repositories import (
    SQLModelContentRepository,
    SQLModelOperationLogRepository,
    SQLModelUserRepository,
)

SYSTEM_OPERATOR = "System"
UNKNOWN_OPERATOR = "Unknown"


class LogAction:
    """Codes d'action enregistres dans operation_logs.action."""

    CREATE_CONTENT = "CREATE_CONTENT"
    UPDATE_CONTENT = "UPDATE_CONTENT"
    DELETE_CONTENT = "DELETE_CONTENT"
    TOGGLE_VISIBILITY = "TOGGLE_VISIBILITY"
    UPDATE_FIELD = "UPDATE_FIELD"

    BATCH_UPDATE_STATUS = "BATCH_UPDATE_STATUS"
    BATCH_TOGGLE_VISIBILITY = "BATCH_TOGGLE_VISIBILITY"
    BATCH_DELETE = "BATCH_DELETE"

    PROCESS_IMAGES = "PROCESS_IMAGES"
    BATCH_PROCESS_IMAGES = "BATCH_PROCESS_IMAGES"
    UPLOAD_IMAGE = "UPLOAD_IMAGE"
    DELETE_IMAGE = "DELETE_IMAGE"

    UPDATE_WATCH_STATUS = "UPDATE_WATCH_STATUS"
    UPDATE_RATING = "UPDATE_RATING"

    IMPORT_FROM_TMDB = "IMPORT_FROM_TMDB"
    BATCH_IMPORT = "BATCH_IMPORT"
    REFRESH_TMDB_METADATA = "REFRESH_TMDB_METADATA"
    BATCH_REFRESH_TMDB = "BATCH_REFRESH_TMDB"
    SCHEDULE_METADATA_UPDATE = "SCHEDULE_METADATA_UPDATE"

    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    SYSTEM_INIT = "SYSTEM_INIT"

    CREATE_REVIEW = "CREATE_REVIEW"
    UPDATE_REVIEW = "UPDATE_REVIEW"
    DELETE_REVIEW = "DELETE_REVIEW"

    SCHEDULED_BACKUP = "SCHEDULED_BACKUP"
    BACKUP_FAILED = "BACKUP_FAILED"
    CLEANUP_ORPHANED_ACTORS = "CLEANUP_ORPHANED_ACTORS"


WATCH_STATUS_LABELS = {
    WatchStatus.UNWATCHED: "Unwatched",
    WatchStatus.WATCHING: "Watching",
    WatchStatus.WATCHED: "Watched",
    WatchStatus.DROPPED: "Dropped",
}


def _type_label(entity_type: EntityType) -> str:
    return "movie" if entity_type is EntityType.MOVIE else "TV show"


def _status_label(status: WatchStatus | str) -> str:
    try:
        return WATCH_STATUS_LABELS[WatchStatus(status)]
    except ValueError:
        return str(status)


class LogDescriptionBuilder:
    """Descriptions lisibles des entrees du journal."""

    @staticmethod
    def single(action: str, entity_type: EntityType, name: str, details: str | None = None) -> str:
        description = f'{action} {_type_label(entity_type)} "{name}"'
        return f"{description} {details}" if details else description

    @staticmethod
    def batch(action: str, entity_type: EntityType, name: str, total: int) -> str:
        return f'Batch {action} {_type_label(entity_type)} "{name}" ({total} items)'

    @staticmethod
    def watch_status(
        entity_type: EntityType, name: str, old: WatchStatus | str, new: WatchStatus | str
    ) -> str:
        return (
            f'Updated {_type_label(entity_type)} "{name}" watch status '
            f"from {_status_label(old)} to {_status_label(new)}"
        )

    @staticmethod
    def visibility(entity_type: EntityType, name: str, is_visible: bool) -> str:
        state = "shown" if is_visible else "hidden"
        return f'{_type_label(entity_type)} "{name}" has been {state}'

    @staticmethod
    def delete(entity_type: EntityType, name: str) -> str:
        return f'Deleted {_type_label(entity_type)} "{name}"'

    @staticmethod
    def rating(
        entity_type: EntityType, name: str, old: Optional[float], new: Optional[float]
    ) -> str:
        label = _type_label(entity_type)
        if old is None and new is not None:
            return f'Set {label} "{name}" rating to {new}'
        if old is not None and new is None:
            return f'Removed {label} "{name}" rating'
        if old is not None and new is not None:
            return f'Updated {label} "{name}" rating from {old} to {new}'
        return f'Updated {label} "{name}" rating'

    @staticmethod
    def image_processing(entity_type: EntityType, name: str, is_batch: bool = False) -> str:
        verb = "Batch processed" if is_batch else "Processed"
        return f'{verb} images for {_type_label(entity_type)} "{name}"'

    @staticmethod
    def tmdb_refresh(entity_type: EntityType, name: str, is_batch: bool = False) -> str:
        verb = "Batch refreshed" if is_batch else "Refreshed"
        return f'{verb} TMDB metadata for {_type_label(entity_type)} "{name}"'

    @staticmethod
    def scheduled_update(cron_expression: str, enabled: bool) -> str:
        verb = "Enabled" if enabled else "Disabled"
        return f"{verb} scheduled TMDB metadata update ({cron_expression})"


class OperationLogger:
    """
    Ecrit les entrees du journal avec leur instantane de ressource.

    Le nom de l'operateur est resolu a partir de user_id s'il n'est pas
    fourni ; la ressource est resolue a partir de entity_id pour les films
    et les series.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._logs = SQLModelOperationLogRepository(session)
        self._users = SQLModelUserRepository(session)
        self._contents = SQLModelContentRepository(session)

    def _operator_name(self, user_id: Optional[int]) -> str:
        if user_id is None:
            return SYSTEM_OPERATOR
        user = self._users.get_by_id(user_id)
        return user.display_name if user else UNKNOWN_OPERATOR

    def _content_for(
        self, entity_type: EntityType, entity_id: Optional[int]
    ) -> Optional[ContentBase]:
        if entity_id is None:
            return None
        if entity_type is EntityType.MOVIE:
            return self._contents.get_by_id(ContentType.MOVIE, entity_id)
        if entity_type is EntityType.TV_SHOW:
            return self._contents.get_by_id(ContentType.TV, entity_id)
        return None

    def log(
        self,
        action: str,
        entity_type: EntityType,
        description: Optional[str] = None,
        *,
        user_id: Optional[int] = None,
        operator_name: Optional[str] = None,
        entity_id: Optional[int] = None,
        resource: Optional[ContentBase] = None,
        resource_name: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Optional[OperationLogModel]:
        """
        Ajoute une entree au journal.

        Args:
            action: Code LogAction
            entity_type: Type de l'entite visee
            description: Texte lisible (defaut : "{action} {entity_type}")
            user_id: Auteur de l'operation (None : operation systeme)
            operator_name: Nom de l'auteur, resolu depuis user_id si absent
            entity_id: ID de l'entite visee
            resource: Contenu vise, deja charge (evite une requete)
            resource_name: Nom de la ressource si elle n'est pas un contenu
            metadata: Donnees complementaires serialisees en JSON

        Returns:
            L'entree creee, ou None si l'ecriture a echoue
        """
        try:
            if resource is None:
                resource = self._content_for(entity_type, entity_id)

            details = dict(metadata or {})
            if resource is not None:
                entity_id = resource.id
                resource_name = resource.display_title
                details.setdefault("tmdbId", resource.tmdb_id)
                details.setdefault("contentType", content_type_of(resource).value)

            entry = OperationLogModel(
                user_id=user_id,
                operator_name=operator_name or self._operator_name(user_id),
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                resource_id=entity_id,
                resource_name=resource_name,
                resource_type=entity_type.value,
                description=description or f"{action} {entity_type.value}",
            )
            entry.log_metadata = details
            return self._logs.add(entry)
        except Exception:
            self._session.rollback()
            logger.exception("Echec de l'ecriture du journal", action=action)
            return None
