"""
Administration du catalogue : edition, suppression, visibilite, statut,
note Douban et statistiques du tableau de bord.

Toutes les ecritures sont journalisees dans operation_logs. Seuls les
champs de EDITABLE_FIELDS peuvent etre modifies via l'edition generique ;
les autres colonnes (id, tmdb_id, horodatages) sont gerees par le systeme.
"""

from datetime import date
from typing import Any, Optional

from sqlmodel import Session

from src.core.exceptions import NotFoundError, ValidationError
from src.core.value_objects import ContentType, WatchStatus
from src.infrastructure.persistence.models import ContentBase, dump_genres
from src.infrastructure.persistence.repositories import (
    SQLModelActorRepository,
    SQLModelContentRepository,
    SQLModelUserRepository,
)
from src.services.operation_logger import LogAction, LogDescriptionBuilder, OperationLogger
from src.utils.constants import DOUBAN_RATING_MAX
from src.utils.helpers import parse_date

_COMMON_FIELDS = {
    "overview": str,
    "genres": list,
    "poster_path": str,
    "backdrop_path": str,
    "poster_url": str,
    "backdrop_url": str,
    "imdb_id": str,
    "douban_rating": float,
    "tmdb_rating": float,
    "watch_status": WatchStatus,
    "summary": str,
    "play_url": str,
    "is_visible": bool,
}

EDITABLE_FIELDS: dict[ContentType, dict[str, type]] = {
    ContentType.MOVIE: {
        **_COMMON_FIELDS,
        "title": str,
        "original_title": str,
        "release_date": date,
        "runtime": int,
    },
    ContentType.TV: {
        **_COMMON_FIELDS,
        "name": str,
        "original_name": str,
        "first_air_date": date,
        "last_air_date": date,
        "number_of_seasons": int,
        "number_of_episodes": int,
    },
}

# Alias camelCase acceptes dans les requetes JSON de l'interface d'admin
_CAMEL_ALIASES = {
    "originalTitle": "original_title",
    "originalName": "original_name",
    "releaseDate": "release_date",
    "firstAirDate": "first_air_date",
    "lastAirDate": "last_air_date",
    "numberOfSeasons": "number_of_seasons",
    "numberOfEpisodes": "number_of_episodes",
    "posterPath": "poster_path",
    "backdropPath": "backdrop_path",
    "posterUrl": "poster_url",
    "backdropUrl": "backdrop_url",
    "imdbId": "imdb_id",
    "doubanRating": "douban_rating",
    "tmdbRating": "tmdb_rating",
    "watchStatus": "watch_status",
    "playUrl": "play_url",
    "isVisible": "is_visible",
}


def _coerce(field: str, expected: type, value: Any) -> Any:
    """Convertit une valeur JSON vers le type de la colonne."""
    if value is None or value == "":
        if expected is bool:
            raise ValidationError(f"Field '{field}' cannot be empty")
        if expected is list:
            return []
        return None
    try:
        if expected is date:
            parsed = parse_date(str(value))
            if parsed is None:
                raise ValueError(value)
            return parsed
        if expected is WatchStatus:
            return WatchStatus(value)
        if expected is bool:
            if not isinstance(value, bool):
                raise ValueError(value)
            return value
        if expected is list:
            if not isinstance(value, list):
                raise ValueError(value)
            return [str(v) for v in value]
        return expected(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid value for field '{field}'") from None


def normalize_changes(content_type: ContentType, data: dict[str, Any]) -> dict[str, Any]:
    """
    Valide un dictionnaire de modifications.

    Raises:
        ValidationError: champ inconnu ou valeur invalide
    """
    allowed = EDITABLE_FIELDS[content_type]
    changes = {}
    for raw_name, value in data.items():
        name = _CAMEL_ALIASES.get(raw_name, raw_name)
        if name not in allowed:
            raise ValidationError(f"Field '{raw_name}' cannot be edited")
        changes[name] = _coerce(raw_name, allowed[name], value)

    rating = changes.get("douban_rating")
    if rating is not None and not 0 <= rating <= DOUBAN_RATING_MAX:
        raise ValidationError("Rating must be between 0 and 10")
    return changes


class ContentAdminService:
    """Operations d'administration sur les films et les series."""

    def __init__(self, session: Session) -> None:
        self._contents = SQLModelContentRepository(session)
        self._actors = SQLModelActorRepository(session)
        self._users = SQLModelUserRepository(session)
        self._oplog = OperationLogger(session)

    def get(self, content_type: ContentType, content_id: int) -> ContentBase:
        """Contenu par ID, visible ou non. Leve NotFoundError si absent."""
        content = self._contents.get_by_id(content_type, content_id)
        if content is None:
            raise NotFoundError(f"{content_type.display_name} not found")
        return content

    def _apply(self, content: ContentBase, changes: dict[str, Any]) -> ContentBase:
        for name, value in changes.items():
            if name == "genres":
                content.genres_json = dump_genres(value)
            else:
                setattr(content, name, value)
        return self._contents.save(content)

    def update(
        self,
        content_type: ContentType,
        content_id: int,
        data: dict[str, Any],
        user_id: Optional[int] = None,
    ) -> ContentBase:
        """Applique plusieurs modifications (edition complete d'une fiche)."""
        if not data:
            raise ValidationError("No data to update")
        changes = normalize_changes(content_type, data)
        content = self._apply(self.get(content_type, content_id), changes)
        self._oplog.log(
            LogAction.UPDATE_CONTENT,
            content_type.entity_type,
            LogDescriptionBuilder.single("Edited", content_type.entity_type, content.display_title),
            user_id=user_id,
            resource=content,
            metadata={"fields": sorted(changes)},
        )
        return content

    def update_field(
        self,
        content_type: ContentType,
        content_id: int,
        field: str,
        value: Any,
        user_id: Optional[int] = None,
    ) -> ContentBase:
        """Modifie un seul champ."""
        changes = normalize_changes(content_type, {field: value})
        content = self._apply(self.get(content_type, content_id), changes)
        (name,) = changes
        self._oplog.log(
            LogAction.UPDATE_FIELD,
            content_type.entity_type,
            LogDescriptionBuilder.single(
                "Updated", content_type.entity_type, content.display_title, f"field: {name}"
            ),
            user_id=user_id,
            resource=content,
            metadata={"field": name},
        )
        return content

    def delete(
        self, content_type: ContentType, content_id: int, user_id: Optional[int] = None
    ) -> None:
        """Supprime un contenu ; l'entree du journal garde son instantane."""
        content = self.get(content_type, content_id)
        title, tmdb_id = content.display_title, content.tmdb_id
        self._contents.delete(content)
        self._oplog.log(
            LogAction.DELETE_CONTENT,
            content_type.entity_type,
            LogDescriptionBuilder.delete(content_type.entity_type, title),
            user_id=user_id,
            entity_id=content_id,
            resource_name=title,
            metadata={"tmdbId": tmdb_id, "contentType": content_type.value},
        )

    def toggle_visibility(
        self,
        content_type: ContentType,
        content_id: int,
        is_visible: Optional[bool] = None,
        user_id: Optional[int] = None,
    ) -> ContentBase:
        """Fixe la visibilite publique d'un contenu, ou l'inverse si is_visible est None."""
        content = self.get(content_type, content_id)
        content.is_visible = (not content.is_visible) if is_visible is None else is_visible
        content = self._contents.save(content)
        self._oplog.log(
            LogAction.TOGGLE_VISIBILITY,
            content_type.entity_type,
            LogDescriptionBuilder.visibility(
                content_type.entity_type, content.display_title, content.is_visible
            ),
            user_id=user_id,
            resource=content,
            metadata={"isVisible": content.is_visible},
        )
        return content

    def update_watch_status(
        self,
        content_type: ContentType,
        content_id: int,
        status: WatchStatus | str,
        user_id: Optional[int] = None,
    ) -> ContentBase:
        """Change le statut de visionnage."""
        try:
            new_status = WatchStatus(status)
        except ValueError:
            raise ValidationError("Invalid watch status") from None

        content = self.get(content_type, content_id)
        old_status = WatchStatus(content.watch_status)
        content.watch_status = new_status
        content = self._contents.save(content)
        self._oplog.log(
            LogAction.UPDATE_WATCH_STATUS,
            content_type.entity_type,
            LogDescriptionBuilder.watch_status(
                content_type.entity_type, content.display_title, old_status, new_status
            ),
            user_id=user_id,
            resource=content,
            metadata={"oldStatus": old_status.value, "newStatus": new_status.value},
        )
        return content

    def update_rating(
        self,
        content_type: ContentType,
        content_id: int,
        rating: Optional[float],
        user_id: Optional[int] = None,
    ) -> ContentBase:
        """Fixe (ou efface avec None) la note Douban d'un contenu."""
        if rating is not None:
            try:
                rating = float(rating)
            except (TypeError, ValueError):
                raise ValidationError("Rating must be a number") from None
            if not 0 <= rating <= DOUBAN_RATING_MAX:
                raise ValidationError("Rating must be between 0 and 10")

        content = self.get(content_type, content_id)
        old_rating = content.douban_rating
        content.douban_rating = rating
        content = self._contents.save(content)
        self._oplog.log(
            LogAction.UPDATE_RATING,
            content_type.entity_type,
            LogDescriptionBuilder.rating(
                content_type.entity_type, content.display_title, old_rating, rating
            ),
            user_id=user_id,
            resource=content,
            metadata={"oldRating": old_rating, "newRating": rating},
        )
        return content

    def stats(self) -> dict[str, int]:
        """Compteurs du tableau de bord."""
        movie, tv = ContentType.MOVIE, ContentType.TV
        return {
            "totalMovies": self._contents.count(movie),
            "totalTvShows": self._contents.count(tv),
            "watchedMovies": self._contents.count(movie, WatchStatus.WATCHED),
            "watchedTvShows": self._contents.count(tv, WatchStatus.WATCHED),
            "watchingMovies": self._contents.count(movie, WatchStatus.WATCHING),
            "watchingTvShows": self._contents.count(tv, WatchStatus.WATCHING),
            "totalActors": self._actors.count(),
            "totalUsers": self._users.count(),
        }
