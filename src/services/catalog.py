"""
Catalogue public : recherche, listes, fiches, critiques et statut.

Seuls les contenus visibles (is_visible) sont exposes ; un contenu masque
se comporte comme un contenu inexistant.
"""

from dataclasses import dataclass, field
from functools import partial
from typing import Optional

from sqlmodel import Session

from src.core.exceptions import NotFoundError, ValidationError
from src.core.value_objects import ContentType, WatchStatus
from src.infrastructure.persistence.models import ActorModel, ContentBase
from src.infrastructure.persistence.repositories import (
    SQLModelActorRepository,
    SQLModelContentRepository,
    SQLModelReviewRepository,
)
from src.infrastructure.persistence.repositories.content_repository import SORT_FIELDS
from src.services.operation_logger import LogAction, LogDescriptionBuilder, OperationLogger
from src.utils.constants import (
    DETAIL_CAST_LIMIT,
    REVIEW_RATING_MAX,
    REVIEW_RATING_MIN,
    SEARCH_PAGE_SIZE,
    SIMILAR_LIMIT,
)


@dataclass
class SearchResults:
    """Resultats d'une recherche, films et series pagines separement."""

    movies: list[ContentBase]
    movies_total: int
    tv_shows: list[ContentBase]
    tv_shows_total: int
    actor: Optional[ActorModel] = None

    @property
    def total(self) -> int:
        return self.movies_total + self.tv_shows_total


@dataclass
class ContentDetail:
    """Fiche publique d'un contenu."""

    content: ContentBase
    cast: list[tuple] = field(default_factory=list)
    reviews: list[tuple] = field(default_factory=list)
    similar: list[ContentBase] = field(default_factory=list)
    similar_total: int = 0

    @property
    def has_more_similar(self) -> bool:
        return self.similar_total > len(self.similar)


@dataclass
class Filmography:
    """Acteur et ses roles dans les contenus visibles."""

    actor: ActorModel
    movies: list[tuple] = field(default_factory=list)
    tv_shows: list[tuple] = field(default_factory=list)


def parse_watch_status(value: Optional[str]) -> Optional[WatchStatus]:
    """Statut de visionnage depuis un parametre de requete (vide : None)."""
    if not value:
        return None
    try:
        return WatchStatus(value.upper())
    except ValueError:
        raise ValidationError("Invalid watch status") from None


class CatalogService:
    """Lecture du catalogue public et critiques des utilisateurs."""

    def __init__(self, session: Session) -> None:
        self._contents = SQLModelContentRepository(session)
        self._actors = SQLModelActorRepository(session)
        self._reviews = SQLModelReviewRepository(session)
        self._oplog = OperationLogger(session)

    def get_visible(self, content_type: ContentType, content_id: int) -> ContentBase:
        """Contenu visible par ID. Leve NotFoundError s'il est absent ou masque."""
        content = self._contents.get_by_id(content_type, content_id)
        if content is None or not content.is_visible:
            raise NotFoundError(f"{content_type.display_name} not found")
        return content

    def list_visible(
        self, content_type: ContentType, page: int = 1, limit: int = 20
    ) -> tuple[list[ContentBase], int]:
        return self._contents.list_visible(content_type, page, limit)

    def search(
        self,
        query: Optional[str] = None,
        actor: Optional[str] = None,
        page: int = 1,
        limit: int = SEARCH_PAGE_SIZE,
    ) -> SearchResults:
        """
        Recherche dans les contenus visibles.

        actor est soit l'ID interne d'un acteur, soit un nom recherche dans
        le casting ; sinon query est cherche dans les titres.
        """
        query = (query or "").strip()
        actor = (actor or "").strip()
        if not query and not actor:
            raise ValidationError("Search query or actor ID is required")

        found_actor = None
        if actor.isdigit():
            found_actor = self._actors.get_by_id(int(actor))
            run = partial(self._contents.search_by_actor_id, actor_id=int(actor))
        elif actor:
            run = partial(self._contents.search_by_actor, actor_name=actor)
        else:
            run = partial(self._contents.search, query=query)

        movies, movies_total = run(ContentType.MOVIE, page=page, limit=limit)
        tv_shows, tv_total = run(ContentType.TV, page=page, limit=limit)
        return SearchResults(movies, movies_total, tv_shows, tv_total, found_actor)

    def filtered(
        self,
        watch_status: Optional[str] = None,
        genre: Optional[str] = None,
        sort_by: str = "default",
        sort_order: str = "desc",
    ) -> tuple[list[ContentBase], list[ContentBase]]:
        """Films et series visibles filtres par statut et genre."""
        status = parse_watch_status(watch_status)
        if sort_by not in SORT_FIELDS:
            sort_by = "default"
        sort_order = "asc" if sort_order == "asc" else "desc"
        return (
            self._contents.filtered(ContentType.MOVIE, status, genre, sort_by, sort_order),
            self._contents.filtered(ContentType.TV, status, genre, sort_by, sort_order),
        )

    def detail(self, content_type: ContentType, content_id: int) -> ContentDetail:
        """Fiche complete : casting, critiques et contenus similaires."""
        content = self.get_visible(content_type, content_id)
        similar, similar_total = self._contents.similar(content, 1, SIMILAR_LIMIT)
        return ContentDetail(
            content=content,
            cast=self._contents.get_cast(content, DETAIL_CAST_LIMIT),
            reviews=self._reviews.list_for_content(content_type, content.id),
            similar=similar,
            similar_total=similar_total,
        )

    def similar(
        self,
        content_type: ContentType,
        content_id: int,
        page: int = 1,
        limit: int = SIMILAR_LIMIT,
    ) -> tuple[list[ContentBase], int]:
        content = self.get_visible(content_type, content_id)
        return self._contents.similar(content, page, limit)

    def actor_detail(self, actor_id: int) -> Filmography:
        actor = self._actors.get_by_id(actor_id)
        if actor is None:
            raise NotFoundError("Actor not found")
        return Filmography(
            actor=actor,
            movies=self._actors.filmography(actor, ContentType.MOVIE),
            tv_shows=self._actors.filmography(actor, ContentType.TV),
        )

    # ------------------------------------------------------------------
    # Critiques
    # ------------------------------------------------------------------

    def list_reviews(self, content_type: ContentType, content_id: int) -> list[tuple]:
        return self._reviews.list_for_content(content_type, content_id)

    def save_review(
        self,
        content_type: ContentType,
        content_id: int,
        user_id: int,
        rating: Optional[int] = None,
        review: Optional[str] = None,
    ):
        """
        Cree ou remplace la critique de l'utilisateur.

        Raises:
            ValidationError: note hors de [1, 10] ou critique vide
            NotFoundError: contenu absent ou masque
        """
        review = (review or "").strip() or None
        if rating is None and review is None:
            raise ValidationError("Rating or review is required")
        if rating is not None and not REVIEW_RATING_MIN <= rating <= REVIEW_RATING_MAX:
            raise ValidationError("Rating must be between 1 and 10")

        content = self.get_visible(content_type, content_id)
        record, created = self._reviews.upsert(content_type, content.id, user_id, rating, review)

        entity_type = content_type.entity_type
        if created:
            action = LogAction.CREATE_REVIEW
            description = LogDescriptionBuilder.single("Reviewed", entity_type, content.display_title)
        else:
            action = LogAction.UPDATE_REVIEW
            description = LogDescriptionBuilder.single(
                "Updated review of", entity_type, content.display_title
            )
        self._oplog.log(
            action,
            entity_type,
            description,
            user_id=user_id,
            resource=content,
            metadata={"rating": rating, "hasReview": review is not None},
        )
        return record

    def delete_review(self, content_type: ContentType, content_id: int, user_id: int) -> None:
        content = self.get_visible(content_type, content_id)
        if not self._reviews.delete(content_type, content.id, user_id):
            raise NotFoundError("Review not found")
        self._oplog.log(
            LogAction.DELETE_REVIEW,
            content_type.entity_type,
            LogDescriptionBuilder.single(
                "Deleted review of", content_type.entity_type, content.display_title
            ),
            user_id=user_id,
            resource=content,
        )

    def get_watch_status(self, content_type: ContentType, content_id: int) -> WatchStatus:
        return WatchStatus(self.get_visible(content_type, content_id).watch_status)
