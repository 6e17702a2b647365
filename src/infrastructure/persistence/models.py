"""
Modeles SQLModel pour la base de donnees Watch List.

Tables:
- users: Comptes du back-office (hash bcrypt, role ADMIN/USER)
- movies / tv_shows: Contenus importes depuis TMDB
- actors: Acteurs, partages entre films et series
- movie_cast / tv_cast: Liaisons contenu <-> acteur (role, ordre au generique)
- movie_reviews / tv_reviews: Note et critique d'un utilisateur sur un contenu
- operation_logs: Journal d'audit des operations d'administration

Les genres sont stockes en JSON (genres_json) pour rester portables
entre SQLite et les autres moteurs.

operation_logs ne porte aucune cle etrangere vers les contenus : chaque
entree conserve un instantane (operator_name, resource_*) lisible meme
apres suppression du film ou de la serie concernee.
"""

import json
from datetime import date, datetime, timezone
from typing import Any, NamedTuple, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Index, SQLModel

from src.core.value_objects import ContentType, EntityType, UserRole, WatchStatus


def utcnow() -> datetime:
    """Horodatage UTC naif, format stocke en base."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def dump_genres(genres: list[str]) -> str:
    """Serialise une liste de genres au format stocke en base."""
    return json.dumps(list(genres), ensure_ascii=False)


def genre_pattern(genre: str) -> str:
    """Motif LIKE retrouvant un genre exact dans genres_json."""
    return json.dumps(genre, ensure_ascii=False)


class UserModel(SQLModel, table=True):
    """Compte utilisateur. Le mot de passe n'est jamais stocke en clair."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    email: str | None = None
    name: str | None = None
    password_hash: str
    role: UserRole = Field(default=UserRole.USER)
    is_active: bool = Field(default=True)
    last_login_at: datetime | None = None
    created_at: datetime | None = Field(default_factory=utcnow)
    updated_at: datetime | None = Field(default_factory=utcnow)

    @property
    def display_name(self) -> str:
        """Nom affiche dans le journal (name, sinon username)."""
        return self.name or self.username


class ContentBase(SQLModel):
    """
    Champs communs aux films et aux series.

    Les *_path sont les chemins relatifs TMDB, les *_url les copies hebergees
    sur le stockage objet (vides tant que le pipeline d'images n'est pas passe).
    """

    tmdb_id: int = Field(index=True, unique=True)
    overview: str | None = None
    genres_json: str | None = None  # JSON: ["剧情", "科幻"]
    poster_path: str | None = None
    backdrop_path: str | None = None
    poster_url: str | None = None
    backdrop_url: str | None = None
    imdb_id: str | None = None
    douban_rating: float | None = None
    tmdb_rating: float | None = None
    watch_status: WatchStatus = Field(default=WatchStatus.UNWATCHED, index=True)
    summary: str | None = None  # Avis personnel de l'administrateur
    play_url: str | None = None
    is_visible: bool = Field(default=True, index=True)
    created_at: datetime | None = Field(default_factory=utcnow, index=True)
    updated_at: datetime | None = Field(default_factory=utcnow)

    @property
    def genres(self) -> list[str]:
        """Retourne les genres deserialises."""
        if self.genres_json:
            try:
                return json.loads(self.genres_json)
            except (json.JSONDecodeError, TypeError):
                return []
        return []

    @genres.setter
    def genres(self, value: list[str]) -> None:
        """Serialise les genres en JSON."""
        self.genres_json = dump_genres(value)


class MovieModel(ContentBase, table=True):
    """Film du catalogue."""

    __tablename__ = "movies"

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(index=True)
    original_title: str | None = None
    release_date: date | None = None
    runtime: int | None = None  # minutes

    @property
    def display_title(self) -> str:
        return self.title

    @property
    def air_date(self) -> date | None:
        return self.release_date


class TvShowModel(ContentBase, table=True):
    """Serie TV du catalogue."""

    __tablename__ = "tv_shows"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    original_name: str | None = None
    first_air_date: date | None = None
    last_air_date: date | None = None
    number_of_seasons: int | None = None
    number_of_episodes: int | None = None

    @property
    def display_title(self) -> str:
        return self.name

    @property
    def air_date(self) -> date | None:
        return self.first_air_date


class ActorModel(SQLModel, table=True):
    """Acteur, cree a l'import d'un contenu et reutilise par tmdb_id."""

    __tablename__ = "actors"

    id: int | None = Field(default=None, primary_key=True)
    tmdb_id: int = Field(index=True, unique=True)
    name: str = Field(index=True)
    original_name: str | None = None
    biography: str | None = None
    birthday: date | None = None
    deathday: date | None = None
    gender: int | None = None  # Convention TMDB : 0 inconnu, 1 femme, 2 homme
    profile_path: str | None = None
    profile_url: str | None = None
    created_at: datetime | None = Field(default_factory=utcnow)
    updated_at: datetime | None = Field(default_factory=utcnow)


class MovieCastModel(SQLModel, table=True):
    """Role d'un acteur dans un film."""

    __tablename__ = "movie_cast"
    __table_args__ = (UniqueConstraint("movie_id", "actor_id", name="uq_movie_cast"),)

    id: int | None = Field(default=None, primary_key=True)
    movie_id: int = Field(foreign_key="movies.id", ondelete="CASCADE", index=True)
    actor_id: int = Field(foreign_key="actors.id", ondelete="CASCADE", index=True)
    character: str | None = None
    order: int = Field(default=0)


class TvCastModel(SQLModel, table=True):
    """Role d'un acteur dans une serie."""

    __tablename__ = "tv_cast"
    __table_args__ = (UniqueConstraint("tv_show_id", "actor_id", name="uq_tv_cast"),)

    id: int | None = Field(default=None, primary_key=True)
    tv_show_id: int = Field(foreign_key="tv_shows.id", ondelete="CASCADE", index=True)
    actor_id: int = Field(foreign_key="actors.id", ondelete="CASCADE", index=True)
    character: str | None = None
    order: int = Field(default=0)


class MovieReviewModel(SQLModel, table=True):
    """Note (1-10) et critique d'un utilisateur sur un film."""

    __tablename__ = "movie_reviews"
    __table_args__ = (UniqueConstraint("movie_id", "user_id", name="uq_movie_review"),)

    id: int | None = Field(default=None, primary_key=True)
    movie_id: int = Field(foreign_key="movies.id", ondelete="CASCADE", index=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    rating: int | None = None
    review: str | None = None
    created_at: datetime | None = Field(default_factory=utcnow)
    updated_at: datetime | None = Field(default_factory=utcnow)


class TvReviewModel(SQLModel, table=True):
    """Note (1-10) et critique d'un utilisateur sur une serie."""

    __tablename__ = "tv_reviews"
    __table_args__ = (UniqueConstraint("tv_show_id", "user_id", name="uq_tv_review"),)

    id: int | None = Field(default=None, primary_key=True)
    tv_show_id: int = Field(foreign_key="tv_shows.id", ondelete="CASCADE", index=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    rating: int | None = None
    review: str | None = None
    created_at: datetime | None = Field(default_factory=utcnow)
    updated_at: datetime | None = Field(default_factory=utcnow)


class OperationLogModel(SQLModel, table=True):
    """
    Entree du journal d'audit.

    movie_id / tv_show_id sont des colonnes heritees de l'ancien schema
    (sans contrainte) : seule la migration du journal les lit encore.
    """

    __tablename__ = "operation_logs"
    __table_args__ = (
        Index("ix_operation_logs_entity", "entity_type", "entity_id"),
        Index("ix_operation_logs_resource", "resource_type", "resource_id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: int | None = Field(default=None, index=True)
    operator_name: str | None = None
    action: str = Field(index=True)
    entity_type: EntityType = Field(index=True)
    entity_id: int | None = None
    resource_id: int | None = None
    resource_name: str | None = None
    resource_type: str | None = None
    description: str
    metadata_json: str | None = None
    movie_id: int | None = None
    tv_show_id: int | None = None
    created_at: datetime | None = Field(default_factory=utcnow, index=True)

    @property
    def log_metadata(self) -> dict[str, Any]:
        """Retourne les metadonnees deserialisees."""
        if self.metadata_json:
            try:
                return json.loads(self.metadata_json)
            except (json.JSONDecodeError, TypeError):
                return {}
        return {}

    @log_metadata.setter
    def log_metadata(self, value: Optional[dict[str, Any]]) -> None:
        """Serialise les metadonnees en JSON."""
        self.metadata_json = (
            json.dumps(value, ensure_ascii=False, default=str) if value else None
        )


class ContentTables(NamedTuple):
    """Tables et colonnes propres a un type de contenu."""

    model: type[MovieModel] | type[TvShowModel]
    cast_model: type[MovieCastModel] | type[TvCastModel]
    review_model: type[MovieReviewModel] | type[TvReviewModel]
    fk: str  # colonne de liaison dans cast/review (movie_id, tv_show_id)
    title: str
    original_title: str
    date: str


_TABLES = {
    ContentType.MOVIE: ContentTables(
        MovieModel, MovieCastModel, MovieReviewModel,
        "movie_id", "title", "original_title", "release_date",
    ),
    ContentType.TV: ContentTables(
        TvShowModel, TvCastModel, TvReviewModel,
        "tv_show_id", "name", "original_name", "first_air_date",
    ),
}


def tables_for(content_type: ContentType) -> ContentTables:
    """Retourne les tables associees a un type de contenu."""
    return _TABLES[content_type]


def content_type_of(content: ContentBase) -> ContentType:
    """Type de contenu d'une instance de modele."""
    return ContentType.MOVIE if isinstance(content, MovieModel) else ContentType.TV
