"""
Schemas pydantic de l'API : corps de requete et reponses.

Les champs sont recus et renvoyes en camelCase. Les champs obligatoires
cote metier restent optionnels dans les requetes : leur absence est
signalee par les services (ValidationError, 400) avec un message explicite.

Les modeles *Out se construisent depuis les modeles SQLModel ou les
dataclasses des ports (from_attributes).
"""

from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..core.value_objects import ContentType, EntityType, UserRole, WatchStatus
from ..infrastructure.persistence.models import ActorModel, ContentBase, MovieModel
from ..utils.helpers import page_count


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InitRequest(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None


class LoginRequest(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None


class ContentRef(CamelModel):
    id: int
    type: str


class EditRequest(ContentRef):
    data: dict[str, Any] = Field(default_factory=dict)


class FieldUpdateRequest(ContentRef):
    field: str
    value: Any = None


class VisibilityRequest(ContentRef):
    is_visible: Optional[bool] = None


class RatingRequest(ContentRef):
    rating: Optional[float] = None


class StatusRequest(ContentRef):
    watch_status: str


class ImportRequest(CamelModel):
    tmdb_id: int
    type: str
    process_images: bool = False


class RefreshRequest(CamelModel):
    movie_ids: Optional[list[int]] = None
    tv_show_ids: Optional[list[int]] = None
    refresh_all: bool = False


class ImageProcessRequest(CamelModel):
    content_id: int = Field(validation_alias=AliasChoices("contentId", "id", "content_id"))
    content_type: str = Field(validation_alias=AliasChoices("contentType", "type", "content_type"))


class ImageBatchRequest(CamelModel):
    limit: int = Field(default=10, ge=1, le=100)


class LogCreateRequest(CamelModel):
    action: str
    entity_type: str
    entity_id: Optional[int] = None
    description: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class ScheduledTaskRequest(CamelModel):
    action: Optional[str] = None
    enabled: bool = False
    cron_expression: Optional[str] = None


class ReviewRequest(CamelModel):
    rating: Optional[int] = None
    review: Optional[str] = None


class WatchStatusRequest(CamelModel):
    watch_status: Optional[str] = None


class TmdbImageRequest(CamelModel):
    tmdb_image_path: str = Field(
        validation_alias=AliasChoices("tmdbImagePath", "tmdbPath", "tmdb_image_path")
    )
    type: str
    tmdb_id: int = Field(validation_alias=AliasChoices("tmdbId", "id", "tmdb_id"))


class DoubanRatingRequest(CamelModel):
    content_id: int
    content_type: str
    title: Optional[str] = None


# ----------------------------------------------------------------------
# Reponses
# ----------------------------------------------------------------------


class OutModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class PaginationOut(OutModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationOut":
        return cls(page=page, limit=limit, total=total, total_pages=page_count(total, limit))


class UserOut(OutModel):
    id: int
    username: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: UserRole
    last_login_at: Optional[datetime] = None


class ContentCardOut(OutModel):
    """Champs affiches sur une carte de film ou de serie."""

    id: int
    tmdb_id: int
    poster_path: Optional[str] = None
    poster_url: Optional[str] = None
    backdrop_path: Optional[str] = None
    backdrop_url: Optional[str] = None
    douban_rating: Optional[float] = None
    tmdb_rating: Optional[float] = None
    watch_status: WatchStatus = WatchStatus.UNWATCHED
    is_visible: bool = True
    genres: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class MovieCardOut(ContentCardOut):
    type: Literal["movie"] = "movie"
    title: str
    original_title: Optional[str] = None
    release_date: Optional[date] = None


class TvShowCardOut(ContentCardOut):
    type: Literal["tv"] = "tv"
    name: str
    original_name: Optional[str] = None
    first_air_date: Optional[date] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None


class MovieOut(MovieCardOut):
    """Fiche complete d'un film."""

    overview: Optional[str] = None
    imdb_id: Optional[str] = None
    summary: Optional[str] = None
    play_url: Optional[str] = None
    runtime: Optional[int] = None
    updated_at: Optional[datetime] = None


class TvShowOut(TvShowCardOut):
    """Fiche complete d'une serie."""

    overview: Optional[str] = None
    imdb_id: Optional[str] = None
    summary: Optional[str] = None
    play_url: Optional[str] = None
    last_air_date: Optional[date] = None
    updated_at: Optional[datetime] = None


def content_card(content: ContentBase) -> MovieCardOut | TvShowCardOut:
    model = MovieCardOut if isinstance(content, MovieModel) else TvShowCardOut
    return model.model_validate(content)


def content_out(content: ContentBase) -> MovieOut | TvShowOut:
    model = MovieOut if isinstance(content, MovieModel) else TvShowOut
    return model.model_validate(content)


class ActorOut(OutModel):
    id: int
    tmdb_id: int
    name: str
    original_name: Optional[str] = None
    biography: Optional[str] = None
    birthday: Optional[date] = None
    deathday: Optional[date] = None
    gender: Optional[int] = None
    profile_path: Optional[str] = None
    profile_url: Optional[str] = None


class AdminActorOut(ActorOut):
    movie_roles: int = 0
    tv_roles: int = 0


class CastOut(OutModel):
    id: int
    character: Optional[str] = None
    order: int = 0
    actor: ActorOut

    @classmethod
    def from_row(cls, cast, actor: ActorModel) -> "CastOut":
        return cls(
            id=cast.id,
            character=cast.character,
            order=cast.order,
            actor=ActorOut.model_validate(actor),
        )


class ReviewAuthorOut(OutModel):
    id: int
    name: str = Field(validation_alias="display_name")


class ReviewOut(OutModel):
    id: int
    rating: Optional[int] = None
    review: Optional[str] = None
    user_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[ReviewAuthorOut] = None

    @classmethod
    def from_row(cls, review, user=None) -> "ReviewOut":
        out = cls.model_validate(review)
        if user is not None:
            out.user = ReviewAuthorOut.model_validate(user)
        return out


class MovieDetailOut(MovieOut):
    cast: list[CastOut] = Field(default_factory=list)
    reviews: list[ReviewOut] = Field(default_factory=list)


class TvShowDetailOut(TvShowOut):
    cast: list[CastOut] = Field(default_factory=list)
    reviews: list[ReviewOut] = Field(default_factory=list)


class LogOut(OutModel):
    id: int
    user_id: Optional[int] = None
    operator_name: Optional[str] = None
    action: str
    entity_type: EntityType
    entity_id: Optional[int] = None
    resource_id: Optional[int] = None
    resource_name: Optional[str] = None
    resource_type: Optional[str] = None
    description: str
    # SQLModel reserve l'attribut metadata (MetaData SQLAlchemy)
    log_metadata: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("log_metadata", "metadata"),
        serialization_alias="metadata",
    )
    created_at: Optional[datetime] = None


class TmdbSearchResultOut(OutModel):
    """Resultat de recherche TMDB (SearchResult des ports)."""

    id: int = Field(validation_alias="tmdb_id")
    title: str
    original_title: Optional[str] = None
    date: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    vote_average: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("rating", "voteAverage")
    )
    type: ContentType = Field(validation_alias="content_type")
    existing_id: Optional[int] = None


class TmdbCastOut(OutModel):
    id: int = Field(validation_alias="tmdb_id")
    name: str
    character: Optional[str] = None
    order: int = 0
    profile_path: Optional[str] = None


class TmdbDetailsOut(OutModel):
    """Details TMDB d'un film ou d'une serie (ContentDetails des ports)."""

    id: int = Field(validation_alias="tmdb_id")
    type: ContentType = Field(validation_alias="content_type")
    title: str
    original_title: Optional[str] = None
    overview: Optional[str] = None
    date: Optional[str] = None
    last_date: Optional[str] = None
    runtime: Optional[int] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None
    genres: list[str] = Field(default_factory=list)
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    imdb_id: Optional[str] = None
    vote_average: Optional[float] = None
    cast: list[TmdbCastOut] = Field(default_factory=list)
    existing_id: Optional[int] = None


# Enveloppes


class UserResponse(OutModel):
    success: bool = True
    user: UserOut


class LoginResponse(UserResponse):
    token: str


class ContentResponse(OutModel):
    success: bool = True
    content: MovieOut | TvShowOut = Field(discriminator="type")


class ContentLists(OutModel):
    movies: list[MovieCardOut]
    tv_shows: list[TvShowCardOut]


class LogListOut(OutModel):
    logs: list[LogOut]
    pagination: PaginationOut


class LogCreatedOut(OutModel):
    success: bool
    log: Optional[LogOut] = None


class AdminActorListOut(OutModel):
    actors: list[AdminActorOut]
    pagination: PaginationOut


class ReviewListOut(OutModel):
    reviews: list[ReviewOut]


class ReviewSavedOut(OutModel):
    success: bool = True
    review: ReviewOut


class WatchStatusOut(OutModel):
    success: bool = True
    watch_status: WatchStatus


class FilmographyRoleOut(OutModel):
    character: Optional[str] = None


class MovieRoleOut(MovieCardOut, FilmographyRoleOut):
    pass


class TvShowRoleOut(TvShowCardOut, FilmographyRoleOut):
    pass


class FilmographyOut(OutModel):
    actor: ActorOut
    movies: list[MovieRoleOut]
    tv_shows: list[TvShowRoleOut]


class TmdbSearchOut(OutModel):
    results: list[TmdbSearchResultOut]
    page: int


class SearchPaginationOut(OutModel):
    """Pagination commune : totaux par type de contenu (movies, tvShows, all)."""

    page: int
    limit: int
    total: dict[str, int]
    total_pages: dict[str, int]


class SearchOut(ContentLists):
    actor: Optional[ActorOut] = None
    pagination: SearchPaginationOut
