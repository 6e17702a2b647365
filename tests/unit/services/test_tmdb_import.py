"""
Tests unitaires pour TMDBImportService.

Le client TMDB est simule (AsyncMock) : ces tests verifient la creation de
la fiche, l'import du casting, la reutilisation des acteurs connus et le
journal de l'import.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlmodel import Session, select

from src.core.exceptions import ContentAlreadyExistsError, NotFoundError
from src.core.ports.api_clients import CastCredit, ContentDetails
from src.core.value_objects import ContentType
from src.infrastructure.persistence.models import ActorModel, OperationLogModel
from src.services.image_processor import ContentImagesResult, ImageProcessor
from src.services.tmdb_import import TMDBImportService, build_content

MOVIE_DETAILS = ContentDetails(
    tmdb_id=27205,
    content_type=ContentType.MOVIE,
    title="盗梦空间",
    original_title="Inception",
    overview="道姆·柯布...",
    date="2010-07-15",
    runtime=148,
    genres=("动作", "Sci-Fi & Fantasy", "科幻"),
    poster_path="/poster.jpg",
    backdrop_path="/backdrop.jpg",
    imdb_id="tt1375666",
    vote_average=8.4,
)

TV_DETAILS = ContentDetails(
    tmdb_id=1396,
    content_type=ContentType.TV,
    title="绝命毒师",
    original_title="Breaking Bad",
    date="2008-01-20",
    last_date="2013-09-29",
    number_of_seasons=5,
    number_of_episodes=62,
    genres=("剧情",),
)


def _credit(tmdb_id: int, name: str, order: int) -> CastCredit:
    return CastCredit(
        tmdb_id=tmdb_id,
        name=name,
        original_name=name,
        character=f"Role {order}",
        order=order,
        profile_path=f"/{tmdb_id}.jpg",
        gender=2,
    )


class TestBuildContent:
    def test_movie(self) -> None:
        movie = build_content(MOVIE_DETAILS, "zh-CN")
        assert movie.title == "盗梦空间"
        assert movie.release_date.year == 2010
        assert movie.genres == ["动作", "科幻"]
        assert movie.tmdb_rating == 8.4

    def test_tv_show(self) -> None:
        show = build_content(TV_DETAILS, "zh-CN")
        assert show.name == "绝命毒师"
        assert show.last_air_date.year == 2013
        assert show.number_of_seasons == 5


class TestTMDBImportService:
    """Tests pour TMDBImportService.import_content()."""

    @pytest.fixture
    def service(self, session: Session, mock_tmdb_client: MagicMock) -> TMDBImportService:
        mock_tmdb_client.get_details.return_value = MOVIE_DETAILS
        mock_tmdb_client.get_credits.return_value = [
            _credit(100 + i, f"Actor {i}", i) for i in range(12)
        ]
        return TMDBImportService(session, mock_tmdb_client)

    @pytest.mark.asyncio
    async def test_imports_content_and_first_ten_actors(
        self, service: TMDBImportService, session: Session
    ) -> None:
        result = await service.import_content(ContentType.MOVIE, 27205, user_id=None)

        assert result.content.id is not None
        assert result.content.title == "盗梦空间"
        assert result.cast_imported == 10
        assert result.cast_errors == []
        assert len(session.exec(select(ActorModel)).all()) == 10

    @pytest.mark.asyncio
    async def test_reuses_known_actors(
        self, service: TMDBImportService, session: Session, make_actor
    ) -> None:
        known = make_actor(tmdb_id=100, name="Actor 0")

        result = await service.import_content(ContentType.MOVIE, 27205)

        assert result.cast_imported == 10
        actors = session.exec(select(ActorModel).where(ActorModel.tmdb_id == 100)).all()
        assert [a.id for a in actors] == [known.id]

    @pytest.mark.asyncio
    async def test_duplicate_raises_with_existing_id(
        self, service: TMDBImportService, make_movie
    ) -> None:
        existing = make_movie(tmdb_id=27205)

        with pytest.raises(ContentAlreadyExistsError) as exc_info:
            await service.import_content(ContentType.MOVIE, 27205)

        assert exc_info.value.existing_id == existing.id

    @pytest.mark.asyncio
    async def test_unknown_tmdb_id(
        self, service: TMDBImportService, mock_tmdb_client: MagicMock
    ) -> None:
        mock_tmdb_client.get_details.return_value = None

        with pytest.raises(NotFoundError, match="TMDB movie 1 not found"):
            await service.import_content(ContentType.MOVIE, 1)

    @pytest.mark.asyncio
    async def test_import_is_logged(
        self, service: TMDBImportService, session: Session, admin_user
    ) -> None:
        await service.import_content(ContentType.MOVIE, 27205, user_id=admin_user.id)

        entry = session.exec(select(OperationLogModel)).one()
        assert entry.action == "IMPORT_FROM_TMDB"
        assert entry.operator_name == "Admin"
        assert entry.resource_name == "盗梦空间"
        assert entry.log_metadata["castImported"] == 10

    @pytest.mark.asyncio
    async def test_process_images_on_demand(
        self, session: Session, mock_tmdb_client: MagicMock
    ) -> None:
        mock_tmdb_client.get_details.return_value = TV_DETAILS
        processor = MagicMock(spec=ImageProcessor)
        processor.process_content_with_actors = AsyncMock(
            return_value=ContentImagesResult(content_processed=True)
        )
        service = TMDBImportService(session, mock_tmdb_client, image_processor=processor)

        result = await service.import_content(ContentType.TV, 1396, process_images=True)

        processor.process_content_with_actors.assert_awaited_once()
        assert result.images.content_processed
        assert result.cast_imported == 0
