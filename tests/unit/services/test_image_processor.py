"""
Tests unitaires pour ImageProcessor.

Le stockage objet est simule : ces tests verifient les cles deposees, les
tailles TMDB demandees, l'idempotence et la tolerance aux erreurs.
"""

from unittest.mock import MagicMock

import pytest
from sqlmodel import Session, select

from src.core.exceptions import ServiceUnavailableError, StorageError
from src.core.value_objects import ContentType
from src.infrastructure.persistence.models import OperationLogModel
from src.services.image_processor import ImageProcessor


@pytest.fixture
def processor(session: Session, mock_storage: MagicMock) -> ImageProcessor:
    return ImageProcessor(session, mock_storage)


class TestProcessContent:
    @pytest.mark.asyncio
    async def test_copies_poster_and_backdrop(
        self, processor: ImageProcessor, mock_storage: MagicMock, make_movie
    ) -> None:
        movie = make_movie(tmdb_id=27205, poster_path="/p.jpg", backdrop_path="/b.jpg")

        assert await processor.process_content(movie)

        mock_storage.upload_from_url.assert_any_await(
            "https://image.tmdb.org/t/p/w500/p.jpg", "movie/27205/poster.jpg"
        )
        mock_storage.upload_from_url.assert_any_await(
            "https://image.tmdb.org/t/p/w1280/b.jpg", "movie/27205/backdrop.jpg"
        )
        assert movie.poster_url == "https://cdn.example.com/movie/27205/poster.jpg"

    @pytest.mark.asyncio
    async def test_skips_already_hosted(
        self, processor: ImageProcessor, mock_storage: MagicMock, make_tv_show
    ) -> None:
        show = make_tv_show(poster_path="/p.jpg", poster_url="https://cdn/p.jpg")

        assert not await processor.process_content(show)
        mock_storage.upload_from_url.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_actor_profile(
        self, processor: ImageProcessor, mock_storage: MagicMock, make_actor
    ) -> None:
        actor = make_actor(tmdb_id=6193, profile_path="/leo.jpg")

        assert await processor.process_actor(actor)

        mock_storage.upload_from_url.assert_awaited_once_with(
            "https://image.tmdb.org/t/p/w276_and_h350_face/leo.jpg", "actor/6193/profile.jpg"
        )


class TestProcessWithActors:
    @pytest.mark.asyncio
    async def test_storage_errors_are_collected(
        self, processor: ImageProcessor, mock_storage: MagicMock, make_movie, make_actor, add_role
    ) -> None:
        movie = make_movie(poster_path="/p.jpg")
        add_role(movie, make_actor(name="A", profile_path="/a.jpg"))
        mock_storage.upload_from_url.side_effect = StorageError("bucket unreachable")

        result = await processor.process_content_with_actors(movie)

        assert not result.content_processed
        assert result.actors_processed == 0
        assert len(result.errors) == 2

    @pytest.mark.asyncio
    async def test_unconfigured_storage_is_reported(
        self, processor: ImageProcessor, mock_storage: MagicMock, make_movie
    ) -> None:
        """Sans stockage configure, rien n'est telecharge et l'erreur est consignee."""
        movie = make_movie(poster_path="/p.jpg")
        mock_storage.enabled = False

        result = await processor.process_content_with_actors(movie)

        assert not result.content_processed
        assert result.errors == ["Object storage is not configured"]
        mock_storage.upload_from_url.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unavailable_storage_is_collected(
        self, processor: ImageProcessor, mock_storage: MagicMock, make_movie, make_actor, add_role
    ) -> None:
        movie = make_movie(poster_path="/p.jpg")
        add_role(movie, make_actor(name="A", profile_path="/a.jpg"))
        mock_storage.upload_from_url.side_effect = ServiceUnavailableError("bucket missing")

        result = await processor.process_content_with_actors(movie)

        assert result.actors_processed == 0
        assert len(result.errors) == 2

    @pytest.mark.asyncio
    async def test_process_by_id_logs(
        self, processor: ImageProcessor, session: Session, make_movie, make_actor, add_role
    ) -> None:
        movie = make_movie(poster_path="/p.jpg")
        add_role(movie, make_actor(profile_path="/a.jpg"))

        result = await processor.process_by_id(ContentType.MOVIE, movie.id)

        assert result.content_processed
        assert result.actors_processed == 1
        entry = session.exec(select(OperationLogModel)).one()
        assert entry.action == "PROCESS_IMAGES"
        assert entry.log_metadata["actorsProcessed"] == 1

    @pytest.mark.asyncio
    async def test_process_by_id_unknown(self, processor: ImageProcessor) -> None:
        assert await processor.process_by_id(ContentType.TV, 999) is None


class TestBatchProcess:
    @pytest.mark.asyncio
    async def test_batch_limits(
        self, processor: ImageProcessor, session: Session, make_movie, make_tv_show, make_actor
    ) -> None:
        """Un lot de 2 traite au plus 1 film, 1 serie et 2 acteurs."""
        for _ in range(3):
            make_movie(poster_path="/m.jpg")
            make_tv_show(poster_path="/t.jpg")
            make_actor(profile_path="/a.jpg")

        result = await processor.batch_process(limit=2)

        assert result.processed_content == 2
        assert result.processed_actors == 2
        entry = session.exec(select(OperationLogModel)).one()
        assert entry.action == "BATCH_PROCESS_IMAGES"
        assert entry.log_metadata["limit"] == 2

    @pytest.mark.asyncio
    async def test_batch_without_storage(
        self, processor: ImageProcessor, mock_storage: MagicMock, make_movie, make_actor
    ) -> None:
        make_movie(poster_path="/m.jpg")
        make_actor(profile_path="/a.jpg")
        mock_storage.enabled = False

        result = await processor.batch_process(limit=4)

        assert result.processed_content == 0
        assert result.processed_actors == 0
        assert result.errors == ["Object storage is not configured"]
        mock_storage.upload_from_url.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_batch_collects_unavailable_storage(
        self, processor: ImageProcessor, session: Session, mock_storage: MagicMock,
        make_movie, make_tv_show, make_actor,
    ) -> None:
        """Une erreur par element, le lot va jusqu'au bout et reste journalise."""
        make_movie(poster_path="/m.jpg")
        make_tv_show(poster_path="/t.jpg")
        make_actor(profile_path="/a.jpg")
        mock_storage.upload_from_url.side_effect = ServiceUnavailableError("bucket missing")

        result = await processor.batch_process(limit=4)

        assert len(result.errors) == 3
        entry = session.exec(select(OperationLogModel)).one()
        assert entry.action == "BATCH_PROCESS_IMAGES"
