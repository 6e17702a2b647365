"""
Tests unitaires pour MetadataRefreshService.
"""

from unittest.mock import MagicMock

import httpx
import pytest
from sqlmodel import Session, select

from src.core.ports.api_clients import ContentDetails
from src.core.value_objects import ContentType, WatchStatus
from src.infrastructure.persistence.models import OperationLogModel
from src.services.metadata_refresh import MetadataRefreshService, apply_details


def _details(tmdb_id: int, **fields) -> ContentDetails:
    values = dict(
        tmdb_id=tmdb_id,
        content_type=ContentType.MOVIE,
        title="盗梦空间 (重映)",
        original_title="Inception",
        date="2010-07-15",
        runtime=150,
        genres=("科幻",),
        poster_path="/new.jpg",
        backdrop_path="/b.jpg",
        vote_average=8.8,
    )
    values.update(fields)
    return ContentDetails(**values)


class TestApplyDetails:
    def test_preserves_admin_fields(self, make_movie) -> None:
        movie = make_movie(
            watch_status=WatchStatus.WATCHED,
            douban_rating=9.3,
            summary="Chef-d'oeuvre",
            is_visible=False,
            poster_path="/old.jpg",
            poster_url="https://cdn/old.jpg",
            backdrop_path="/b.jpg",
            backdrop_url="https://cdn/b.jpg",
        )

        apply_details(movie, _details(movie.tmdb_id), "zh-CN")

        assert movie.title == "盗梦空间 (重映)"
        assert movie.runtime == 150
        assert movie.watch_status is WatchStatus.WATCHED
        assert movie.douban_rating == 9.3
        assert movie.summary == "Chef-d'oeuvre"
        assert movie.is_visible is False
        # Nouveau poster : l'URL hebergee est videe, le backdrop est conserve
        assert movie.poster_url is None
        assert movie.backdrop_url == "https://cdn/b.jpg"


class TestMetadataRefreshService:
    """Tests pour MetadataRefreshService.refresh()."""

    @pytest.mark.asyncio
    async def test_single_refresh_logged(
        self, session: Session, mock_tmdb_client: MagicMock, make_movie
    ) -> None:
        movie = make_movie()
        mock_tmdb_client.refresh_details.return_value = _details(movie.tmdb_id)
        service = MetadataRefreshService(session, mock_tmdb_client)

        stats = await service.refresh(movie_ids=[movie.id])

        assert (stats.success, stats.failed) == (1, 0)
        entry = session.exec(select(OperationLogModel)).one()
        assert entry.action == "REFRESH_TMDB_METADATA"

    @pytest.mark.asyncio
    async def test_batch_with_failures(
        self, session: Session, mock_tmdb_client: MagicMock, make_movie
    ) -> None:
        ok = make_movie()
        gone = make_movie()
        broken = make_movie()

        async def refresh_details(content_type, tmdb_id):
            if tmdb_id == gone.tmdb_id:
                return None
            if tmdb_id == broken.tmdb_id:
                raise httpx.ConnectError("down")
            return _details(tmdb_id)

        mock_tmdb_client.refresh_details.side_effect = refresh_details
        service = MetadataRefreshService(session, mock_tmdb_client)

        stats = await service.refresh(movie_ids=[ok.id, gone.id, broken.id, 999])

        assert stats.success == 1
        assert stats.failed == 3
        assert len(stats.errors) == 3
        entry = session.exec(select(OperationLogModel)).one()
        assert entry.action == "BATCH_REFRESH_TMDB"
        assert entry.log_metadata["failed"] == 3

    @pytest.mark.asyncio
    async def test_refresh_all_only_visible(
        self, session: Session, mock_tmdb_client: MagicMock, make_movie, make_tv_show
    ) -> None:
        make_movie()
        make_movie(is_visible=False)
        show = make_tv_show()

        async def refresh_details(content_type, tmdb_id):
            return _details(tmdb_id, content_type=content_type, title="x")

        mock_tmdb_client.refresh_details.side_effect = refresh_details
        service = MetadataRefreshService(session, mock_tmdb_client)

        stats = await service.refresh(refresh_all=True)

        assert stats.success == 2
        assert show.name == "x"
