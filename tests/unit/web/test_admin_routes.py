"""Tests des routes d'administration (/api/admin)."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from src.adapters.api.cache import APICache
from src.adapters.api.tmdb_client import TMDBClient
from src.adapters.storage.oss_storage import OSSStorage
from src.container import Container
from src.core.ports.api_clients import CastCredit, ContentDetails
from src.core.value_objects import ContentType
from src.infrastructure.persistence.models import MovieModel, OperationLogModel, TvShowModel


class TestAccessControl:
    @pytest.mark.parametrize("method,path", [
        ("get", "/api/admin/stats"),
        ("get", "/api/admin/movies"),
        ("get", "/api/admin/logs"),
        ("get", "/api/admin/scheduled-tasks"),
        ("post", "/api/admin/content/toggle-visibility"),
    ])
    def test_anonymous_rejected(self, client: TestClient, method: str, path: str) -> None:
        response = getattr(client, method)(path)

        assert response.status_code == 401

    def test_regular_user_rejected(self, client: TestClient, user_headers) -> None:
        response = client.get("/api/admin/stats", headers=user_headers)

        assert response.status_code == 401
        assert response.json() == {"error": "Admin access required"}


class TestDashboard:
    def test_stats(self, client: TestClient, admin_headers, make_movie, make_tv_show) -> None:
        make_movie(watch_status="WATCHED")
        make_movie()
        make_tv_show(watch_status="WATCHING")

        stats = client.get("/api/admin/stats", headers=admin_headers).json()

        assert stats["totalMovies"] == 2
        assert stats["watchedMovies"] == 1
        assert stats["watchingTvShows"] == 1
        assert stats["totalUsers"] == 1

    def test_movies_include_hidden(self, client: TestClient, admin_headers, make_movie) -> None:
        make_movie(is_visible=False)

        body = client.get("/api/admin/movies", headers=admin_headers).json()

        assert body["pagination"]["total"] == 1
        assert body["movies"][0]["isVisible"] is False


class TestImport:
    def test_import_movie(
        self, client: TestClient, admin_headers, mock_tmdb_client: MagicMock, session: Session
    ) -> None:
        mock_tmdb_client.get_details.return_value = ContentDetails(
            tmdb_id=27205,
            content_type=ContentType.MOVIE,
            title="盗梦空间",
            original_title="Inception",
            date="2010-07-15",
            genres=("动作", "科幻"),
        )
        mock_tmdb_client.get_credits.return_value = [
            CastCredit(tmdb_id=6193, name="莱昂纳多·迪卡普里奥", character="Dom Cobb")
        ]

        response = client.post(
            "/api/admin/content/import",
            headers=admin_headers,
            json={"tmdbId": 27205, "type": "movie"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["content"]["title"] == "盗梦空间"
        assert body["castImported"] == 1
        assert session.exec(select(MovieModel)).one().tmdb_id == 27205

    def test_import_duplicate(
        self, client: TestClient, admin_headers, make_movie
    ) -> None:
        movie = make_movie(tmdb_id=27205)

        response = client.post(
            "/api/admin/content/import",
            headers=admin_headers,
            json={"tmdbId": 27205, "type": "movie"},
        )

        assert response.status_code == 409
        assert response.json()["existingId"] == movie.id

    def test_import_unknown_type(self, client: TestClient, admin_headers) -> None:
        response = client.post(
            "/api/admin/content/import",
            headers=admin_headers,
            json={"tmdbId": 1, "type": "book"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid content type"}

    def test_import_with_images_without_storage(
        self,
        client: TestClient,
        admin_headers,
        container: Container,
        mock_tmdb_client: MagicMock,
        session: Session,
    ) -> None:
        """L'import reussit, l'echec des images est rapporte dans la reponse."""
        container.storage.override(providers.Object(OSSStorage(None, None, None)))
        mock_tmdb_client.get_details.return_value = ContentDetails(
            tmdb_id=27205,
            content_type=ContentType.MOVIE,
            title="盗梦空间",
            poster_path="/inception.jpg",
        )

        response = client.post(
            "/api/admin/content/import",
            headers=admin_headers,
            json={"tmdbId": 27205, "type": "movie", "processImages": True},
        )

        assert response.status_code == 200
        assert response.json()["images"]["errors"] == ["Object storage is not configured"]
        assert session.exec(select(MovieModel)).one().poster_url is None

    def test_import_without_tmdb_key(
        self,
        client: TestClient,
        admin_headers,
        container: Container,
        session: Session,
        tmp_path: Path,
    ) -> None:
        client_without_key = TMDBClient(api_key=None, cache=APICache(tmp_path / "tmdb"))
        container.tmdb_client.override(providers.Object(client_without_key))

        response = client.post(
            "/api/admin/content/import",
            headers=admin_headers,
            json={"tmdbId": 27205, "type": "movie"},
        )

        assert response.status_code == 503
        assert response.json() == {"error": "TMDB API key is not configured"}
        assert session.exec(select(MovieModel)).first() is None


class TestEdit:
    def test_edit_fields(
        self, client: TestClient, admin_headers, make_movie, session: Session
    ) -> None:
        movie = make_movie()

        response = client.patch(
            "/api/admin/content/edit",
            headers=admin_headers,
            json={
                "id": movie.id,
                "type": "movie",
                "data": {"summary": "Un reve dans un reve", "doubanRating": 9.4},
            },
        )

        assert response.status_code == 200
        assert response.json()["content"]["doubanRating"] == 9.4
        entry = session.exec(select(OperationLogModel)).one()
        assert entry.action == "UPDATE_CONTENT"
        assert entry.resource_name == "盗梦空间"

    def test_edit_unknown_field(self, client: TestClient, admin_headers, make_movie) -> None:
        movie = make_movie()

        response = client.patch(
            "/api/admin/content/edit",
            headers=admin_headers,
            json={"id": movie.id, "type": "movie", "data": {"tmdbId": 1}},
        )

        assert response.status_code == 400

    def test_edit_missing_content(self, client: TestClient, admin_headers) -> None:
        response = client.patch(
            "/api/admin/content/edit",
            headers=admin_headers,
            json={"id": 999, "type": "tv", "data": {"summary": "x"}},
        )

        assert response.status_code == 404
        assert response.json() == {"error": "TV show not found"}

    def test_patch_single_field(self, client: TestClient, admin_headers, make_tv_show) -> None:
        show = make_tv_show()

        response = client.patch(
            "/api/admin/content/manage",
            headers=admin_headers,
            json={"id": show.id, "type": "tv", "field": "numberOfSeasons", "value": 6},
        )

        assert response.status_code == 200
        assert response.json()["content"]["numberOfSeasons"] == 6

    def test_delete(
        self, client: TestClient, admin_headers, make_tv_show, session: Session
    ) -> None:
        show = make_tv_show()

        response = client.delete(
            "/api/admin/content/manage",
            headers=admin_headers,
            params={"id": show.id, "type": "tv"},
        )

        assert response.status_code == 200
        session.expire_all()
        assert session.exec(select(TvShowModel)).all() == []
        entry = session.exec(select(OperationLogModel)).one()
        assert entry.resource_name == "绝命毒师"


class TestVisibilityStatusRating:
    def test_toggle_visibility(self, client: TestClient, admin_headers, make_movie) -> None:
        movie = make_movie()
        payload = {"id": movie.id, "type": "movie"}

        first = client.post("/api/admin/content/toggle-visibility", headers=admin_headers, json=payload)
        forced = client.post(
            "/api/admin/content/toggle-visibility",
            headers=admin_headers,
            json={**payload, "isVisible": False},
        )

        assert first.json()["content"]["isVisible"] is False
        assert forced.json()["content"]["isVisible"] is False

    def test_update_status(self, client: TestClient, admin_headers, make_movie) -> None:
        movie = make_movie()

        response = client.post(
            "/api/admin/content/update-status",
            headers=admin_headers,
            json={"id": movie.id, "type": "movie", "watchStatus": "WATCHED"},
        )

        assert response.json()["content"]["watchStatus"] == "WATCHED"

    def test_update_rating_out_of_range(
        self, client: TestClient, admin_headers, make_movie
    ) -> None:
        movie = make_movie()

        response = client.post(
            "/api/admin/content/update-rating",
            headers=admin_headers,
            json={"id": movie.id, "type": "movie", "rating": 11},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Rating must be between 0 and 10"}

    def test_refresh_requires_ids(self, client: TestClient, admin_headers) -> None:
        response = client.post("/api/admin/content/refresh-tmdb", headers=admin_headers, json={})

        assert response.status_code == 400

    def test_refresh_without_tmdb_key(
        self, client: TestClient, admin_headers, container: Container, make_movie, tmp_path: Path
    ) -> None:
        movie = make_movie()
        client_without_key = TMDBClient(api_key=None, cache=APICache(tmp_path / "tmdb"))
        container.tmdb_client.override(providers.Object(client_without_key))

        response = client.post(
            "/api/admin/content/refresh-tmdb",
            headers=admin_headers,
            json={"movieIds": [movie.id]},
        )

        assert response.status_code == 503
        assert response.json() == {"error": "TMDB API key is not configured"}


class TestRequestValidation:
    def test_missing_body_field(self, client: TestClient, admin_headers) -> None:
        response = client.post(
            "/api/admin/content/toggle-visibility",
            headers=admin_headers,
            json={"type": "movie"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "id: Field required"}

    def test_query_out_of_range(self, client: TestClient, admin_headers) -> None:
        response = client.get("/api/admin/logs", headers=admin_headers, params={"page": 0})

        assert response.status_code == 400
        assert set(response.json()) == {"error"}
        assert response.json()["error"].startswith("page: ")


class TestLogs:
    def test_manual_entry_and_listing(self, client: TestClient, admin_headers) -> None:
        created = client.post(
            "/api/admin/logs",
            headers=admin_headers,
            json={
                "action": "NOTE",
                "entityType": "system",
                "description": "Maintenance",
                "metadata": {"ticket": 12},
            },
        )

        assert created.status_code == 200
        assert created.json()["log"]["operatorName"] == "Admin"
        assert created.json()["log"]["metadata"] == {"ticket": 12}

        body = client.get(
            "/api/admin/logs", headers=admin_headers, params={"entityType": "SYSTEM"}
        ).json()
        assert body["pagination"]["total"] == 1
        assert body["logs"][0]["action"] == "NOTE"
        assert body["logs"][0]["metadata"] == {"ticket": 12}

    def test_invalid_entity_type(self, client: TestClient, admin_headers) -> None:
        response = client.post(
            "/api/admin/logs",
            headers=admin_headers,
            json={"action": "NOTE", "entityType": "planet"},
        )

        assert response.status_code == 400


class TestScheduledTasks:
    def test_configure_then_status(self, client: TestClient, admin_headers) -> None:
        response = client.post(
            "/api/admin/scheduled-tasks",
            headers=admin_headers,
            json={"action": "configure", "enabled": True, "cronExpression": "0 4 * * *"},
        )

        assert response.json()["config"] == {"enabled": True, "cronExpression": "0 4 * * *"}
        status = client.get("/api/admin/scheduled-tasks", headers=admin_headers).json()
        assert status["enabled"] is True
        assert status["nextRun"] is not None

    def test_invalid_action(self, client: TestClient, admin_headers) -> None:
        response = client.post(
            "/api/admin/scheduled-tasks", headers=admin_headers, json={"action": "explode"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid action"}


class TestImages:
    def test_process_missing_content(self, client: TestClient, admin_headers) -> None:
        response = client.post(
            "/api/admin/images/process",
            headers=admin_headers,
            json={"contentId": 42, "contentType": "movie"},
        )

        assert response.status_code == 404
        assert response.json() == {"error": "Movie not found"}

    def test_process_uploads_poster(
        self, client: TestClient, admin_headers, make_movie, mock_storage: MagicMock
    ) -> None:
        movie = make_movie(poster_path="/inception.jpg")

        response = client.post(
            "/api/admin/images/process",
            headers=admin_headers,
            json={"id": movie.id, "type": "movie"},
        )

        assert response.status_code == 200
        assert mock_storage.upload_from_url.await_count >= 1

    def test_batch_without_body(self, client: TestClient, admin_headers) -> None:
        response = client.post("/api/admin/images/batch", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["success"] is True
