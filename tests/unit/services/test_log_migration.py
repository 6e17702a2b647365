"""
Tests unitaires pour OperationLogMigrator.

Les entrees historiques n'ont que movie_id / tv_show_id et entity_id :
la migration doit leur ajouter l'instantane sans retraiter les entrees
deja migrees.
"""

import json
from pathlib import Path

import pytest
from sqlmodel import Session

from src.core.value_objects import EntityType
from src.infrastructure.persistence.models import OperationLogModel
from src.services.log_migration import OperationLogMigrator


@pytest.fixture
def legacy_log(session: Session):
    """Cree une entree au format historique (sans instantane)."""

    def factory(**fields) -> OperationLogModel:
        values = {"action": "UPDATE_CONTENT", "entity_type": EntityType.MOVIE, "description": "d"}
        values.update(fields)
        entry = OperationLogModel(**values)
        session.add(entry)
        session.commit()
        session.refresh(entry)
        return entry

    return factory


class TestBuildSnapshot:
    def test_movie_link(self, session: Session, legacy_log, make_movie, make_user) -> None:
        movie = make_movie(tmdb_id=27205, title="盗梦空间")
        user = make_user("alice")
        entry = legacy_log(user_id=user.id, movie_id=movie.id, entity_id=movie.id)

        values = OperationLogMigrator(session).build_snapshot(entry, "2024-01-01T00:00:00")

        assert values["operator_name"] == "alice"
        assert values["resource_name"] == "盗梦空间"
        assert values["resource_type"] == "MOVIE"
        assert values["metadata"]["originalMovieId"] == movie.id
        assert values["metadata"]["tmdbId"] == 27205
        assert values["metadata"]["migrationDate"] == "2024-01-01T00:00:00"

    def test_tv_show_wins_over_movie(
        self, session: Session, legacy_log, make_movie, make_tv_show
    ) -> None:
        movie = make_movie()
        show = make_tv_show(name="绝命毒师")
        entry = legacy_log(movie_id=movie.id, tv_show_id=show.id)

        values = OperationLogMigrator(session).build_snapshot(entry, "now")

        assert values["resource_type"] == "TV_SHOW"
        assert values["resource_name"] == "绝命毒师"
        assert values["operator_name"] == "Unknown"

    def test_deleted_content_falls_back_to_entity(self, session: Session, legacy_log) -> None:
        entry = legacy_log(entity_type=EntityType.ACTOR, entity_id=77, movie_id=999)

        values = OperationLogMigrator(session).build_snapshot(entry, "now")

        assert values["resource_type"] == "ACTOR"
        assert values["resource_id"] == 77
        assert values["metadata"]["originalEntityId"] == 77


class TestMigrateInline:
    def test_is_idempotent(self, session: Session, legacy_log, make_movie) -> None:
        movie = make_movie()
        legacy_log(movie_id=movie.id)
        legacy_log(entity_type=EntityType.SYSTEM)
        legacy_log(operator_name="Admin", resource_type="MOVIE")
        migrator = OperationLogMigrator(session)

        first = migrator.migrate_inline()
        second = migrator.migrate_inline()

        assert first.migrated == 2
        assert first.remaining == 0
        assert first.errors == []
        assert second.migrated == 0


class TestExportSnapshot:
    def test_writes_files_without_touching_db(
        self, session: Session, legacy_log, make_movie, tmp_path: Path
    ) -> None:
        movie = make_movie()
        entry = legacy_log(movie_id=movie.id)

        result = OperationLogMigrator(session).export_snapshot(tmp_path / "export")

        assert result.count == 1
        assert result.by_resource_type == {"MOVIE": 1}
        payload = json.loads(result.json_path.read_text(encoding="utf-8"))
        assert payload["data"][0]["operator_name"] == "Unknown"
        assert "INSERT INTO operation_logs" in result.sql_path.read_text(encoding="utf-8")

        session.refresh(entry)
        assert entry.operator_name is None
