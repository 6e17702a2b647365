"""
Tests unitaires pour MaintenanceService.
"""

import json
from pathlib import Path

import pytest
from sqlmodel import Session, select

from src.core.exceptions import ValidationError
from src.core.value_objects import EntityType
from src.infrastructure.persistence.models import ActorModel, OperationLogModel
from src.services.maintenance import MaintenanceService


@pytest.fixture
def service(session: Session, tmp_path: Path) -> MaintenanceService:
    return MaintenanceService(session, report_dir=tmp_path / "reports")


class TestOrphanedActors:
    """Detection et suppression des acteurs sans role."""

    def test_find_orphans(self, service, make_movie, make_actor, add_role) -> None:
        movie = make_movie()
        cast = make_actor(name="莱昂纳多·迪卡普里奥")
        orphan = make_actor(name="Nobody")
        add_role(movie, cast)

        assert [a.id for a in service.find_orphaned_actors()] == [orphan.id]

    def test_cleanup_requires_confirmation(self, service, make_actor) -> None:
        make_actor()

        with pytest.raises(ValidationError):
            service.cleanup_orphaned_actors()

    def test_cleanup_deletes_and_reports(
        self, service, session: Session, make_actor, make_tv_show, add_role
    ) -> None:
        show = make_tv_show()
        kept = make_actor()
        orphan = make_actor(name="Nobody")
        add_role(show, kept)

        result = service.cleanup_orphaned_actors(confirm=True)

        assert result.deleted == 1
        assert [a["id"] for a in result.actors] == [orphan.id]
        report = json.loads(result.report_path.read_text(encoding="utf-8"))
        assert report["totalDeleted"] == 1
        assert report["deletedActors"][0]["name"] == "Nobody"

        session.expire_all()
        assert [a.id for a in session.exec(select(ActorModel)).all()] == [kept.id]
        entry = session.exec(select(OperationLogModel)).one()
        assert entry.action == "CLEANUP_ORPHANED_ACTORS"
        assert entry.log_metadata["actorIds"] == [orphan.id]

    def test_cleanup_without_orphans(self, service) -> None:
        result = service.cleanup_orphaned_actors(confirm=True)

        assert result.deleted == 0
        assert result.report_path is None


class TestAnalyses:
    def test_analyze_database(self, service, make_movie, make_actor) -> None:
        make_movie(poster_path="/inception.jpg")
        make_actor(profile_url=None)

        analysis = service.analyze_database()

        assert analysis["tables"]["movies"] == 1
        assert analysis["tables"]["actors"] == 1
        assert analysis["missingImages"]["movies"] == 1
        assert len(analysis["orphanedActors"]) == 1
        assert analysis["operationLogs"]["total"] == 0

    def test_analyze_operation_logs(self, service, session: Session) -> None:
        session.add(OperationLogModel(
            action="UPDATE_CONTENT", entity_type=EntityType.MOVIE, description="a", movie_id=1
        ))
        session.add(OperationLogModel(
            action="LOGIN", entity_type=EntityType.USER, description="b", operator_name="alice"
        ))
        session.commit()

        analysis = service.analyze_operation_logs(sample_size=1)

        assert analysis["total"] == 2
        assert analysis["byAction"] == {"UPDATE_CONTENT": 1, "LOGIN": 1}
        assert analysis["legacyLinks"]["movieOnly"] == 1
        assert analysis["legacyLinks"]["none"] == 1
        assert analysis["snapshot"]["withOperatorName"] == 1
        assert len(analysis["recent"]) == 1


class TestVerifyRefactoring:
    def test_clean_database(self, service) -> None:
        report = service.verify_refactoring()

        assert report.ok
        assert report.stats["total"] == 0

    def test_reports_missing_snapshots(self, service, session: Session, make_actor) -> None:
        make_actor()
        session.add(OperationLogModel(
            action="UPDATE_CONTENT", entity_type=EntityType.MOVIE, description="a"
        ))
        session.commit()

        report = service.verify_refactoring()

        assert not report.ok
        assert len(report.issues) == 2
