"""
Maintenance de la base : acteurs orphelins, analyses et verification.

Un acteur orphelin n'a plus aucun role (ni film ni serie), typiquement
apres la suppression du seul contenu ou il apparaissait. Leur suppression
est irreversible : elle exige une confirmation explicite et laisse un
rapport JSON des acteurs supprimes.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from sqlalchemy import func
from sqlmodel import Session, select

from src.core.exceptions import ValidationError
from src.core.value_objects import ContentType, EntityType
from src.infrastructure.persistence.models import ActorModel, OperationLogModel
from src.infrastructure.persistence.repositories import (
    SQLModelActorRepository,
    SQLModelContentRepository,
    SQLModelOperationLogRepository,
)
from src.services.backup import BACKUP_TABLES
from src.services.operation_logger import LogAction, OperationLogger


def _actor_summary(actor: ActorModel) -> dict[str, Any]:
    return {
        "id": actor.id,
        "name": actor.name,
        "tmdbId": actor.tmdb_id,
        "createdAt": actor.created_at.isoformat() if actor.created_at else None,
    }


@dataclass
class CleanupResult:
    """Bilan d'un nettoyage des acteurs orphelins."""

    deleted: int = 0
    actors: list[dict[str, Any]] = field(default_factory=list)
    report_path: Optional[Path] = None


@dataclass
class VerificationReport:
    """Resultat de la verification de coherence."""

    stats: dict[str, int]
    issues: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


class MaintenanceService:
    """Operations de maintenance lancees depuis la CLI."""

    def __init__(self, session: Session, report_dir: Path) -> None:
        self._session = session
        self._report_dir = Path(report_dir)
        self._actors = SQLModelActorRepository(session)
        self._contents = SQLModelContentRepository(session)
        self._logs = SQLModelOperationLogRepository(session)
        self._oplog = OperationLogger(session)

    def find_orphaned_actors(self) -> list[ActorModel]:
        return self._actors.list_orphans()

    def cleanup_orphaned_actors(
        self, confirm: bool = False, user_id: Optional[int] = None
    ) -> CleanupResult:
        """
        Supprime les acteurs orphelins.

        Raises:
            ValidationError: confirm n'est pas vrai
        """
        if not confirm:
            raise ValidationError("Deleting orphaned actors requires confirmation")

        orphans = self.find_orphaned_actors()
        result = CleanupResult(actors=[_actor_summary(actor) for actor in orphans])
        if not orphans:
            logger.info("Aucun acteur orphelin")
            return result

        result.deleted = self._actors.delete_many([actor.id for actor in orphans])

        now = datetime.now(timezone.utc)
        self._report_dir.mkdir(parents=True, exist_ok=True)
        result.report_path = self._report_dir / f"cleanup_log_{now:%Y-%m-%d_%H-%M-%S}.json"
        result.report_path.write_text(
            json.dumps(
                {
                    "timestamp": now.isoformat(),
                    "action": LogAction.CLEANUP_ORPHANED_ACTORS,
                    "deletedActors": result.actors,
                    "totalDeleted": result.deleted,
                },
                ensure_ascii=False,
                indent=2,
            ),
            encoding="utf-8",
        )

        self._oplog.log(
            LogAction.CLEANUP_ORPHANED_ACTORS,
            EntityType.ACTOR,
            f"Deleted {result.deleted} orphaned actors",
            user_id=user_id,
            metadata={
                "actorIds": [actor["id"] for actor in result.actors],
                "report": result.report_path.name,
            },
        )
        logger.info("Acteurs orphelins supprimes", count=result.deleted)
        return result

    def table_counts(self) -> dict[str, int]:
        return {
            key: self._session.exec(select(func.count()).select_from(model)).one()
            for key, model in BACKUP_TABLES.items()
        }

    def _snapshot_coverage(self) -> dict[str, int]:
        log = OperationLogModel
        return {
            "total": self._logs.count(),
            "withOperatorName": self._logs.count_where(log.operator_name != None),  # noqa: E711
            "withResourceId": self._logs.count_where(log.resource_id != None),  # noqa: E711
            "withResourceName": self._logs.count_where(log.resource_name != None),  # noqa: E711
            "withMetadata": self._logs.count_where(log.metadata_json != None),  # noqa: E711
        }

    def analyze_database(self) -> dict[str, Any]:
        """Comptages, orphelins, images manquantes et etat du journal."""
        orphans = self.find_orphaned_actors()
        return {
            "tables": self.table_counts(),
            "orphanedActors": [_actor_summary(actor) for actor in orphans],
            "missingImages": {
                "movies": self._contents.count_missing_images(ContentType.MOVIE),
                "tvShows": self._contents.count_missing_images(ContentType.TV),
                "actors": self._actors.count_missing_profile(),
            },
            "operationLogs": self._snapshot_coverage(),
        }

    def analyze_operation_logs(self, sample_size: int = 10) -> dict[str, Any]:
        """Repartition du journal par action, type d'entite et liaison historique."""
        log = OperationLogModel
        has_movie = log.movie_id != None  # noqa: E711
        has_tv = log.tv_show_id != None  # noqa: E711
        oldest, newest = self._logs.date_range()
        recent, _ = self._logs.list_page(1, sample_size)
        return {
            "total": self._logs.count(),
            "byAction": self._logs.count_by(log.action),
            "byEntityType": self._logs.count_by(log.entity_type),
            "legacyLinks": {
                "movieOnly": self._logs.count_where(has_movie, ~has_tv),
                "tvShowOnly": self._logs.count_where(has_tv, ~has_movie),
                "both": self._logs.count_where(has_movie, has_tv),
                "none": self._logs.count_where(~has_movie, ~has_tv),
            },
            "snapshot": self._snapshot_coverage(),
            "dateRange": {
                "oldest": oldest.isoformat() if oldest else None,
                "newest": newest.isoformat() if newest else None,
            },
            "recent": [
                {
                    "createdAt": entry.created_at.isoformat() if entry.created_at else None,
                    "action": entry.action,
                    "entityType": EntityType(entry.entity_type).value,
                    "operatorName": entry.operator_name,
                    "resourceName": entry.resource_name,
                    "description": entry.description,
                }
                for entry in recent
            ],
        }

    def verify_refactoring(self) -> VerificationReport:
        """Verifie que chaque entree du journal porte son instantane."""
        coverage = self._snapshot_coverage()
        stats = {**self.table_counts(), **coverage}
        report = VerificationReport(stats=stats)

        missing = coverage["total"] - coverage["withOperatorName"]
        if missing:
            report.issues.append(f"{missing} operation logs have no operator snapshot")
        orphans = len(self.find_orphaned_actors())
        if orphans:
            report.issues.append(f"{orphans} orphaned actors")
        return report
