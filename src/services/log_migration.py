"""
Migration du journal des operations vers le format denormalise.

Les anciennes entrees ne referencaient leur contenu que par movie_id ou
tv_show_id. La migration leur ajoute l'instantane (operator_name,
resource_id, resource_name, resource_type) et complete les metadonnees
avec les identifiants d'origine.

- export_snapshot : ecrit une copie migree en JSON et en SQL, sans toucher a la base
- migrate_inline : met a jour en place les entrees sans operator_name ;
  relancee, elle ne retraite rien
"""

import json
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from src.core.value_objects import ContentType, EntityType
from src.infrastructure.persistence.models import OperationLogModel
from src.infrastructure.persistence.repositories import (
    SQLModelContentRepository,
    SQLModelOperationLogRepository,
    SQLModelUserRepository,
)
from src.services.backup import render_inserts
from src.services.operation_logger import UNKNOWN_OPERATOR


@dataclass
class MigrationReport:
    """Bilan d'une migration en place."""

    migrated: int = 0
    errors: list[str] = field(default_factory=list)
    remaining: int = 0
    by_resource_type: dict[str, int] = field(default_factory=dict)


@dataclass
class ExportResult:
    json_path: Path
    sql_path: Path
    count: int
    by_resource_type: dict[str, int] = field(default_factory=dict)


class OperationLogMigrator:
    """Denormalise les entrees historiques du journal."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._logs = SQLModelOperationLogRepository(session)
        self._users = SQLModelUserRepository(session)
        self._contents = SQLModelContentRepository(session)

    def build_snapshot(self, entry: OperationLogModel, migrated_at: str) -> dict[str, Any]:
        """
        Valeurs d'instantane d'une entree.

        Le contenu lie par tv_show_id l'emporte sur celui lie par movie_id ;
        sans contenu retrouve, l'instantane reprend entity_type et entity_id.
        """
        user = self._users.get_by_id(entry.user_id) if entry.user_id is not None else None
        values: dict[str, Any] = {
            "operator_name": user.username if user else UNKNOWN_OPERATOR,
        }
        metadata = dict(entry.log_metadata)

        if entry.movie_id is not None:
            movie = self._contents.get_by_id(ContentType.MOVIE, entry.movie_id)
            if movie is not None:
                values.update(
                    resource_id=movie.id,
                    resource_name=movie.display_title,
                    resource_type=EntityType.MOVIE.value,
                )
                metadata.update(originalMovieId=entry.movie_id, tmdbId=movie.tmdb_id)

        if entry.tv_show_id is not None:
            tv_show = self._contents.get_by_id(ContentType.TV, entry.tv_show_id)
            if tv_show is not None:
                values.update(
                    resource_id=tv_show.id,
                    resource_name=tv_show.display_title,
                    resource_type=EntityType.TV_SHOW.value,
                )
                metadata.update(originalTvShowId=entry.tv_show_id, tmdbId=tv_show.tmdb_id)

        if "resource_type" not in values:
            values.update(
                resource_id=entry.resource_id if entry.resource_id is not None else entry.entity_id,
                resource_name=entry.resource_name,
                resource_type=EntityType(entry.entity_type).value,
            )
            if entry.entity_id is not None:
                metadata.setdefault("originalEntityId", entry.entity_id)

        metadata["migrationDate"] = migrated_at
        values["metadata"] = metadata
        return values

    @staticmethod
    def _apply(entry: OperationLogModel, values: dict[str, Any]) -> None:
        entry.operator_name = values["operator_name"]
        entry.resource_id = values["resource_id"]
        entry.resource_name = values["resource_name"]
        entry.resource_type = values["resource_type"]
        entry.log_metadata = values["metadata"]

    def migrate_inline(self) -> MigrationReport:
        """Complete en place les entrees dont operator_name est vide."""
        migrated_at = datetime.now(timezone.utc).isoformat()
        report = MigrationReport()
        pending = list(self._logs.list_without_snapshot())
        logger.info("Migration du journal", pending=len(pending))

        for entry in pending:
            try:
                self._apply(entry, self.build_snapshot(entry, migrated_at))
                self._logs.save_many([entry])
                report.migrated += 1
            except SQLAlchemyError as e:
                self._session.rollback()
                report.errors.append(f"log {entry.id}: {e}")
                logger.warning("Echec de migration d'une entree", log_id=entry.id, error=str(e))

        report.remaining = len(self._logs.list_without_snapshot())
        report.by_resource_type = self._logs.count_by(OperationLogModel.resource_type)
        logger.info(
            "Migration du journal terminee",
            migrated=report.migrated,
            errors=len(report.errors),
            remaining=report.remaining,
        )
        return report

    def export_snapshot(self, output_dir: Path) -> ExportResult:
        """
        Ecrit une copie migree de tout le journal, sans modifier la base.

        Produit operation_log_migration_{horodatage}.json et .sql.
        """
        now = datetime.now(timezone.utc)
        migrated_at = now.isoformat()
        copies = []
        for entry in self._logs.list_all():
            copy = OperationLogModel(**entry.model_dump())
            if entry.operator_name is None:
                self._apply(copy, self.build_snapshot(entry, migrated_at))
            copies.append(copy)

        by_type = Counter(copy.resource_type or "NONE" for copy in copies)
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        stamp = now.strftime("%Y-%m-%d_%H-%M-%S")
        json_path = output_dir / f"operation_log_migration_{stamp}.json"
        sql_path = output_dir / f"operation_log_migration_{stamp}.sql"

        json_path.write_text(
            json.dumps(
                {
                    "migrationDate": migrated_at,
                    "recordCount": len(copies),
                    "stats": dict(by_type),
                    "data": [copy.model_dump(mode="json") for copy in copies],
                },
                ensure_ascii=False,
                indent=2,
            ),
            encoding="utf-8",
        )
        dialect = self._session.get_bind().dialect
        sql_path.write_text(
            "\n".join(
                ["-- operation_logs, migrated copy", f"-- Created: {migrated_at}", ""]
                + render_inserts(OperationLogModel, copies, dialect)
            )
            + "\n",
            encoding="utf-8",
        )
        logger.info("Export du journal ecrit", json=str(json_path), count=len(copies))
        return ExportResult(json_path, sql_path, len(copies), dict(by_type))
