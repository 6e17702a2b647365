"""
Sauvegarde complete de la base.

Chaque sauvegarde produit deux fichiers dans backup_dir :

- backup_{horodatage}.json : {"backupDate", "version": "2.0", "stats", "data"}
- backup_{horodatage}.sql  : instructions INSERT rendues pour le dialecte
  du moteur courant (identifiants et chaines echappes par SQLAlchemy)

Les deux fichiers sont ensuite deposes sur le stockage objet sous
backup/{YYYY-MM-DD}/, puis seuls les backup_keep fichiers les plus recents
sont conserves localement.
"""

import json
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from sqlalchemy import Boolean, String
from sqlalchemy.engine import Dialect
from sqlmodel import Session, SQLModel, select

from src.core.ports.storage import IObjectStorage
from src.core.value_objects import EntityType
from src.infrastructure.persistence.models import (
    ActorModel,
    MovieCastModel,
    MovieModel,
    MovieReviewModel,
    OperationLogModel,
    TvCastModel,
    TvReviewModel,
    TvShowModel,
    UserModel,
)
from src.services.operation_logger import SYSTEM_OPERATOR, LogAction, OperationLogger

BACKUP_FORMAT_VERSION = "2.0"

# Ordre d'insertion compatible avec les cles etrangeres
BACKUP_TABLES: dict[str, type[SQLModel]] = {
    "users": UserModel,
    "movies": MovieModel,
    "tvShows": TvShowModel,
    "actors": ActorModel,
    "movieCast": MovieCastModel,
    "tvCast": TvCastModel,
    "movieReviews": MovieReviewModel,
    "tvReviews": TvReviewModel,
    "operationLogs": OperationLogModel,
}


@dataclass
class BackupResult:
    """Fichiers produits par une sauvegarde."""

    json_path: Path
    sql_path: Path
    stats: dict[str, int]
    remote_keys: list[str] = field(default_factory=list)
    duration: float = 0.0


def sql_literal(value: Any, dialect: Dialect) -> str:
    """Rend une valeur Python comme litteral SQL du dialecte donne."""
    if value is None:
        return "NULL"
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return Boolean().literal_processor(dialect)(value)
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, datetime):
        value = value.isoformat(sep=" ")
    elif isinstance(value, date):
        value = value.isoformat()
    return String().literal_processor(dialect)(str(value))


def render_inserts(model: type[SQLModel], rows: list[SQLModel], dialect: Dialect) -> list[str]:
    """Instructions INSERT d'une table, une par ligne."""
    table = model.__table__
    quote = dialect.identifier_preparer.quote
    columns = [column.name for column in table.columns]
    column_list = ", ".join(quote(name) for name in columns)
    return [
        f"INSERT INTO {quote(table.name)} ({column_list}) VALUES ("
        + ", ".join(sql_literal(getattr(row, name), dialect) for name in columns)
        + ");"
        for row in rows
    ]


class BackupService:
    """Sauvegarde la base en JSON et en SQL, localement et sur le stockage objet."""

    def __init__(
        self,
        session: Session,
        storage: Optional[IObjectStorage],
        backup_dir: Path,
        keep: int = 6,
    ) -> None:
        self._session = session
        self._storage = storage
        self._backup_dir = Path(backup_dir)
        self._keep = keep
        self._oplog = OperationLogger(session)

    def collect(self) -> dict[str, list[SQLModel]]:
        """Toutes les lignes de chaque table sauvegardee, par ID croissant."""
        return {
            key: list(self._session.exec(select(model).order_by(model.id)).all())
            for key, model in BACKUP_TABLES.items()
        }

    def render_sql(self, data: dict[str, list[SQLModel]], started: datetime) -> str:
        dialect = self._session.get_bind().dialect
        lines = [
            "-- Watch List database backup",
            f"-- Created: {started.isoformat()}",
            f"-- Dialect: {dialect.name}",
            "",
        ]
        for key, model in BACKUP_TABLES.items():
            rows = data[key]
            if not rows:
                continue
            lines.append(f"-- {model.__tablename__}")
            lines.extend(render_inserts(model, rows, dialect))
            lines.append("")
        return "\n".join(lines)

    @staticmethod
    def render_json(data: dict[str, list[SQLModel]], started: datetime) -> str:
        payload = {
            "backupDate": started.isoformat(),
            "version": BACKUP_FORMAT_VERSION,
            "stats": {key: len(rows) for key, rows in data.items()},
            "data": {
                key: [row.model_dump(mode="json") for row in rows]
                for key, rows in data.items()
            },
        }
        return json.dumps(payload, ensure_ascii=False, indent=2)

    async def run(self) -> BackupResult:
        """
        Execute une sauvegarde complete.

        Un echec est journalise (BACKUP_FAILED) puis l'exception est relevee.
        """
        started = datetime.now(timezone.utc)
        clock = time.monotonic()
        try:
            result = await self._run(started)
        except Exception as e:
            logger.exception("Echec de la sauvegarde")
            self._oplog.log(
                LogAction.BACKUP_FAILED,
                EntityType.SYSTEM,
                f"Scheduled backup failed: {e}",
                operator_name=SYSTEM_OPERATOR,
                resource_name="DATABASE",
                metadata={"error": str(e), "timestamp": started.isoformat()},
            )
            raise

        result.duration = round(time.monotonic() - clock, 3)
        self._oplog.log(
            LogAction.SCHEDULED_BACKUP,
            EntityType.SYSTEM,
            (
                f"Scheduled backup completed: {result.stats['movies']} movies, "
                f"{result.stats['tvShows']} TV shows, {result.stats['actors']} actors"
            ),
            operator_name=SYSTEM_OPERATOR,
            resource_name="DATABASE",
            metadata={
                "backupDate": started.date().isoformat(),
                "sqlFile": result.remote_keys[0] if result.remote_keys else str(result.sql_path),
                "jsonFile": result.remote_keys[1] if result.remote_keys else str(result.json_path),
                "stats": result.stats,
                "duration": result.duration,
            },
        )
        logger.info("Sauvegarde terminee", duration=result.duration, **result.stats)
        return result

    async def _run(self, started: datetime) -> BackupResult:
        data = self.collect()
        stamp = started.strftime("%Y-%m-%d_%H-%M-%S")
        self._backup_dir.mkdir(parents=True, exist_ok=True)

        sql_path = self._backup_dir / f"backup_{stamp}.sql"
        json_path = self._backup_dir / f"backup_{stamp}.json"
        sql_path.write_text(self.render_sql(data, started), encoding="utf-8")
        json_path.write_text(self.render_json(data, started), encoding="utf-8")

        result = BackupResult(
            json_path=json_path,
            sql_path=sql_path,
            stats={key: len(rows) for key, rows in data.items()},
        )

        if self._storage is not None:
            remote_dir = f"backup/{started.date().isoformat()}"
            for path in (sql_path, json_path):
                key = f"{remote_dir}/{path.name}"
                await self._storage.upload_file(path, key)
                result.remote_keys.append(key)
        else:
            logger.warning("Stockage objet non configure, sauvegarde locale uniquement")

        self.prune()
        return result

    def prune(self) -> list[Path]:
        """Ne garde que les keep sauvegardes les plus recentes de chaque format."""
        removed = []
        for suffix in (".sql", ".json"):
            files = sorted(
                self._backup_dir.glob(f"backup_*{suffix}"),
                key=lambda path: (path.stat().st_mtime, path.name),
                reverse=True,
            )
            for path in files[self._keep:]:
                path.unlink()
                removed.append(path)
                logger.info("Ancienne sauvegarde supprimee", file=path.name)
        return removed
