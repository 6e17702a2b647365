"""
Taches planifiees : sauvegarde quotidienne et rafraichissement TMDB.

Le planificateur (APScheduler, declencheurs cron) tourne dans un processus
dedie lance par la commande `scheduler start`. La configuration du
rafraichissement automatique est modifiable depuis l'administration :
chaque changement est journalise (SCHEDULE_METADATA_UPDATE) et la derniere
entree de configuration fait foi, a defaut les valeurs de Settings.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger
from sqlmodel import Session

from src.config import Settings
from src.core.exceptions import ValidationError
from src.core.value_objects import EntityType
from src.infrastructure.persistence.repositories import SQLModelOperationLogRepository
from src.services.metadata_refresh import MetadataRefreshService, RefreshStats
from src.services.operation_logger import LogAction, LogDescriptionBuilder, OperationLogger

BACKUP_JOB_ID = "backup"
METADATA_JOB_ID = "metadata_update"


def validate_cron(expression: Optional[str], timezone: Optional[str] = None) -> CronTrigger:
    """
    Declencheur d'une expression cron a cinq champs.

    Raises:
        ValidationError: expression vide ou invalide
    """
    if not expression or not expression.strip():
        raise ValidationError("Cron expression is required")
    try:
        return CronTrigger.from_crontab(expression.strip(), timezone=timezone)
    except ValueError as e:
        raise ValidationError(f"Invalid cron expression: {e}") from None


def next_run(trigger: CronTrigger, now: Optional[datetime] = None) -> Optional[str]:
    """Prochaine execution d'un declencheur, au format ISO."""
    fire_time = trigger.get_next_fire_time(None, now or datetime.now(trigger.timezone))
    return fire_time.isoformat() if fire_time else None


@dataclass
class ScheduleConfig:
    """Configuration du rafraichissement automatique."""

    enabled: bool
    cron_expression: str


class ScheduledTaskService:
    """Configuration et execution manuelle des taches depuis l'administration."""

    def __init__(self, session: Session, settings: Settings) -> None:
        self._settings = settings
        self._logs = SQLModelOperationLogRepository(session)
        self._oplog = OperationLogger(session)

    def _recent_entries(self, action: str, limit: int = 50):
        entries, _ = self._logs.list_page(1, limit, action=action)
        return entries

    def current_config(self) -> ScheduleConfig:
        for entry in self._recent_entries(LogAction.SCHEDULE_METADATA_UPDATE):
            metadata = entry.log_metadata
            if "cronExpression" in metadata and "enabled" in metadata:
                return ScheduleConfig(bool(metadata["enabled"]), metadata["cronExpression"])
        return ScheduleConfig(
            self._settings.auto_update_enabled, self._settings.metadata_update_cron
        )

    def status(self) -> dict[str, Any]:
        """Etat des taches : configuration, prochaines et dernieres executions."""
        config = self.current_config()
        timezone = self._settings.scheduler_timezone

        last_refresh = next(
            (
                entry
                for entry in self._recent_entries(LogAction.SCHEDULE_METADATA_UPDATE)
                if "results" in entry.log_metadata
            ),
            None,
        )
        last_backup = self._logs.last_run([LogAction.SCHEDULED_BACKUP, LogAction.BACKUP_FAILED])

        return {
            "enabled": config.enabled,
            "cronExpression": config.cron_expression,
            "backupCron": self._settings.backup_cron,
            "timezone": timezone,
            "nextRun": (
                next_run(validate_cron(config.cron_expression, timezone))
                if config.enabled
                else None
            ),
            "nextBackup": next_run(validate_cron(self._settings.backup_cron, timezone)),
            "lastRun": last_refresh.created_at.isoformat() if last_refresh else None,
            "lastBackup": (
                {
                    "at": last_backup.created_at.isoformat(),
                    "success": last_backup.action == LogAction.SCHEDULED_BACKUP,
                }
                if last_backup
                else None
            ),
        }

    def configure(
        self, enabled: bool, cron_expression: str, user_id: Optional[int] = None
    ) -> ScheduleConfig:
        """Active ou desactive le rafraichissement automatique."""
        trigger_expression = cron_expression.strip() if cron_expression else ""
        validate_cron(trigger_expression, self._settings.scheduler_timezone)
        config = ScheduleConfig(bool(enabled), trigger_expression)
        self._oplog.log(
            LogAction.SCHEDULE_METADATA_UPDATE,
            EntityType.SYSTEM,
            LogDescriptionBuilder.scheduled_update(config.cron_expression, config.enabled),
            user_id=user_id,
            metadata={"cronExpression": config.cron_expression, "enabled": config.enabled},
        )
        return config

    async def execute(
        self, refresh_service: MetadataRefreshService, user_id: Optional[int] = None
    ) -> RefreshStats:
        """Lance immediatement un rafraichissement de tous les contenus visibles."""
        stats = await refresh_service.refresh(refresh_all=True, user_id=user_id)
        self._oplog.log(
            LogAction.SCHEDULE_METADATA_UPDATE,
            EntityType.SYSTEM,
            (
                f"Scheduled TMDB refresh completed: {stats.success} success, "
                f"{stats.failed} failed"
            ),
            user_id=user_id,
            metadata={"results": stats.to_dict()},
        )
        return stats


class TaskScheduler:
    """
    Planificateur des taches de fond.

    run_backup et run_refresh sont des callables synchrones ; chacun ouvre
    sa propre session. Une tache en echec est journalisee sans arreter le
    planificateur.
    """

    def __init__(
        self,
        settings: Settings,
        run_backup: Callable[[], Any],
        run_refresh: Optional[Callable[[], Any]] = None,
        schedule: Optional[ScheduleConfig] = None,
        scheduler: Optional[BaseScheduler] = None,
    ) -> None:
        self._settings = settings
        self._run_backup = run_backup
        self._run_refresh = run_refresh
        self._schedule = schedule or ScheduleConfig(
            settings.auto_update_enabled, settings.metadata_update_cron
        )
        self._scheduler = scheduler or BlockingScheduler(timezone=settings.scheduler_timezone)
        self._triggers: dict[str, CronTrigger] = {}

    def _guarded(self, name: str, func: Callable[[], Any]) -> Callable[[], None]:
        def job() -> None:
            logger.info("Tache planifiee demarree", task=name)
            try:
                func()
            except Exception:
                logger.exception("Echec de la tache planifiee", task=name)
            else:
                logger.info("Tache planifiee terminee", task=name)

        return job

    def register(self) -> list[str]:
        """Enregistre les taches et retourne leurs identifiants."""
        timezone = self._settings.scheduler_timezone
        self._triggers[BACKUP_JOB_ID] = validate_cron(self._settings.backup_cron, timezone)
        if self._schedule.enabled and self._run_refresh is not None:
            self._triggers[METADATA_JOB_ID] = validate_cron(
                self._schedule.cron_expression, timezone
            )

        jobs = {BACKUP_JOB_ID: self._run_backup, METADATA_JOB_ID: self._run_refresh}
        for job_id, trigger in self._triggers.items():
            self._scheduler.add_job(
                self._guarded(job_id, jobs[job_id]),
                trigger,
                id=job_id,
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
            logger.info("Tache planifiee enregistree", task=job_id, next_run=next_run(trigger))
        return list(self._triggers)

    def start(self) -> None:
        """Demarre le planificateur (bloquant jusqu'a Ctrl+C)."""
        self.register()
        try:
            self._scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            self.stop()

    def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        logger.info("Planificateur arrete")

    def run_backup_now(self) -> None:
        """Execute la sauvegarde immediatement ; les erreurs sont propagees."""
        logger.info("Sauvegarde manuelle")
        self._run_backup()

    def status(self) -> dict[str, dict[str, Optional[str]]]:
        return {
            job_id: {"nextRun": next_run(trigger)}
            for job_id, trigger in self._triggers.items()
        }
