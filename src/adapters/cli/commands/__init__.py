"""Sous-package CLI commands - re-exporte les commandes publiques."""

from src.adapters.cli.commands.admin_commands import init_admin
from src.adapters.cli.commands.backup_commands import backup, scheduler_app
from src.adapters.cli.commands.import_commands import (
    import_content,
    process_images,
    refresh_tmdb,
)
from src.adapters.cli.commands.maintenance_commands import (
    analyze_db,
    analyze_logs,
    cleanup_actors,
    migrate_logs,
    verify,
)

__all__ = [
    # admin
    "init_admin",
    # catalogue
    "import_content",
    "process_images",
    "refresh_tmdb",
    # sauvegarde
    "backup",
    "scheduler_app",
    # maintenance
    "migrate_logs",
    "cleanup_actors",
    "analyze_db",
    "analyze_logs",
    "verify",
]
