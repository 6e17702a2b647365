"""
Point d'entrée CLI de WatchList.

Configure le logging et monte les commandes CLI (serveur web, import TMDB,
sauvegardes, planificateur, maintenance de la base).
"""

from typing import Annotated

import typer
from loguru import logger

from .adapters.cli.commands import (
    analyze_db,
    analyze_logs,
    backup,
    cleanup_actors,
    import_content,
    init_admin,
    migrate_logs,
    process_images,
    refresh_tmdb,
    scheduler_app,
    verify,
)
from .config import Settings
from .container import Container
from .logging_config import configure_logging

__version__ = "0.1.0"

app = typer.Typer(
    name="watchlist",
    help="Catalogue de films et de series a regarder",
)
container = Container()

# Etat global pour les options de verbosite
state = {"verbose": 0, "quiet": False}


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv, -vvv)"
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """WatchList - Catalogue personnel de films et de series."""
    if quiet:
        state["quiet"] = True
    else:
        state["verbose"] = verbose


# Administration
app.command(name="init-admin")(init_admin)

# Catalogue
# Note: "import" est un mot reserve Python, donc on utilise name= explicitement
app.command(name="import")(import_content)
app.command(name="process-images")(process_images)
app.command(name="refresh-tmdb")(refresh_tmdb)

# Sauvegarde et planificateur
app.command()(backup)
app.add_typer(scheduler_app, name="scheduler")

# Maintenance de la base
app.command(name="migrate-logs")(migrate_logs)
app.command(name="cleanup-actors")(cleanup_actors)
app.command(name="analyze-db")(analyze_db)
app.command(name="analyze-logs")(analyze_logs)
app.command()(verify)


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration WatchList")
    typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"API TMDB : {'activée' if config.tmdb_enabled else 'désactivée'} ({config.tmdb_language})")
    typer.echo(f"Stockage OSS : {'activé' if config.oss_enabled else 'désactivé'}")
    typer.echo(f"API Douban : {'activée' if config.douban_enabled else 'désactivée'}")
    typer.echo(f"Sauvegardes : {config.backup_dir} (cron {config.backup_cron})")
    typer.echo(
        f"Rafraîchissement TMDB : "
        f"{'activé' if config.auto_update_enabled else 'désactivé'} (cron {config.metadata_update_cron})"
    )
    typer.echo(f"Fuseau horaire : {config.scheduler_timezone}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"WatchList v{__version__}")


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Adresse d'écoute")] = "0.0.0.0",
    port: Annotated[int, typer.Option(help="Port d'écoute")] = 8000,
    reload: Annotated[bool, typer.Option(help="Rechargement automatique")] = False,
) -> None:
    """Lance le serveur web WatchList."""
    import uvicorn

    typer.echo(f"Démarrage du serveur sur {host}:{port}")
    uvicorn.run("src.web.app:app", host=host, port=port, reload=reload)


def main() -> None:
    """Point d'entrée de l'application."""
    # Charge la configuration et configure le logging
    settings = container.config()
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )

    logger.info("Démarrage de WatchList", version=__version__)

    # Lance la CLI
    app()


if __name__ == "__main__":
    main()
