"""
Commandes CLI de sauvegarde et du planificateur (backup, scheduler).
"""

import asyncio
from typing import Annotated

import typer
from loguru import logger

from src.adapters.cli.helpers import console, open_session, print_counts
from src.container import Container
from src.services.scheduler import TaskScheduler

scheduler_app = typer.Typer(
    name="scheduler",
    help="Planificateur des sauvegardes et du rafraichissement TMDB",
    rich_markup_mode="rich",
)


def _init_container() -> Container:
    container = Container()
    container.database.init()
    return container


async def _backup(container: Container):
    with open_session(container) as session:
        return await container.backup_service(session=session).run()


async def _scheduled_refresh(container: Container) -> None:
    with open_session(container) as session:
        service = container.scheduled_task_service(session=session)
        stats = await service.execute(container.refresh_service(session=session))
    # Le client httpx est lie a la boucle de cet asyncio.run
    await container.tmdb_client().close()
    logger.info("Rafraichissement planifie termine", **stats.to_dict())


def build_scheduler(container: Container) -> TaskScheduler:
    """Planificateur configure d'apres les reglages et la configuration enregistree."""
    with open_session(container) as session:
        schedule = container.scheduled_task_service(session=session).current_config()
    return TaskScheduler(
        container.config(),
        run_backup=lambda: asyncio.run(_backup(container)),
        run_refresh=lambda: asyncio.run(_scheduled_refresh(container)),
        schedule=schedule,
    )


def backup() -> None:
    """Sauvegarde la base (JSON + SQL) et l'envoie sur le stockage objet."""
    container = _init_container()
    result = asyncio.run(_backup(container))

    console.print(f"[green]Sauvegarde terminee en {result.duration:.1f}s[/green]")
    console.print(f"  JSON : {result.json_path}")
    console.print(f"  SQL  : {result.sql_path}")
    if result.remote_keys:
        for key in result.remote_keys:
            console.print(f"  [cyan]oss://{key}[/cyan]")
    else:
        console.print("  [yellow]Stockage objet non configure, copie locale uniquement[/yellow]")
    print_counts("Lignes sauvegardees", result.stats)


@scheduler_app.command("start")
def scheduler_start() -> None:
    """Demarre le planificateur (bloquant, Ctrl+C pour arreter)."""
    scheduler = build_scheduler(_init_container())
    jobs = scheduler.register()
    for job_id, info in scheduler.status().items():
        console.print(f"[cyan]{job_id}[/cyan] : prochaine execution {info['nextRun']}")
    console.print(f"{len(jobs)} tache(s) planifiee(s). Ctrl+C pour arreter.")
    scheduler.start()


@scheduler_app.command("run-now")
def scheduler_run_now() -> None:
    """Execute immediatement la sauvegarde planifiee."""
    scheduler = build_scheduler(_init_container())
    scheduler.run_backup_now()
    console.print("[green]Sauvegarde executee[/green]")


@scheduler_app.command("status")
def scheduler_status(
    as_json: Annotated[bool, typer.Option("--json", help="Sortie JSON brute")] = False,
) -> None:
    """Affiche la configuration et les dernieres executions."""
    container = _init_container()
    with open_session(container) as session:
        status = container.scheduled_task_service(session=session).status()
    if as_json:
        console.print_json(data=status)
        return
    last_backup = status.pop("lastBackup")
    print_counts("Taches planifiees", status)
    if last_backup:
        state = "[green]succes[/green]" if last_backup["success"] else "[red]echec[/red]"
        console.print(f"Derniere sauvegarde : {last_backup['at']} ({state})")
