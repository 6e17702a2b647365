"""
Commandes CLI de maintenance de la base (migrate-logs, cleanup-actors,
analyze-db, analyze-logs, verify).
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from src.adapters.cli.helpers import console, open_session, print_counts
from src.container import Container


def _init_container() -> Container:
    container = Container()
    container.database.init()
    return container


def _orphans_table(actors: list[dict]) -> Table:
    table = Table(title=f"Acteurs orphelins ({len(actors)})")
    table.add_column("ID", justify="right")
    table.add_column("TMDB", justify="right")
    table.add_column("Nom")
    for actor in actors:
        table.add_row(str(actor["id"]), str(actor["tmdbId"]), actor["name"])
    return table


def migrate_logs(
    export: Annotated[
        bool,
        typer.Option("--export", help="Ecrit une copie migree du journal (JSON + SQL)"),
    ] = False,
    inline: Annotated[
        bool,
        typer.Option("--inline", help="Complete les instantanes directement en base"),
    ] = False,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Repertoire de l'export (defaut: backup_dir)"),
    ] = None,
) -> None:
    """
    Complete l'instantane (operateur, ressource) des anciennes entrees du journal.

    Exemples:
      watchlist migrate-logs --export            # Copie migree, base inchangee
      watchlist migrate-logs --inline            # Migration en place (idempotente)
    """
    if not export and not inline:
        raise typer.BadParameter("Indiquez --export et/ou --inline")

    container = _init_container()
    with open_session(container) as session:
        migrator = container.log_migrator(session=session)
        if export:
            result = migrator.export_snapshot(output or container.config().backup_dir)
            console.print(f"[green]{result.count} entree(s) exportee(s)[/green]")
            console.print(f"  JSON : {result.json_path}")
            console.print(f"  SQL  : {result.sql_path}")
            print_counts("Par type de ressource", result.by_resource_type)
        if inline:
            report = migrator.migrate_inline()
            console.print(
                f"[green]{report.migrated} entree(s) migree(s)[/green], "
                f"{report.remaining} restante(s)"
            )
            for error in report.errors:
                console.print(f"  [red]{error}[/red]")
            print_counts("Par type de ressource", report.by_resource_type)
            if report.errors:
                raise typer.Exit(code=1)


def cleanup_actors(
    confirm: Annotated[
        bool,
        typer.Option("--confirm", help="Supprime reellement (sinon simple liste)"),
    ] = False,
) -> None:
    """Liste, puis supprime avec --confirm, les acteurs sans aucun role."""
    container = _init_container()
    with open_session(container) as session:
        service = container.maintenance_service(session=session)
        if not confirm:
            orphans = service.find_orphaned_actors()
            if not orphans:
                console.print("[green]Aucun acteur orphelin[/green]")
                return
            console.print(
                _orphans_table(
                    [{"id": a.id, "tmdbId": a.tmdb_id, "name": a.name} for a in orphans]
                )
            )
            console.print("[yellow]Relancez avec --confirm pour les supprimer.[/yellow]")
            return

        result = service.cleanup_orphaned_actors(confirm=True)

    if result.deleted:
        console.print(_orphans_table(result.actors))
        console.print(f"[green]{result.deleted} acteur(s) supprime(s)[/green]")
        console.print(f"Rapport : {result.report_path}")
    else:
        console.print("[green]Aucun acteur orphelin[/green]")


def analyze_db(
    as_json: Annotated[bool, typer.Option("--json", help="Sortie JSON brute")] = False,
) -> None:
    """Comptages, acteurs orphelins et images manquantes."""
    container = _init_container()
    with open_session(container) as session:
        analysis = container.maintenance_service(session=session).analyze_database()

    if as_json:
        console.print_json(data=analysis)
        return
    print_counts("Tables", analysis["tables"])
    print_counts("Images manquantes", analysis["missingImages"])
    print_counts("Instantanes du journal", analysis["operationLogs"])
    if analysis["orphanedActors"]:
        console.print(_orphans_table(analysis["orphanedActors"]))


def analyze_logs(
    sample: Annotated[
        int, typer.Option("--sample", "-n", help="Nombre d'entrees recentes affichees")
    ] = 10,
    as_json: Annotated[bool, typer.Option("--json", help="Sortie JSON brute")] = False,
) -> None:
    """Repartition du journal des operations."""
    container = _init_container()
    with open_session(container) as session:
        analysis = container.maintenance_service(session=session).analyze_operation_logs(sample)

    if as_json:
        console.print_json(data=analysis)
        return
    console.print(f"[bold]{analysis['total']}[/bold] entree(s)")
    print_counts("Par action", analysis["byAction"])
    print_counts("Par type d'entite", analysis["byEntityType"])
    print_counts("Liaisons historiques", analysis["legacyLinks"])
    print_counts("Instantanes", analysis["snapshot"])

    table = Table(title="Entrees recentes")
    for column in ("Date", "Action", "Operateur", "Ressource"):
        table.add_column(column)
    for entry in analysis["recent"]:
        table.add_row(
            entry["createdAt"] or "",
            entry["action"],
            entry["operatorName"] or "-",
            entry["resourceName"] or "-",
        )
    console.print(table)


def verify() -> None:
    """Verifie que chaque entree du journal porte son instantane."""
    container = _init_container()
    with open_session(container) as session:
        report = container.maintenance_service(session=session).verify_refactoring()

    print_counts("Verification", report.stats)
    if report.ok:
        console.print("[green]Aucun probleme detecte[/green]")
        return
    for issue in report.issues:
        console.print(f"[red]- {issue}[/red]")
    raise typer.Exit(code=1)
