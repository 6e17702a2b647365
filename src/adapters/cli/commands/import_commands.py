"""
Commandes CLI du catalogue (import, process-images, refresh-tmdb).
"""

import asyncio
from typing import Annotated, Optional

import typer
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from src.adapters.cli.helpers import console, open_session, suppress_loguru, with_container
from src.core.exceptions import ContentAlreadyExistsError, NotFoundError, WatchListError
from src.core.value_objects import ContentType


def _content_type(value: str) -> ContentType:
    try:
        return ContentType.parse(value)
    except ValueError:
        raise typer.BadParameter("Type attendu : movie ou tv") from None


def import_content(
    content_type: Annotated[str, typer.Argument(help="Type de contenu : movie ou tv")],
    tmdb_ids: Annotated[list[int], typer.Argument(help="IDs TMDB a importer")],
    images: Annotated[
        bool,
        typer.Option("--images", help="Copie aussi les images vers le stockage objet"),
    ] = False,
) -> None:
    """
    Importe des films ou des series depuis TMDB.

    Exemples:
      watchlist import movie 550 603
      watchlist import tv 1399 --images
    """
    asyncio.run(_import_async(_content_type(content_type), tmdb_ids, images))


@with_container()
async def _import_async(container, content_type: ContentType, tmdb_ids: list[int], images: bool) -> None:
    """Implementation async de la commande import."""
    if not container.config().tmdb_enabled:
        console.print("[red]Cle API TMDB non configuree (WATCHLIST_TMDB_API_KEY).[/red]")
        raise typer.Exit(code=1)

    imported = failed = 0
    with open_session(container) as session, suppress_loguru():
        service = container.import_service(
            session=session, image_processor=container.image_processor(session=session)
        )
        for tmdb_id in tmdb_ids:
            try:
                result = await service.import_content(content_type, tmdb_id, process_images=images)
            except ContentAlreadyExistsError as e:
                console.print(f"[yellow]{tmdb_id}[/yellow] : {e.message}")
                failed += 1
                continue
            except NotFoundError as e:
                console.print(f"[red]{tmdb_id}[/red] : {e.message}")
                failed += 1
                continue

            imported += 1
            console.print(
                f"[green]{tmdb_id}[/green] : {result.content.display_title} "
                f"({result.cast_imported} acteurs)"
            )
            for error in result.cast_errors:
                console.print(f"  [dim]{error}[/dim]")
        await container.tmdb_client().close()

    console.print(f"\n[bold]{imported}[/bold] importe(s), [bold]{failed}[/bold] ignore(s)")


def process_images(
    content_type: Annotated[
        Optional[str], typer.Option("--type", "-t", help="Type du contenu a traiter (movie, tv)")
    ] = None,
    content_id: Annotated[
        Optional[int], typer.Option("--id", help="ID du contenu a traiter")
    ] = None,
    limit: Annotated[
        int, typer.Option("--limit", "-l", help="Taille du lot sans --id")
    ] = 10,
) -> None:
    """
    Copie les images TMDB manquantes vers le stockage objet.

    Avec --type et --id, traite un contenu et son casting ; sinon un lot.
    """
    if (content_type is None) != (content_id is None):
        raise typer.BadParameter("--type et --id vont ensemble")
    parsed = _content_type(content_type) if content_type else None
    asyncio.run(_process_images_async(parsed, content_id, limit))


@with_container()
async def _process_images_async(
    container, content_type: Optional[ContentType], content_id: Optional[int], limit: int
) -> None:
    with open_session(container) as session:
        processor = container.image_processor(session=session)
        try:
            if content_type is not None:
                result = await processor.process_by_id(content_type, content_id)
                if result is None:
                    console.print(f"[red]{content_type.label} {content_id} introuvable[/red]")
                    raise typer.Exit(code=1)
                summary = result.to_dict()
            else:
                summary = (await processor.batch_process(limit)).to_dict()
        except WatchListError as e:
            console.print(f"[red]{e.message}[/red]")
            raise typer.Exit(code=1) from e

    for key, value in summary.items():
        if key != "errors":
            console.print(f"{key} : [bold]{value}[/bold]")
    for error in summary["errors"]:
        console.print(f"  [red]{error}[/red]")


def refresh_tmdb(
    movie_ids: Annotated[
        Optional[list[int]], typer.Option("--movie", "-m", help="ID d'un film (repetable)")
    ] = None,
    tv_ids: Annotated[
        Optional[list[int]], typer.Option("--tv", help="ID d'une serie (repetable)")
    ] = None,
    refresh_all: Annotated[
        bool, typer.Option("--all", help="Tous les contenus visibles")
    ] = False,
) -> None:
    """Recharge les metadonnees TMDB des contenus du catalogue."""
    if not refresh_all and not movie_ids and not tv_ids:
        raise typer.BadParameter("Indiquez --movie, --tv ou --all")
    asyncio.run(_refresh_async(movie_ids or [], tv_ids or [], refresh_all))


@with_container()
async def _refresh_async(container, movie_ids: list[int], tv_ids: list[int], refresh_all: bool) -> None:
    with open_session(container) as session:
        service = container.refresh_service(session=session)
        total = len(movie_ids) + len(tv_ids)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("Rafraichissement TMDB...", total=None if refresh_all else total)
            stats = await service.refresh(movie_ids, tv_ids, refresh_all)
        await container.tmdb_client().close()

    console.print(
        f"[green]{stats.success}[/green] rafraichi(s), [red]{stats.failed}[/red] en echec"
    )
    for error in stats.errors:
        console.print(f"  [red]{error}[/red]")
