"""
Utilitaires partages pour les commandes CLI de WatchList.

Ce module fournit :
- console : instance Rich Console partagee
- suppress_loguru : context manager pour desactiver/reactiver les logs loguru
- with_container : decorateur injectant un container initialise
- open_session : session SQLModel fermee en sortie de bloc
- print_counts : tableau Rich cle/valeur
"""

from contextlib import contextmanager
from functools import wraps
from typing import Iterator, Mapping

from loguru import logger as loguru_logger
from rich.console import Console
from rich.table import Table
from sqlmodel import Session

from src.container import Container

console = Console()


@contextmanager
def suppress_loguru():
    """
    Context manager pour desactiver les logs loguru pendant l'affichage Rich.

    Usage:
        with suppress_loguru():
            console.print(...)
    """
    loguru_logger.disable("src")
    try:
        yield
    finally:
        loguru_logger.enable("src")


def with_container(requires_db: bool = True):
    """
    Decorateur qui injecte un container initialise en premier argument.

    Args:
        requires_db: Si True (defaut), initialise la base de donnees.

    Usage:
        @with_container()
        async def my_command(container, ...):
            config = container.config()
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            container = Container()
            if requires_db:
                container.database.init()
            return await func(container, *args, **kwargs)
        return wrapper
    return decorator


@contextmanager
def open_session(container: Container) -> Iterator[Session]:
    """Session du container, fermee a la sortie du bloc."""
    session = container.session()
    try:
        yield session
    finally:
        session.close()


def print_counts(title: str, counts: Mapping[str, object]) -> None:
    """Affiche un dictionnaire plat sous forme de tableau a deux colonnes."""
    table = Table(title=title, show_header=False)
    table.add_column("Cle", style="cyan")
    table.add_column("Valeur", justify="right")
    for key, value in counts.items():
        table.add_row(str(key), str(value))
    console.print(table)
