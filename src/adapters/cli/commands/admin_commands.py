"""
Commande CLI de creation du compte administrateur initial.
"""

from typing import Annotated, Optional

import typer

from src.adapters.cli.helpers import console, open_session
from src.container import Container
from src.core.exceptions import ValidationError


def init_admin(
    username: Annotated[str, typer.Option("--username", "-u", prompt=True, help="Identifiant")],
    name: Annotated[str, typer.Option("--name", "-n", prompt=True, help="Nom affiche")],
    password: Annotated[
        str,
        typer.Option(
            "--password",
            prompt=True,
            hide_input=True,
            confirmation_prompt=True,
            help="Mot de passe (6 caracteres minimum)",
        ),
    ],
    email: Annotated[Optional[str], typer.Option("--email", help="Adresse e-mail")] = None,
) -> None:
    """Cree le premier compte administrateur (refuse si un compte existe)."""
    container = Container()
    container.database.init()
    with open_session(container) as session:
        try:
            user = container.auth_service(session=session).initialize(
                username, password, name, email
            )
        except ValidationError as e:
            console.print(f"[red]{e.message}[/red]")
            raise typer.Exit(code=1) from e
    console.print(f"[green]Administrateur cree :[/green] {user.username}")
