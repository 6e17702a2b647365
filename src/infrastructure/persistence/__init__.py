"""
Module de persistance de WatchList.

Ce module fournit l'infrastructure de stockage utilisant SQLModel (SQLAlchemy).
Il contient :

- database.py : Engine global, session factory, initialisation et migrations
- models.py : Tables (utilisateurs, films, series, acteurs, casting,
  critiques, journal des operations)
- repositories/ : Requetes du domaine

Usage:
    from src.infrastructure.persistence import init_db, get_session

    init_db("sqlite:///watchlist.db")
    session = next(get_session())
"""

from src.infrastructure.persistence.database import (
    configure_engine,
    get_engine,
    get_session,
    init_db,
    reset_engine,
)

__all__ = [
    "configure_engine",
    "get_engine",
    "get_session",
    "init_db",
    "reset_engine",
]
