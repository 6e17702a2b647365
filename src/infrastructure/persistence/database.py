"""
Configuration de la base de donnees pour Watch List.

Ce module fournit :
- Engine SQLAlchemy (SQLite par defaut, toute URL SQLAlchemy acceptee)
- Session factory avec context manager
- Fonction d'initialisation des tables et migrations legeres

La base de donnees est configuree via WATCHLIST_DATABASE_URL (defaut: sqlite:///watchlist.db).
"""

from collections.abc import Generator
from pathlib import Path
from typing import Optional

from loguru import logger
from sqlalchemy import Engine, event, inspect, text
from sqlmodel import Session, SQLModel, create_engine

# Engine global - initialise lors du premier appel a get_engine()
_engine: Optional[Engine] = None


def _create_engine(db_url: str) -> Engine:
    """Cree l'engine, avec les reglages propres a SQLite si besoin."""
    connect_args = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if db_url.startswith("sqlite:///") and ":memory:" not in db_url:
            db_path = Path(db_url.replace("sqlite:///", ""))
            db_path.parent.mkdir(exist_ok=True, parents=True)

    engine = create_engine(db_url, echo=False, connect_args=connect_args)

    if engine.dialect.name == "sqlite":
        # Les suppressions en cascade (casting, critiques) reposent sur les FK
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def configure_engine(database_url: str) -> Engine:
    """
    Remplace l'engine global par un engine pointant sur database_url.

    Utilise par init_db() et par les tests pour isoler chaque base.
    """
    global _engine
    if (
        _engine is not None
        and _engine.url.render_as_string(hide_password=False) == database_url
    ):
        return _engine
    if _engine is not None:
        _engine.dispose()
    _engine = _create_engine(database_url)
    return _engine


def reset_engine() -> None:
    """Ferme et oublie l'engine global."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None


def get_engine() -> Engine:
    """
    Retourne l'engine, en le creant si necessaire.

    Utilise la configuration de l'application pour l'URL de la BDD.
    """
    global _engine
    if _engine is None:
        from src.config import Settings

        _engine = _create_engine(Settings().database_url)
    return _engine


def get_session() -> Generator[Session, None, None]:
    """
    Generateur de session SQLModel.

    Utilisation avec next() ou comme dependance FastAPI :
        session = next(get_session())
        try:
            # operations
        finally:
            session.close()

    Yields:
        Session SQLModel connectee a l'engine global
    """
    with Session(get_engine()) as session:
        yield session


def init_db(database_url: Optional[str] = None) -> None:
    """
    Initialise la base de donnees en creant toutes les tables.

    Importe les modeles pour enregistrer leurs metadonnees dans
    SQLModel.metadata, cree les tables manquantes puis applique les
    migrations de colonnes.

    Args:
        database_url: URL a utiliser, sinon celle des Settings
    """
    from src.infrastructure.persistence import models  # noqa: F401

    if database_url is not None:
        configure_engine(database_url)

    engine = get_engine()
    SQLModel.metadata.create_all(engine)
    _run_migrations(engine)


# Colonnes ajoutees a operation_logs lors de la denormalisation du journal.
# Les bases creees avant ce changement ne les ont pas.
_OPERATION_LOG_COLUMNS = {
    "operator_name": "VARCHAR",
    "resource_id": "INTEGER",
    "resource_name": "VARCHAR",
    "resource_type": "VARCHAR",
    "metadata_json": "TEXT",
}


def _run_migrations(engine: Engine) -> None:
    """
    Execute les migrations de schema necessaires.

    SQLModel.metadata.create_all() ne modifie pas les tables existantes,
    les colonnes manquantes sont donc ajoutees ici.
    """
    existing = {col["name"] for col in inspect(engine).get_columns("operation_logs")}
    missing = {
        name: sql_type
        for name, sql_type in _OPERATION_LOG_COLUMNS.items()
        if name not in existing
    }
    if not missing:
        return

    with engine.begin() as conn:
        for name, sql_type in missing.items():
            conn.execute(text(f"ALTER TABLE operation_logs ADD COLUMN {name} {sql_type}"))
    logger.info("Migration operation_logs appliquee", columns=sorted(missing))
