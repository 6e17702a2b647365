"""
Fixtures pytest partagees pour les tests WatchList.

Ce module contient les fixtures communes utilisees dans les tests:
- Settings de test avec chemins temporaires (base SQLite, cache, sauvegardes)
- Session SQLModel sur une base fraiche
- Fabriques de films, series, acteurs et utilisateurs
- Client HTTP FastAPI avec un Container configure pour les tests
"""

from datetime import date
from pathlib import Path
from typing import Callable, Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient
from sqlmodel import Session

from src.adapters.api.tmdb_client import TMDBClient
from src.adapters.storage.oss_storage import OSSStorage
from src.config import Settings
from src.container import Container
from src.core.value_objects import UserRole
from src.infrastructure.persistence.database import get_engine, init_db, reset_engine
from src.infrastructure.persistence.models import (
    ActorModel,
    MovieCastModel,
    MovieModel,
    TvCastModel,
    TvShowModel,
    UserModel,
)
from src.services.auth import create_token, hash_password

TEST_PASSWORD = "secret123"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    bcrypt tourne au cout minimal (4) pour garder les tests rapides.
    Les integrations externes (TMDB, OSS, Douban) sont desactivees.
    """
    return Settings(
        database_url=f"sqlite:///{tmp_path}/test.db",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        tmdb_api_key=None,
        douban_api_key=None,
        oss_bucket=None,
        oss_access_key_id=None,
        oss_access_key_secret=None,
        cache_dir=tmp_path / "cache",
        backup_dir=tmp_path / "backups",
        log_file=tmp_path / "test.log",
    )


@pytest.fixture
def session(test_settings: Settings) -> Iterator[Session]:
    """Session sur une base SQLite fraiche, tables creees."""
    init_db(test_settings.database_url)
    with Session(get_engine()) as session:
        yield session
    reset_engine()


@pytest.fixture
def make_movie(session: Session) -> Callable[..., MovieModel]:
    """Fabrique de films persistes. Les champs passes surchargent les defauts."""
    counter = iter(range(1000, 10_000))

    def factory(**fields) -> MovieModel:
        genres = fields.pop("genres", ["剧情"])
        values = {
            "tmdb_id": next(counter),
            "title": "盗梦空间",
            "original_title": "Inception",
            "release_date": date(2010, 7, 15),
            "runtime": 148,
        }
        values.update(fields)
        movie = MovieModel(**values)
        movie.genres = genres
        session.add(movie)
        session.commit()
        session.refresh(movie)
        return movie

    return factory


@pytest.fixture
def make_tv_show(session: Session) -> Callable[..., TvShowModel]:
    """Fabrique de series persistees."""
    counter = iter(range(1000, 10_000))

    def factory(**fields) -> TvShowModel:
        genres = fields.pop("genres", ["剧情"])
        values = {
            "tmdb_id": next(counter),
            "name": "绝命毒师",
            "original_name": "Breaking Bad",
            "first_air_date": date(2008, 1, 20),
            "number_of_seasons": 5,
            "number_of_episodes": 62,
        }
        values.update(fields)
        show = TvShowModel(**values)
        show.genres = genres
        session.add(show)
        session.commit()
        session.refresh(show)
        return show

    return factory


@pytest.fixture
def make_actor(session: Session) -> Callable[..., ActorModel]:
    """Fabrique d'acteurs persistes."""
    counter = iter(range(1000, 10_000))

    def factory(**fields) -> ActorModel:
        values = {"tmdb_id": next(counter), "name": "莱昂纳多·迪卡普里奥"}
        values.update(fields)
        actor = ActorModel(**values)
        session.add(actor)
        session.commit()
        session.refresh(actor)
        return actor

    return factory


@pytest.fixture
def add_role(session: Session) -> Callable[..., None]:
    """Lie un acteur a un film ou a une serie."""

    def link(content, actor: ActorModel, character: str = "Dom Cobb", order: int = 0) -> None:
        if isinstance(content, MovieModel):
            role = MovieCastModel(
                movie_id=content.id, actor_id=actor.id, character=character, order=order
            )
        else:
            role = TvCastModel(
                tv_show_id=content.id, actor_id=actor.id, character=character, order=order
            )
        session.add(role)
        session.commit()

    return link


@pytest.fixture
def make_user(session: Session) -> Callable[..., UserModel]:
    """Fabrique d'utilisateurs, mot de passe TEST_PASSWORD par defaut."""

    def factory(username: str = "alice", role: UserRole = UserRole.USER, **fields) -> UserModel:
        password = fields.pop("password", TEST_PASSWORD)
        user = UserModel(
            username=username,
            name=fields.pop("name", username.capitalize()),
            password_hash=hash_password(password, rounds=4),
            role=role,
            **fields,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return factory


@pytest.fixture
def admin_user(make_user) -> UserModel:
    return make_user("admin", role=UserRole.ADMIN, name="Admin")


@pytest.fixture
def mock_tmdb_client() -> MagicMock:
    """
    Mock de TMDBClient.

    Les methodes asynchrones retournent None / [] par defaut ;
    configurer les valeurs de retour dans chaque test.
    """
    mock = MagicMock(spec=TMDBClient)
    mock.enabled = True
    mock.language = "zh-CN"
    mock.search = AsyncMock(return_value=[])
    mock.get_details = AsyncMock(return_value=None)
    mock.refresh_details = AsyncMock(return_value=None)
    mock.get_credits = AsyncMock(return_value=[])
    mock.get_person = AsyncMock(return_value=None)
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def mock_storage() -> MagicMock:
    """
    Mock de OSSStorage.

    upload_from_url retourne une URL publique derivee de la cle.
    """
    mock = MagicMock(spec=OSSStorage)
    mock.enabled = True

    async def upload_from_url(url: str, key: str) -> str:
        return f"https://cdn.example.com/{key}"

    async def upload_bytes(key: str, data: bytes, content_type=None) -> str:
        return f"https://cdn.example.com/{key}"

    mock.upload_from_url = AsyncMock(side_effect=upload_from_url)
    mock.upload_bytes = AsyncMock(side_effect=upload_bytes)
    mock.upload_file = AsyncMock(side_effect=lambda path, key: f"https://cdn.example.com/{key}")
    mock.delete = AsyncMock()
    mock.public_url.side_effect = lambda key: f"https://cdn.example.com/{key}"
    return mock


@pytest.fixture
def container(test_settings: Settings, mock_tmdb_client, mock_storage) -> Container:
    """Container DI pointant sur la base de test, clients externes simules."""
    container = Container()
    container.config.override(providers.Object(test_settings))
    container.tmdb_client.override(providers.Object(mock_tmdb_client))
    container.storage.override(providers.Object(mock_storage))
    return container


@pytest.fixture
def client(container: Container, session: Session) -> Iterator[TestClient]:
    """Client HTTP sur l'application, lifespan execute."""
    from src.web.app import create_app

    with TestClient(create_app(container)) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(admin_user: UserModel, test_settings: Settings) -> dict[str, str]:
    """En-tete Authorization d'un administrateur."""
    return {"Authorization": f"Bearer {create_token(admin_user, test_settings)}"}


@pytest.fixture
def user_headers(make_user, test_settings: Settings) -> dict[str, str]:
    """En-tete Authorization d'un utilisateur simple."""
    user = make_user("bob")
    return {"Authorization": f"Bearer {create_token(user, test_settings)}"}
