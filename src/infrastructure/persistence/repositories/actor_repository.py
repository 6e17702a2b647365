"""
Implementation SQLModel du repository des acteurs.

Les acteurs sont partages entre films et series : un acteur sans aucune
liaison dans movie_cast ni tv_cast est dit orphelin (typiquement apres la
suppression du seul contenu ou il apparaissait).
"""

from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from src.core.value_objects import ContentType
from src.infrastructure.persistence.models import (
    ActorModel,
    MovieCastModel,
    TvCastModel,
    tables_for,
    utcnow,
)


class SQLModelActorRepository:
    """Repository SQLModel pour les acteurs."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, actor_id: int) -> Optional[ActorModel]:
        """Recupere un acteur par son ID interne."""
        return self._session.get(ActorModel, actor_id)

    def get_by_tmdb_id(self, tmdb_id: int) -> Optional[ActorModel]:
        """Recupere un acteur par son ID TMDB."""
        statement = select(ActorModel).where(ActorModel.tmdb_id == tmdb_id)
        return self._session.exec(statement).first()

    def save(self, actor: ActorModel) -> ActorModel:
        """Insere ou met a jour un acteur."""
        if actor.id is not None:
            actor.updated_at = utcnow()
        self._session.add(actor)
        self._session.commit()
        self._session.refresh(actor)
        return actor

    def count(self) -> int:
        return self._session.exec(select(func.count()).select_from(ActorModel)).one()

    def list_missing_profile(self, limit: int) -> list[ActorModel]:
        """Acteurs ayant une photo TMDB mais pas encore de copie hebergee."""
        statement = (
            select(ActorModel)
            .where(ActorModel.profile_path != None, ActorModel.profile_url == None)  # noqa: E711
            .order_by(ActorModel.created_at.desc())
            .limit(limit)
        )
        return list(self._session.exec(statement).all())

    def count_missing_profile(self) -> int:
        statement = (
            select(func.count())
            .select_from(ActorModel)
            .where(ActorModel.profile_url == None)  # noqa: E711
        )
        return self._session.exec(statement).one()

    def list_with_role_counts(
        self, page: int = 1, limit: int = 50, query: Optional[str] = None
    ) -> tuple[list[tuple[ActorModel, int, int]], int]:
        """
        Liste paginee des acteurs avec leur nombre de roles.

        Retourne :
            ([(acteur, nb_roles_films, nb_roles_series), ...], total)
        """
        movie_roles = (
            select(func.count())
            .where(MovieCastModel.actor_id == ActorModel.id)
            .correlate(ActorModel)
            .scalar_subquery()
        )
        tv_roles = (
            select(func.count())
            .where(TvCastModel.actor_id == ActorModel.id)
            .correlate(ActorModel)
            .scalar_subquery()
        )
        conditions = []
        if query:
            conditions.append(ActorModel.name.icontains(query, autoescape=True))

        statement = (
            select(ActorModel, movie_roles, tv_roles)
            .where(*conditions)
            .order_by(ActorModel.created_at.desc(), ActorModel.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        total = self._session.exec(
            select(func.count()).select_from(ActorModel).where(*conditions)
        ).one()
        rows = [(actor, movies, tv) for actor, movies, tv in self._session.exec(statement).all()]
        return rows, total

    def _orphan_condition(self):
        return (
            ActorModel.id.not_in(select(MovieCastModel.actor_id)),
            ActorModel.id.not_in(select(TvCastModel.actor_id)),
        )

    def list_orphans(self) -> list[ActorModel]:
        """Acteurs sans aucun role, ni film ni serie."""
        statement = select(ActorModel).where(*self._orphan_condition()).order_by(ActorModel.id)
        return list(self._session.exec(statement).all())

    def delete_many(self, actor_ids: list[int]) -> int:
        """Supprime les acteurs donnes et retourne le nombre de lignes supprimees."""
        if not actor_ids:
            return 0
        actors = self._session.exec(
            select(ActorModel).where(ActorModel.id.in_(actor_ids))
        ).all()
        for actor in actors:
            self._session.delete(actor)
        self._session.commit()
        return len(actors)

    def filmography(self, actor: ActorModel, content_type: ContentType) -> list[tuple[object, object]]:
        """Contenus visibles d'un acteur : liste de (contenu, role)."""
        tables = tables_for(content_type)
        model, cast_model = tables.model, tables.cast_model
        statement = (
            select(model, cast_model)
            .join(cast_model, getattr(cast_model, tables.fk) == model.id)
            .where(cast_model.actor_id == actor.id, model.is_visible == True)  # noqa: E712
            .order_by(getattr(model, tables.date).desc())
        )
        return list(self._session.exec(statement).all())
