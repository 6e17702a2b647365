"""
Implementation SQLModel du repository des contenus (films et series).

Les films et les series partagent l'essentiel de leurs requetes : chaque
methode recoit le ContentType et s'appuie sur tables_for() pour choisir la
table, la table de casting et les colonnes de titre et de date.
"""

from typing import Optional, Sequence

from sqlalchemy import func, or_
from sqlmodel import Session, select

from src.core.value_objects import ContentType, WatchStatus
from src.infrastructure.persistence.models import (
    ActorModel,
    ContentBase,
    content_type_of,
    genre_pattern,
    tables_for,
    utcnow,
)

SORT_FIELDS = ("rating", "year", "name", "default")


class SQLModelContentRepository:
    """Repository SQLModel pour les films et les series."""

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    # ------------------------------------------------------------------
    # Lecture unitaire
    # ------------------------------------------------------------------

    def get_by_id(self, content_type: ContentType, content_id: int) -> Optional[ContentBase]:
        """Recupere un contenu par son ID interne."""
        return self._session.get(tables_for(content_type).model, content_id)

    def get_by_tmdb_id(self, content_type: ContentType, tmdb_id: int) -> Optional[ContentBase]:
        """Recupere un contenu par son ID TMDB."""
        model = tables_for(content_type).model
        statement = select(model).where(model.tmdb_id == tmdb_id)
        return self._session.exec(statement).first()

    # ------------------------------------------------------------------
    # Ecriture
    # ------------------------------------------------------------------

    def save(self, content: ContentBase) -> ContentBase:
        """Insere ou met a jour un contenu et rafraichit son etat."""
        if content.id is not None:
            content.updated_at = utcnow()
        self._session.add(content)
        self._session.commit()
        self._session.refresh(content)
        return content

    def delete(self, content: ContentBase) -> None:
        """Supprime un contenu (casting et critiques suivent en cascade)."""
        self._session.delete(content)
        self._session.commit()

    # ------------------------------------------------------------------
    # Listes
    # ------------------------------------------------------------------

    def _paginate(self, statement, count_statement, page: int, limit: int):
        total = self._session.exec(count_statement).one()
        items = self._session.exec(
            statement.offset((page - 1) * limit).limit(limit)
        ).all()
        return list(items), total

    def list_visible(
        self, content_type: ContentType, page: int = 1, limit: int = 20
    ) -> tuple[list[ContentBase], int]:
        """Liste paginee des contenus visibles, les plus recents d'abord."""
        model = tables_for(content_type).model
        condition = model.is_visible == True  # noqa: E712
        statement = select(model).where(condition).order_by(model.created_at.desc())
        count_statement = select(func.count()).select_from(model).where(condition)
        return self._paginate(statement, count_statement, page, limit)

    def list_for_admin(
        self,
        content_type: ContentType,
        page: int = 1,
        limit: int = 20,
        query: Optional[str] = None,
        watch_status: Optional[WatchStatus] = None,
    ) -> tuple[list[ContentBase], int]:
        """Liste paginee de tous les contenus, visibles ou non."""
        tables = tables_for(content_type)
        model = tables.model
        conditions = []
        if query:
            conditions.append(self._title_filter(content_type, query))
        if watch_status is not None:
            conditions.append(model.watch_status == watch_status)

        statement = select(model).where(*conditions).order_by(model.created_at.desc())
        count_statement = select(func.count()).select_from(model).where(*conditions)
        return self._paginate(statement, count_statement, page, limit)

    def _title_filter(self, content_type: ContentType, query: str):
        """Filtre insensible a la casse sur le titre et le titre original."""
        tables = tables_for(content_type)
        title = getattr(tables.model, tables.title)
        original = getattr(tables.model, tables.original_title)
        return or_(
            title.icontains(query, autoescape=True),
            original.icontains(query, autoescape=True),
        )

    def search(
        self, content_type: ContentType, query: str, page: int = 1, limit: int = 12
    ) -> tuple[list[ContentBase], int]:
        """Recherche par titre parmi les contenus visibles."""
        model = tables_for(content_type).model
        conditions = (model.is_visible == True, self._title_filter(content_type, query))  # noqa: E712
        statement = select(model).where(*conditions).order_by(model.created_at.desc())
        count_statement = select(func.count()).select_from(model).where(*conditions)
        return self._paginate(statement, count_statement, page, limit)

    def search_by_actor(
        self, content_type: ContentType, actor_name: str, page: int = 1, limit: int = 12
    ) -> tuple[list[ContentBase], int]:
        """Recherche les contenus visibles dont un acteur correspond au nom."""
        tables = tables_for(content_type)
        model = tables.model
        cast_fk = getattr(tables.cast_model, tables.fk)
        actor_ids = (
            select(cast_fk)
            .join(ActorModel, ActorModel.id == tables.cast_model.actor_id)
            .where(
                or_(
                    ActorModel.name.icontains(actor_name, autoescape=True),
                    ActorModel.original_name.icontains(actor_name, autoescape=True),
                )
            )
        )
        conditions = (model.is_visible == True, model.id.in_(actor_ids))  # noqa: E712
        statement = select(model).where(*conditions).order_by(model.created_at.desc())
        count_statement = select(func.count()).select_from(model).where(*conditions)
        return self._paginate(statement, count_statement, page, limit)

    def search_by_actor_id(
        self, content_type: ContentType, actor_id: int, page: int = 1, limit: int = 12
    ) -> tuple[list[ContentBase], int]:
        """Contenus visibles ou joue l'acteur donne."""
        tables = tables_for(content_type)
        model = tables.model
        content_ids = select(getattr(tables.cast_model, tables.fk)).where(
            tables.cast_model.actor_id == actor_id
        )
        conditions = (model.is_visible == True, model.id.in_(content_ids))  # noqa: E712
        statement = select(model).where(*conditions).order_by(model.created_at.desc())
        count_statement = select(func.count()).select_from(model).where(*conditions)
        return self._paginate(statement, count_statement, page, limit)

    def filtered(
        self,
        content_type: ContentType,
        watch_status: Optional[WatchStatus] = None,
        genre: Optional[str] = None,
        sort_by: str = "default",
        sort_order: str = "desc",
    ) -> list[ContentBase]:
        """
        Liste les contenus visibles filtres par statut et genre.

        Args :
            sort_by : rating (note Douban), year, name ou default (date d'ajout)
            sort_order : asc ou desc
        """
        tables = tables_for(content_type)
        model = tables.model
        conditions = [model.is_visible == True]  # noqa: E712
        if watch_status is not None:
            conditions.append(model.watch_status == watch_status)
        if genre:
            conditions.append(model.genres_json.contains(genre_pattern(genre), autoescape=True))

        column = {
            "rating": model.douban_rating,
            "year": getattr(model, tables.date),
            "name": getattr(model, tables.title),
        }.get(sort_by, model.created_at)
        order = column.asc() if sort_order == "asc" else column.desc()

        statement = select(model).where(*conditions).order_by(order, model.id.desc())
        return list(self._session.exec(statement).all())

    def similar(
        self, content: ContentBase, page: int = 1, limit: int = 10
    ) -> tuple[list[ContentBase], int]:
        """
        Contenus visibles partageant au moins un genre avec content.

        Le contenu lui-meme est exclu. Sans genre, aucun contenu similaire.
        """
        genres = content.genres
        if not genres:
            return [], 0

        model = type(content)
        conditions = (
            model.is_visible == True,  # noqa: E712
            model.id != content.id,
            or_(*[model.genres_json.contains(genre_pattern(g), autoescape=True) for g in genres]),
        )
        statement = select(model).where(*conditions).order_by(model.created_at.desc())
        count_statement = select(func.count()).select_from(model).where(*conditions)
        return self._paginate(statement, count_statement, page, limit)

    @staticmethod
    def _missing_images(model):
        return or_(
            (model.poster_path != None) & (model.poster_url == None),  # noqa: E711
            (model.backdrop_path != None) & (model.backdrop_url == None),  # noqa: E711
        )

    def list_missing_images(self, content_type: ContentType, limit: int) -> list[ContentBase]:
        """Contenus ayant un chemin TMDB mais pas encore de copie hebergee."""
        model = tables_for(content_type).model
        statement = (
            select(model)
            .where(self._missing_images(model))
            .order_by(model.created_at.desc())
            .limit(limit)
        )
        return list(self._session.exec(statement).all())

    def count_missing_images(self, content_type: ContentType) -> int:
        model = tables_for(content_type).model
        statement = select(func.count()).select_from(model).where(self._missing_images(model))
        return self._session.exec(statement).one()

    def list_ids(self, content_type: ContentType, visible_only: bool = False) -> list[int]:
        """IDs internes de tous les contenus (ou des seuls visibles)."""
        model = tables_for(content_type).model
        statement = select(model.id).order_by(model.id)
        if visible_only:
            statement = statement.where(model.is_visible == True)  # noqa: E712
        return list(self._session.exec(statement).all())

    def list_all(self, content_type: ContentType) -> Sequence[ContentBase]:
        """Tous les contenus d'un type, par ID croissant."""
        model = tables_for(content_type).model
        return self._session.exec(select(model).order_by(model.id)).all()

    def count(
        self, content_type: ContentType, watch_status: Optional[WatchStatus] = None
    ) -> int:
        """Compte les contenus, optionnellement pour un statut donne."""
        model = tables_for(content_type).model
        statement = select(func.count()).select_from(model)
        if watch_status is not None:
            statement = statement.where(model.watch_status == watch_status)
        return self._session.exec(statement).one()

    # ------------------------------------------------------------------
    # Casting
    # ------------------------------------------------------------------

    def get_cast(
        self, content: ContentBase, limit: Optional[int] = None
    ) -> list[tuple[object, ActorModel]]:
        """Casting d'un contenu, par ordre du generique : liste de (role, acteur)."""
        tables = tables_for(content_type_of(content))
        cast_model = tables.cast_model
        statement = (
            select(cast_model, ActorModel)
            .join(ActorModel, ActorModel.id == cast_model.actor_id)
            .where(getattr(cast_model, tables.fk) == content.id)
            .order_by(cast_model.order)
        )
        if limit is not None:
            statement = statement.limit(limit)
        return list(self._session.exec(statement).all())

    def add_cast_member(
        self,
        content: ContentBase,
        actor: ActorModel,
        character: Optional[str],
        order: int,
    ) -> bool:
        """
        Lie un acteur a un contenu.

        Retourne :
            False si la liaison existait deja (rien n'est modifie)
        """
        tables = tables_for(content_type_of(content))
        cast_model = tables.cast_model
        existing = self._session.exec(
            select(cast_model).where(
                getattr(cast_model, tables.fk) == content.id,
                cast_model.actor_id == actor.id,
            )
        ).first()
        if existing is not None:
            return False

        link = cast_model(
            **{tables.fk: content.id},
            actor_id=actor.id,
            character=character,
            order=order,
        )
        self._session.add(link)
        self._session.commit()
        return True
