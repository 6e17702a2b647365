"""
Implementation SQLModel du repository des critiques.

Un utilisateur a au plus une critique par contenu (contrainte unique
contenu/utilisateur) : l'ecriture est donc un upsert.
"""

from typing import Optional

from sqlmodel import Session, select

from src.core.value_objects import ContentType
from src.infrastructure.persistence.models import UserModel, tables_for, utcnow


class SQLModelReviewRepository:
    """Repository SQLModel pour les critiques de films et de series."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_for_content(
        self, content_type: ContentType, content_id: int
    ) -> list[tuple[object, UserModel]]:
        """Critiques d'un contenu, les plus recentes d'abord : liste de (critique, auteur)."""
        tables = tables_for(content_type)
        review_model = tables.review_model
        statement = (
            select(review_model, UserModel)
            .join(UserModel, UserModel.id == review_model.user_id)
            .where(getattr(review_model, tables.fk) == content_id)
            .order_by(review_model.created_at.desc(), review_model.id.desc())
        )
        return list(self._session.exec(statement).all())

    def get(self, content_type: ContentType, content_id: int, user_id: int):
        """Critique d'un utilisateur sur un contenu, ou None."""
        tables = tables_for(content_type)
        review_model = tables.review_model
        statement = select(review_model).where(
            getattr(review_model, tables.fk) == content_id,
            review_model.user_id == user_id,
        )
        return self._session.exec(statement).first()

    def upsert(
        self,
        content_type: ContentType,
        content_id: int,
        user_id: int,
        rating: Optional[int],
        review: Optional[str],
    ) -> tuple[object, bool]:
        """
        Cree ou remplace la critique d'un utilisateur.

        Retourne :
            (critique, created) ou created vaut False pour une mise a jour
        """
        existing = self.get(content_type, content_id, user_id)
        if existing is not None:
            existing.rating = rating
            existing.review = review
            existing.updated_at = utcnow()
            record, created = existing, False
        else:
            tables = tables_for(content_type)
            record = tables.review_model(
                **{tables.fk: content_id},
                user_id=user_id,
                rating=rating,
                review=review,
            )
            created = True
        self._session.add(record)
        self._session.commit()
        self._session.refresh(record)
        return record, created

    def delete(self, content_type: ContentType, content_id: int, user_id: int) -> bool:
        """Supprime la critique, retourne False si elle n'existait pas."""
        existing = self.get(content_type, content_id, user_id)
        if existing is None:
            return False
        self._session.delete(existing)
        self._session.commit()
        return True
