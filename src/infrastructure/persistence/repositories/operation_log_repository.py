"""
Implementation SQLModel du repository du journal des operations.
"""

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func
from sqlmodel import Session, select

from src.core.value_objects import EntityType
from src.infrastructure.persistence.models import OperationLogModel


class SQLModelOperationLogRepository:
    """Repository SQLModel pour le journal d'audit."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, entry: OperationLogModel) -> OperationLogModel:
        """Enregistre une nouvelle entree."""
        self._session.add(entry)
        self._session.commit()
        self._session.refresh(entry)
        return entry

    def save_many(self, entries: Sequence[OperationLogModel]) -> None:
        """Persiste un lot d'entrees modifiees en une transaction."""
        for entry in entries:
            self._session.add(entry)
        self._session.commit()

    def list_page(
        self,
        page: int = 1,
        limit: int = 20,
        action: Optional[str] = None,
        entity_type: Optional[EntityType] = None,
    ) -> tuple[list[OperationLogModel], int]:
        """Entrees paginees, les plus recentes d'abord."""
        conditions = []
        if action:
            conditions.append(OperationLogModel.action == action)
        if entity_type is not None:
            conditions.append(OperationLogModel.entity_type == entity_type)

        statement = (
            select(OperationLogModel)
            .where(*conditions)
            .order_by(OperationLogModel.created_at.desc(), OperationLogModel.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        total = self._session.exec(
            select(func.count()).select_from(OperationLogModel).where(*conditions)
        ).one()
        return list(self._session.exec(statement).all()), total

    def list_all(self) -> Sequence[OperationLogModel]:
        """Toutes les entrees, par ID croissant."""
        return self._session.exec(select(OperationLogModel).order_by(OperationLogModel.id)).all()

    def list_without_snapshot(self) -> Sequence[OperationLogModel]:
        """Entrees anterieures a la denormalisation (operator_name vide)."""
        statement = (
            select(OperationLogModel)
            .where(OperationLogModel.operator_name == None)  # noqa: E711
            .order_by(OperationLogModel.id)
        )
        return self._session.exec(statement).all()

    def count(self) -> int:
        return self._session.exec(select(func.count()).select_from(OperationLogModel)).one()

    def count_by(self, column) -> dict[str, int]:
        """Nombre d'entrees groupees par la colonne donnee (action, entity_type...)."""
        statement = (
            select(column, func.count())
            .select_from(OperationLogModel)
            .group_by(column)
            .order_by(func.count().desc())
        )
        return {
            (key.value if hasattr(key, "value") else str(key)): total
            for key, total in self._session.exec(statement).all()
        }

    def count_where(self, *conditions) -> int:
        statement = select(func.count()).select_from(OperationLogModel).where(*conditions)
        return self._session.exec(statement).one()

    def last_run(self, actions: Sequence[str]) -> Optional[OperationLogModel]:
        """Derniere entree parmi les actions donnees."""
        statement = (
            select(OperationLogModel)
            .where(OperationLogModel.action.in_(list(actions)))
            .order_by(OperationLogModel.created_at.desc(), OperationLogModel.id.desc())
        )
        return self._session.exec(statement).first()

    def date_range(self) -> tuple[Optional[datetime], Optional[datetime]]:
        """Dates de la plus ancienne et de la plus recente entree."""
        statement = select(
            func.min(OperationLogModel.created_at), func.max(OperationLogModel.created_at)
        )
        oldest, newest = self._session.exec(statement).one()
        return oldest, newest
