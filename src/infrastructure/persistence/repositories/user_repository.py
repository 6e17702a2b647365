"""
Implementation SQLModel du repository des utilisateurs.
"""

from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from src.infrastructure.persistence.models import UserModel, utcnow


class SQLModelUserRepository:
    """Repository SQLModel pour les comptes utilisateurs."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, user_id: int) -> Optional[UserModel]:
        """Recupere un utilisateur par son ID."""
        return self._session.get(UserModel, user_id)

    def get_by_username(self, username: str) -> Optional[UserModel]:
        """Recupere un utilisateur par son identifiant de connexion."""
        statement = select(UserModel).where(UserModel.username == username)
        return self._session.exec(statement).first()

    def count(self) -> int:
        return self._session.exec(select(func.count()).select_from(UserModel)).one()

    def save(self, user: UserModel) -> UserModel:
        """Insere ou met a jour un utilisateur."""
        if user.id is not None:
            user.updated_at = utcnow()
        self._session.add(user)
        self._session.commit()
        self._session.refresh(user)
        return user

    def names_by_id(self, user_ids: set[int]) -> dict[int, str]:
        """Nom affichable de chaque utilisateur connu parmi user_ids."""
        if not user_ids:
            return {}
        users = self._session.exec(select(UserModel).where(UserModel.id.in_(user_ids))).all()
        return {user.id: user.display_name for user in users}
