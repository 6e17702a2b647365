"""
Authentification du back-office.

- Mots de passe hashes avec bcrypt
- Jetons JWT HS256 signes avec le secret de configuration, charge utile
  {userId, username, role}, expiration par defaut 7 jours
- Le premier compte (ADMIN) est cree via initialize() tant que la table
  users est vide
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from loguru import logger
from sqlmodel import Session

from src.config import Settings
from src.core.exceptions import AuthenticationError, ValidationError
from src.core.value_objects import EntityType, UserRole
from src.infrastructure.persistence.models import UserModel, utcnow
from src.infrastructure.persistence.repositories import SQLModelUserRepository
from src.services.operation_logger import LogAction, OperationLogger

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash bcrypt d'un mot de passe."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Compare un mot de passe a son hash (False si le hash est illisible)."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


@dataclass(frozen=True)
class TokenPayload:
    """Identite portee par un jeton valide."""

    user_id: int
    username: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


def create_token(user: UserModel, settings: Settings) -> str:
    """Signe un jeton JWT pour l'utilisateur."""
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user.id,
        "username": user.username,
        "role": UserRole(user.role).value,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expires_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: Optional[str], settings: Settings) -> Optional[TokenPayload]:
    """
    Verifie un jeton et retourne son identite.

    Retourne None si le jeton est absent, mal forme, expire ou mal signe.
    """
    if not token:
        return None
    try:
        data = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return TokenPayload(
            user_id=int(data["userId"]),
            username=str(data["username"]),
            role=UserRole(data["role"]),
        )
    except (jwt.InvalidTokenError, KeyError, ValueError, TypeError):
        return None


class AuthService:
    """Initialisation du systeme, connexion et deconnexion."""

    def __init__(self, session: Session, settings: Settings) -> None:
        self._settings = settings
        self._users = SQLModelUserRepository(session)
        self._oplog = OperationLogger(session)

    def needs_init(self) -> bool:
        """Vrai tant qu'aucun compte n'existe."""
        return self._users.count() == 0

    def initialize(
        self,
        username: str,
        password: str,
        name: str,
        email: Optional[str] = None,
    ) -> UserModel:
        """
        Cree le compte administrateur initial.

        Raises:
            ValidationError: champ manquant, mot de passe trop court, ou
                systeme deja initialise
        """
        if not username or not password or not name:
            raise ValidationError("Username, password and name are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        if not self.needs_init():
            raise ValidationError("System already initialized")

        user = self._users.save(
            UserModel(
                username=username,
                name=name,
                email=email,
                password_hash=hash_password(password, self._settings.bcrypt_rounds),
                role=UserRole.ADMIN,
            )
        )
        self._oplog.log(
            LogAction.SYSTEM_INIT,
            EntityType.SYSTEM,
            f'System initialized, administrator "{user.username}" created',
            user_id=user.id,
            entity_id=user.id,
            resource_name=user.username,
        )
        logger.info("Systeme initialise", username=user.username)
        return user

    def login(self, username: str, password: str) -> tuple[str, UserModel]:
        """
        Verifie les identifiants et emet un jeton.

        Raises:
            ValidationError: identifiants absents
            AuthenticationError: utilisateur inconnu, inactif ou mauvais mot de passe
        """
        if not username or not password:
            raise ValidationError("Username and password are required")

        user = self._users.get_by_username(username)
        if user is None or not user.is_active or not verify_password(password, user.password_hash):
            logger.warning("Echec de connexion", username=username)
            raise AuthenticationError("Invalid credentials")

        user.last_login_at = utcnow()
        user = self._users.save(user)
        self._oplog.log(
            LogAction.LOGIN,
            EntityType.USER,
            f'User "{user.username}" logged in',
            user_id=user.id,
            entity_id=user.id,
            resource_name=user.username,
        )
        return create_token(user, self._settings), user

    def logout(self, payload: Optional[TokenPayload]) -> None:
        """Journalise la deconnexion si le jeton etait valide."""
        if payload is None:
            return
        self._oplog.log(
            LogAction.LOGOUT,
            EntityType.USER,
            f'User "{payload.username}" logged out',
            user_id=payload.user_id,
            entity_id=payload.user_id,
            resource_name=payload.username,
        )

    def current_user(self, payload: Optional[TokenPayload]) -> Optional[UserModel]:
        """Compte actif correspondant au jeton, ou None."""
        if payload is None:
            return None
        user = self._users.get_by_id(payload.user_id)
        if user is None or not user.is_active:
            return None
        return user
