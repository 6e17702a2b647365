"""
Tests unitaires pour l'authentification (hash, jetons JWT, AuthService).
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from sqlmodel import Session, select

from src.config import Settings
from src.core.exceptions import AuthenticationError, ValidationError
from src.core.value_objects import UserRole
from src.infrastructure.persistence.models import OperationLogModel
from src.services.auth import (
    AuthService,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)

TEST_PASSWORD = "secret123"


class TestPasswords:
    def test_hash_and_verify(self) -> None:
        hashed = hash_password("secret123", rounds=4)
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)

    def test_unreadable_hash_is_rejected(self) -> None:
        assert not verify_password("secret123", "not-a-bcrypt-hash")


class TestTokens:
    """Tests pour create_token() et decode_token()."""

    def test_round_trip(self, make_user, test_settings: Settings) -> None:
        user = make_user("admin", role=UserRole.ADMIN)

        payload = decode_token(create_token(user, test_settings), test_settings)

        assert payload.user_id == user.id
        assert payload.username == "admin"
        assert payload.is_admin

    def test_claims(self, make_user, test_settings: Settings) -> None:
        """La charge utile porte userId, username et role."""
        user = make_user("bob")
        data = jwt.decode(
            create_token(user, test_settings), test_settings.jwt_secret, algorithms=["HS256"]
        )
        assert data["userId"] == user.id
        assert data["role"] == "USER"
        assert data["exp"] - data["iat"] == 7 * 86400

    def test_invalid_tokens_return_none(self, test_settings: Settings) -> None:
        assert decode_token(None, test_settings) is None
        assert decode_token("garbage", test_settings) is None
        forged = jwt.encode({"userId": 1, "username": "x", "role": "ADMIN"}, "other-secret")
        assert decode_token(forged, test_settings) is None

    def test_expired_token_returns_none(self, test_settings: Settings) -> None:
        past = datetime.now(timezone.utc) - timedelta(days=1)
        token = jwt.encode(
            {"userId": 1, "username": "x", "role": "ADMIN", "exp": past},
            test_settings.jwt_secret,
        )
        assert decode_token(token, test_settings) is None


class TestAuthService:
    """Tests pour AuthService."""

    @pytest.fixture
    def service(self, session: Session, test_settings: Settings) -> AuthService:
        return AuthService(session, test_settings)

    def test_initialize_creates_admin(self, service: AuthService, session: Session) -> None:
        assert service.needs_init()

        user = service.initialize("admin", "secret123", "Admin", "admin@example.com")

        assert user.role is UserRole.ADMIN
        assert not service.needs_init()
        entry = session.exec(select(OperationLogModel)).one()
        assert entry.action == "SYSTEM_INIT"

    @pytest.mark.parametrize("username,password,name,message", [
        ("", "secret123", "Admin", "Username, password and name are required"),
        ("admin", "secret123", "", "Username, password and name are required"),
        ("admin", "12345", "Admin", "Password must be at least 6 characters long"),
    ])
    def test_initialize_validation(
        self, service: AuthService, username, password, name, message
    ) -> None:
        with pytest.raises(ValidationError, match=message):
            service.initialize(username, password, name)

    def test_initialize_only_once(self, service: AuthService) -> None:
        service.initialize("admin", "secret123", "Admin")
        with pytest.raises(ValidationError, match="System already initialized"):
            service.initialize("other", "secret123", "Other")

    def test_login_success(self, service: AuthService, make_user, test_settings) -> None:
        make_user("alice")

        token, user = service.login("alice", TEST_PASSWORD)

        assert user.last_login_at is not None
        assert decode_token(token, test_settings).username == "alice"

    @pytest.mark.parametrize("username,password", [
        ("alice", "wrong-password"),
        ("unknown", TEST_PASSWORD),
    ])
    def test_login_invalid_credentials(
        self, service: AuthService, make_user, username, password
    ) -> None:
        make_user("alice")
        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            service.login(username, password)

    def test_login_inactive_user(self, service: AuthService, make_user) -> None:
        make_user("alice", is_active=False)
        with pytest.raises(AuthenticationError):
            service.login("alice", TEST_PASSWORD)

    def test_login_requires_fields(self, service: AuthService) -> None:
        with pytest.raises(ValidationError, match="Username and password are required"):
            service.login("", "")

    def test_current_user(self, service: AuthService, make_user, test_settings) -> None:
        user = make_user("alice")
        payload = decode_token(create_token(user, test_settings), test_settings)

        assert service.current_user(payload).id == user.id
        assert service.current_user(None) is None

    def test_logout_is_logged(self, service: AuthService, make_user, test_settings, session) -> None:
        user = make_user("alice")
        service.logout(decode_token(create_token(user, test_settings), test_settings))

        entry = session.exec(select(OperationLogModel)).one()
        assert entry.action == "LOGOUT"
        assert entry.operator_name == "Alice"
