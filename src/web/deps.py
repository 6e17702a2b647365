"""
Dépendances partagées de l'application web.

Fournit la session SQLModel de la requête, le Container DI et
l'authentification (jeton JWT en cookie ou en en-tête Bearer).
"""

from collections.abc import Generator
from typing import Annotated, Optional

from fastapi import Depends, Query, Request
from sqlmodel import Session

from ..config import Settings
from ..container import Container
from ..core.exceptions import AuthenticationError, ValidationError
from ..core.value_objects import ContentType
from ..infrastructure.persistence.database import get_session
from ..services.auth import TokenPayload, decode_token


def get_container(request: Request) -> Container:
    """Container DI initialisé au démarrage de l'application."""
    return request.app.state.container


def get_settings(container: Annotated[Container, Depends(get_container)]) -> Settings:
    return container.config()


def get_db_session() -> Generator[Session, None, None]:
    """Une session par requête, fermée à la fin de la réponse."""
    yield from get_session()


def _extract_token(request: Request, settings: Settings) -> Optional[str]:
    """Jeton de l'en-tête Authorization (Bearer), sinon du cookie d'auth."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(settings.auth_cookie_name)


def get_current_user_payload(
    request: Request, settings: Annotated[Settings, Depends(get_settings)]
) -> Optional[TokenPayload]:
    """Utilisateur courant d'après le jeton, None si absent ou invalide."""
    return decode_token(_extract_token(request, settings), settings)


def require_auth(
    payload: Annotated[Optional[TokenPayload], Depends(get_current_user_payload)],
) -> TokenPayload:
    if payload is None:
        raise AuthenticationError("Authentication required")
    return payload


def require_admin(payload: Annotated[TokenPayload, Depends(require_auth)]) -> TokenPayload:
    if not payload.is_admin:
        raise AuthenticationError("Admin access required")
    return payload


def parse_content_type(value: Optional[str]) -> ContentType:
    """ContentType depuis un paramètre ou un corps de requête, 400 si invalide."""
    try:
        return ContentType.parse(value)
    except ValueError:
        raise ValidationError("Invalid content type") from None


def content_type_query(type: Annotated[Optional[str], Query()] = None) -> ContentType:
    return parse_content_type(type)


SessionDep = Annotated[Session, Depends(get_db_session)]
ContainerDep = Annotated[Container, Depends(get_container)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
CurrentUser = Annotated[Optional[TokenPayload], Depends(get_current_user_payload)]
AuthUser = Annotated[TokenPayload, Depends(require_auth)]
AdminUser = Annotated[TokenPayload, Depends(require_admin)]
