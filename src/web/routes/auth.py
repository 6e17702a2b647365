"""
Routes d'authentification : initialisation, connexion, deconnexion.

Le jeton est renvoye dans la reponse et pose en cookie httpOnly.
"""

from fastapi import APIRouter, Response

from ...core.exceptions import AuthenticationError
from ..deps import ContainerDep, CurrentUser, SessionDep, SettingsDep
from ..schemas import InitRequest, LoginRequest, LoginResponse, UserOut, UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/check-init")
async def check_init(session: SessionDep, container: ContainerDep):
    """Indique si le compte administrateur initial reste a creer."""
    service = container.auth_service(session=session)
    return {"needsInit": service.needs_init()}


@router.post("/init", response_model=UserResponse)
async def init_system(body: InitRequest, session: SessionDep, container: ContainerDep):
    service = container.auth_service(session=session)
    user = service.initialize(body.username, body.password, body.name, body.email)
    return UserResponse(user=UserOut.model_validate(user))


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    session: SessionDep,
    container: ContainerDep,
    settings: SettingsDep,
):
    service = container.auth_service(session=session)
    token, user = service.login(body.username, body.password)
    response.set_cookie(
        settings.auth_cookie_name,
        token,
        max_age=settings.jwt_expires_days * 86400,
        httponly=True,
        samesite="lax",
        secure=settings.auth_cookie_secure,
    )
    return LoginResponse(token=token, user=UserOut.model_validate(user))


@router.post("/logout")
async def logout(
    response: Response,
    payload: CurrentUser,
    session: SessionDep,
    container: ContainerDep,
    settings: SettingsDep,
):
    container.auth_service(session=session).logout(payload)
    response.delete_cookie(settings.auth_cookie_name)
    return {"success": True}


@router.get("/me", response_model=UserResponse, response_model_exclude={"success"})
async def me(payload: CurrentUser, session: SessionDep, container: ContainerDep):
    user = container.auth_service(session=session).current_user(payload)
    if user is None:
        raise AuthenticationError("Authentication required")
    return UserResponse(user=UserOut.model_validate(user))
