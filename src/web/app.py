"""
Application FastAPI de WatchList.

Initialise l'application web avec le Container DI, convertit les
exceptions du domaine en reponses JSON et monte les routes /api.
"""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from ..adapters.api.retry import RateLimitError, TransientAPIError
from ..container import Container
from ..core.exceptions import ContentAlreadyExistsError, WatchListError
from .routes.admin import router as admin_router
from .routes.auth import router as auth_router
from .routes.content import router as content_router
from .routes.douban import router as douban_router
from .routes.tmdb import router as tmdb_router
from .routes.upload import router as upload_router


async def _watchlist_error(request: Request, exc: WatchListError) -> JSONResponse:
    body = {"error": exc.message}
    if isinstance(exc, ContentAlreadyExistsError) and exc.existing_id is not None:
        body["existingId"] = exc.existing_id
    if exc.status_code >= 500:
        logger.warning("Erreur de service", path=request.url.path, error=exc.message)
    return JSONResponse(body, status_code=exc.status_code)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Premiere erreur de validation, au format {"error": message} (400)."""
    errors = exc.errors()
    if not errors:
        return JSONResponse({"error": "Invalid request"}, status_code=400)
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first['msg']}" if field else first["msg"]
    return JSONResponse({"error": message}, status_code=400)


async def _upstream_error(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("Service externe injoignable", path=request.url.path, error=str(exc))
    return JSONResponse({"error": "External service error"}, status_code=502)


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Erreur inattendue", path=request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Construit l'application.

    Args:
        container: Container deja configure (tests) ; sinon un Container
            par defaut est cree au demarrage
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialise le Container DI au demarrage et ferme les clients a l'arret."""
        active = container or Container()
        active.database.init()
        app.state.container = active
        yield
        await active.tmdb_client().close()
        await active.douban_client().close()

    app = FastAPI(title="WatchList", lifespan=lifespan)

    app.add_exception_handler(WatchListError, _watchlist_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    for exc_type in (RateLimitError, TransientAPIError, httpx.HTTPError):
        app.add_exception_handler(exc_type, _upstream_error)
    app.add_exception_handler(Exception, _unexpected_error)

    # Routes
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(content_router)
    app.include_router(upload_router)
    app.include_router(tmdb_router)
    app.include_router(douban_router)
    return app


app = create_app()
