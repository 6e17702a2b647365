"""
Tableau de bord : statistiques et listes completes (contenus masques inclus).
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from ....core.value_objects import ContentType
from ....services.catalog import parse_watch_status
from ....utils.constants import ADMIN_PAGE_SIZE
from ...deps import ContainerDep, SessionDep
from ...schemas import AdminActorListOut, AdminActorOut, PaginationOut, content_out

router = APIRouter()

PageQuery = Annotated[int, Query(ge=1)]
LimitQuery = Annotated[int, Query(ge=1, le=100)]


@router.get("/stats")
async def stats(session: SessionDep, container: ContainerDep):
    return container.content_admin_service(session=session).stats()


def _list_contents(
    content_type: ContentType,
    session,
    container,
    page: int,
    limit: int,
    search: Optional[str],
    watch_status: Optional[str],
) -> dict:
    repository = container.content_repository(session=session)
    items, total = repository.list_for_admin(
        content_type,
        page,
        limit,
        query=(search or "").strip() or None,
        watch_status=parse_watch_status(watch_status),
    )
    key = "movies" if content_type is ContentType.MOVIE else "tvShows"
    return {key: [content_out(c) for c in items], "pagination": PaginationOut.build(page, limit, total)}


@router.get("/movies")
async def list_movies(
    session: SessionDep,
    container: ContainerDep,
    page: PageQuery = 1,
    limit: LimitQuery = ADMIN_PAGE_SIZE,
    search: Optional[str] = None,
    watch_status: Annotated[Optional[str], Query(alias="watchStatus")] = None,
):
    """Tous les films, visibles ou non."""
    return _list_contents(ContentType.MOVIE, session, container, page, limit, search, watch_status)


@router.get("/tv")
async def list_tv_shows(
    session: SessionDep,
    container: ContainerDep,
    page: PageQuery = 1,
    limit: LimitQuery = ADMIN_PAGE_SIZE,
    search: Optional[str] = None,
    watch_status: Annotated[Optional[str], Query(alias="watchStatus")] = None,
):
    """Toutes les series, visibles ou non."""
    return _list_contents(ContentType.TV, session, container, page, limit, search, watch_status)


@router.get("/actors", response_model=AdminActorListOut)
async def list_actors(
    session: SessionDep,
    container: ContainerDep,
    page: PageQuery = 1,
    limit: LimitQuery = 50,
    search: Optional[str] = None,
):
    """Acteurs avec leur nombre de roles."""
    repository = container.actor_repository(session=session)
    rows, total = repository.list_with_role_counts(page, limit, (search or "").strip() or None)
    actors = [
        AdminActorOut.model_validate(actor).model_copy(update={"movie_roles": movies, "tv_roles": tv})
        for actor, movies, tv in rows
    ]
    return AdminActorListOut(actors=actors, pagination=PaginationOut.build(page, limit, total))
