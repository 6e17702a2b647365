"""
Recherche et filtrage du catalogue public.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from ....utils.constants import SEARCH_PAGE_SIZE
from ....utils.helpers import page_count
from ...deps import ContainerDep, SessionDep
from ...schemas import (
    ActorOut,
    ContentLists,
    MovieCardOut,
    SearchOut,
    SearchPaginationOut,
    TvShowCardOut,
)

router = APIRouter()


@router.get("/search", response_model=SearchOut)
async def search(
    session: SessionDep,
    container: ContainerDep,
    q: Optional[str] = None,
    actor: Optional[str] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = SEARCH_PAGE_SIZE,
):
    """
    Recherche par titre (q) ou par acteur (ID interne ou nom).

    La pagination est commune aux films et aux series : chaque page
    contient au plus `limit` films et `limit` series.
    """
    results = container.catalog_service(session=session).search(q, actor, page, limit)
    movie_pages = page_count(results.movies_total, limit)
    tv_pages = page_count(results.tv_shows_total, limit)
    return SearchOut(
        movies=[MovieCardOut.model_validate(c) for c in results.movies],
        tv_shows=[TvShowCardOut.model_validate(c) for c in results.tv_shows],
        actor=ActorOut.model_validate(results.actor) if results.actor else None,
        pagination=SearchPaginationOut(
            page=page,
            limit=limit,
            total={
                "movies": results.movies_total,
                "tvShows": results.tv_shows_total,
                "all": results.total,
            },
            total_pages={"movies": movie_pages, "tvShows": tv_pages, "all": max(movie_pages, tv_pages)},
        ),
    )


@router.get("/content/filtered", response_model=ContentLists)
async def filtered(
    session: SessionDep,
    container: ContainerDep,
    watch_status: Annotated[Optional[str], Query(alias="watchStatus")] = None,
    genre: Optional[str] = None,
    sort_by: Annotated[str, Query(alias="sortBy")] = "default",
    sort_order: Annotated[str, Query(alias="sortOrder")] = "desc",
):
    """Films et series visibles filtres par statut et genre."""
    movies, tv_shows = container.catalog_service(session=session).filtered(
        watch_status, genre, sort_by, sort_order
    )
    return ContentLists(
        movies=[MovieCardOut.model_validate(c) for c in movies],
        tv_shows=[TvShowCardOut.model_validate(c) for c in tv_shows],
    )
