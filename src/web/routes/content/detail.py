"""
Listes, fiches et contenus similaires.

build_router() produit les memes routes pour les films et les series ;
seules les cles de reponse changent (movie/similarMovies ou
tvShow/similarTvShows).
"""

from typing import Annotated

from fastapi import APIRouter, Query

from ....core.value_objects import ContentType
from ....utils.constants import SIMILAR_LIMIT
from ...deps import ContainerDep, SessionDep
from ...schemas import (
    CastOut,
    MovieDetailOut,
    PaginationOut,
    ReviewOut,
    TvShowDetailOut,
    content_card,
)

_KEYS = {
    ContentType.MOVIE: ("movie", "movies", "Movies", MovieDetailOut),
    ContentType.TV: ("tvShow", "tvShows", "TvShows", TvShowDetailOut),
}


def build_router(content_type: ContentType) -> APIRouter:
    router = APIRouter()
    item_key, list_key, suffix, detail_model = _KEYS[content_type]

    @router.get("")
    async def list_contents(
        session: SessionDep,
        container: ContainerDep,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int, Query(ge=1, le=100)] = 20,
    ):
        """Contenus visibles, les plus recents d'abord."""
        items, total = container.catalog_service(session=session).list_visible(
            content_type, page, limit
        )
        return {
            list_key: [content_card(c) for c in items],
            "pagination": PaginationOut.build(page, limit, total),
        }

    @router.get("/{content_id:int}")
    async def content_detail(content_id: int, session: SessionDep, container: ContainerDep):
        """Fiche visible avec casting, critiques et contenus similaires."""
        detail = container.catalog_service(session=session).detail(content_type, content_id)
        item = detail_model.model_validate(detail.content)
        item.cast = [CastOut.from_row(cast, actor) for cast, actor in detail.cast]
        item.reviews = [ReviewOut.from_row(review, user) for review, user in detail.reviews]
        return {
            item_key: item,
            f"similar{suffix}": [content_card(c) for c in detail.similar],
            f"hasMoreSimilar{suffix}": detail.has_more_similar,
        }

    @router.get("/{content_id:int}/similar")
    async def similar_contents(
        content_id: int,
        session: SessionDep,
        container: ContainerDep,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int, Query(ge=1, le=50)] = SIMILAR_LIMIT,
    ):
        items, total = container.catalog_service(session=session).similar(
            content_type, content_id, page, limit
        )
        return {
            list_key: [content_card(c) for c in items],
            "hasMore": page * limit < total,
            "total": total,
            "page": page,
        }

    return router
