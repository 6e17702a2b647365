"""
Fiche acteur et filmographie visible.
"""

from fastapi import APIRouter

from ...deps import ContainerDep, SessionDep
from ...schemas import ActorOut, FilmographyOut, MovieRoleOut, TvShowRoleOut

router = APIRouter()


@router.get("/actors/{actor_id:int}", response_model=FilmographyOut)
async def actor_detail(actor_id: int, session: SessionDep, container: ContainerDep):
    filmography = container.catalog_service(session=session).actor_detail(actor_id)
    return FilmographyOut(
        actor=ActorOut.model_validate(filmography.actor),
        movies=[
            MovieRoleOut.model_validate(content).model_copy(update={"character": role.character})
            for content, role in filmography.movies
        ],
        tv_shows=[
            TvShowRoleOut.model_validate(content).model_copy(update={"character": role.character})
            for content, role in filmography.tv_shows
        ],
    )
