"""
Proxy TMDB de l'interface d'administration.

Les resultats indiquent si le contenu est deja au catalogue (existingId),
pour que l'interface propose l'import ou le lien vers la fiche.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ...core.exceptions import NotFoundError, ServiceUnavailableError, ValidationError
from ...core.value_objects import ContentType
from ..deps import ContainerDep, SessionDep, parse_content_type, require_admin
from ..schemas import TmdbCastOut, TmdbDetailsOut, TmdbSearchOut, TmdbSearchResultOut

router = APIRouter(prefix="/api/tmdb", tags=["tmdb"], dependencies=[Depends(require_admin)])


def _client(container):
    client = container.tmdb_client()
    if not client.enabled:
        raise ServiceUnavailableError("TMDB API key is not configured")
    return client


@router.get("/search/{kind}", response_model=TmdbSearchOut)
async def search(
    kind: str,
    session: SessionDep,
    container: ContainerDep,
    query: str = "",
    page: Annotated[int, Query(ge=1)] = 1,
):
    content_type = parse_content_type(kind)
    if not query.strip():
        raise ValidationError("Search query is required")

    results = await _client(container).search(query.strip(), content_type, page)
    contents = container.content_repository(session=session)
    items = []
    for result in results:
        existing = contents.get_by_tmdb_id(content_type, result.tmdb_id)
        item = TmdbSearchResultOut.model_validate(result)
        item.existing_id = existing.id if existing else None
        items.append(item)
    return TmdbSearchOut(results=items, page=page)


async def _details(content_type: ContentType, tmdb_id: int, session, container) -> TmdbDetailsOut:
    client = _client(container)
    details = await client.get_details(content_type, tmdb_id)
    if details is None:
        raise NotFoundError(f"TMDB {content_type.value} {tmdb_id} not found")
    credits = await client.get_credits(content_type, tmdb_id)
    existing = container.content_repository(session=session).get_by_tmdb_id(content_type, tmdb_id)
    out = TmdbDetailsOut.model_validate(details)
    out.cast = [TmdbCastOut.model_validate(credit) for credit in credits[:20]]
    out.existing_id = existing.id if existing else None
    return out


@router.get("/movie/{tmdb_id:int}", response_model=TmdbDetailsOut)
async def movie_details(tmdb_id: int, session: SessionDep, container: ContainerDep):
    return await _details(ContentType.MOVIE, tmdb_id, session, container)


@router.get("/tv/{tmdb_id:int}", response_model=TmdbDetailsOut)
async def tv_details(tmdb_id: int, session: SessionDep, container: ContainerDep):
    return await _details(ContentType.TV, tmdb_id, session, container)
