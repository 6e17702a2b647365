"""
Routes d'edition du catalogue : import TMDB, edition, suppression,
visibilite, note, statut et rafraichissement des metadonnees.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from ....core.exceptions import ValidationError
from ...deps import AdminUser, ContainerDep, SessionDep, parse_content_type
from ...schemas import (
    ContentResponse,
    EditRequest,
    FieldUpdateRequest,
    ImportRequest,
    RatingRequest,
    RefreshRequest,
    StatusRequest,
    VisibilityRequest,
    content_out,
)

router = APIRouter(prefix="/content")


@router.post("/import")
async def import_content(
    body: ImportRequest, user: AdminUser, session: SessionDep, container: ContainerDep
):
    """Importe un film ou une serie depuis TMDB (409 si deja present)."""
    content_type = parse_content_type(body.type)
    service = container.import_service(
        session=session, image_processor=container.image_processor(session=session)
    )
    result = await service.import_content(
        content_type, body.tmdb_id, user_id=user.user_id, process_images=body.process_images
    )
    return {
        "success": True,
        "content": content_out(result.content),
        "castImported": result.cast_imported,
        "castErrors": result.cast_errors,
        "images": result.images.to_dict() if result.images else None,
    }


@router.patch("/edit", response_model=ContentResponse)
async def edit_content(
    body: EditRequest, user: AdminUser, session: SessionDep, container: ContainerDep
):
    service = container.content_admin_service(session=session)
    content = service.update(parse_content_type(body.type), body.id, body.data, user.user_id)
    return ContentResponse(content=content_out(content))


@router.put("/manage", response_model=ContentResponse)
async def update_content(
    body: EditRequest, user: AdminUser, session: SessionDep, container: ContainerDep
):
    service = container.content_admin_service(session=session)
    content = service.update(parse_content_type(body.type), body.id, body.data, user.user_id)
    return ContentResponse(content=content_out(content))


@router.patch("/manage", response_model=ContentResponse)
async def update_content_field(
    body: FieldUpdateRequest, user: AdminUser, session: SessionDep, container: ContainerDep
):
    service = container.content_admin_service(session=session)
    content = service.update_field(
        parse_content_type(body.type), body.id, body.field, body.value, user.user_id
    )
    return ContentResponse(content=content_out(content))


@router.delete("/manage")
async def delete_content(
    id: Annotated[int, Query()],
    user: AdminUser,
    session: SessionDep,
    container: ContainerDep,
    type: Annotated[Optional[str], Query()] = None,
):
    service = container.content_admin_service(session=session)
    service.delete(parse_content_type(type), id, user.user_id)
    return {"success": True}


@router.post("/toggle-visibility", response_model=ContentResponse)
async def toggle_visibility(
    body: VisibilityRequest, user: AdminUser, session: SessionDep, container: ContainerDep
):
    service = container.content_admin_service(session=session)
    content = service.toggle_visibility(
        parse_content_type(body.type), body.id, body.is_visible, user.user_id
    )
    return ContentResponse(content=content_out(content))


@router.post("/update-rating", response_model=ContentResponse)
async def update_rating(
    body: RatingRequest, user: AdminUser, session: SessionDep, container: ContainerDep
):
    service = container.content_admin_service(session=session)
    content = service.update_rating(parse_content_type(body.type), body.id, body.rating, user.user_id)
    return ContentResponse(content=content_out(content))


@router.post("/update-status", response_model=ContentResponse)
async def update_status(
    body: StatusRequest, user: AdminUser, session: SessionDep, container: ContainerDep
):
    service = container.content_admin_service(session=session)
    content = service.update_watch_status(
        parse_content_type(body.type), body.id, body.watch_status, user.user_id
    )
    return ContentResponse(content=content_out(content))


@router.post("/refresh-tmdb")
async def refresh_tmdb(
    body: RefreshRequest, user: AdminUser, session: SessionDep, container: ContainerDep
):
    """Recharge les metadonnees TMDB des contenus designes (ou de tous)."""
    if not body.refresh_all and not body.movie_ids and not body.tv_show_ids:
        raise ValidationError("No content IDs provided")

    service = container.refresh_service(session=session)
    stats = await service.refresh(
        movie_ids=body.movie_ids,
        tv_ids=body.tv_show_ids,
        refresh_all=body.refresh_all,
        user_id=user.user_id,
    )
    return {
        "success": True,
        "message": f"Refreshed {stats.success} items, {stats.failed} failed",
        "results": stats.to_dict(),
    }
