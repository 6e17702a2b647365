"""
Routes du pipeline d'images (copie TMDB -> stockage objet).
"""

from typing import Optional

from fastapi import APIRouter

from ....core.exceptions import NotFoundError
from ...deps import AdminUser, ContainerDep, SessionDep, parse_content_type
from ...schemas import ImageBatchRequest, ImageProcessRequest

router = APIRouter(prefix="/images")


@router.post("/process")
async def process_images(
    body: ImageProcessRequest, user: AdminUser, session: SessionDep, container: ContainerDep
):
    """Traite un contenu et les photos de son casting."""
    content_type = parse_content_type(body.content_type)
    processor = container.image_processor(session=session)
    result = await processor.process_by_id(content_type, body.content_id, user_id=user.user_id)
    if result is None:
        raise NotFoundError(f"{content_type.display_name} not found")
    return {"success": True, "results": result.to_dict()}


@router.post("/batch")
async def batch_process_images(
    user: AdminUser, session: SessionDep, container: ContainerDep, body: Optional[ImageBatchRequest] = None
):
    limit = body.limit if body else ImageBatchRequest().limit
    processor = container.image_processor(session=session)
    result = await processor.batch_process(limit, user_id=user.user_id)
    return {"success": True, "results": result.to_dict()}
