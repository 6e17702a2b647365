"""
Notes Douban : recherche et enregistrement sur un contenu.

Sans cle API configuree, la recherche renvoie une note nulle.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from ...core.exceptions import ValidationError
from ..deps import AdminUser, ContainerDep, SessionDep, parse_content_type, require_admin
from ..schemas import DoubanRatingRequest, content_out

router = APIRouter(prefix="/api/douban", tags=["douban"], dependencies=[Depends(require_admin)])


@router.get("/rating")
async def find_rating(
    container: ContainerDep,
    title: Annotated[Optional[str], Query()] = None,
    type: Annotated[Optional[str], Query()] = None,
):
    content_type = parse_content_type(type)
    if not title or not title.strip():
        raise ValidationError("Title is required")
    rating = await container.douban_client().find_rating(title.strip(), content_type)
    return {"rating": rating}


@router.post("/rating")
async def store_rating(
    body: DoubanRatingRequest, user: AdminUser, session: SessionDep, container: ContainerDep
):
    """Cherche la note du contenu sur Douban et l'enregistre si elle existe."""
    content_type = parse_content_type(body.content_type)
    admin = container.content_admin_service(session=session)
    content = admin.get(content_type, body.content_id)

    title = (body.title or "").strip() or content.display_title
    rating = await container.douban_client().find_rating(title, content_type)
    if rating is None:
        return {"success": False, "rating": None, "content": content_out(content)}

    content = admin.update_rating(content_type, content.id, rating, user.user_id)
    return {"success": True, "rating": rating, "content": content_out(content)}
