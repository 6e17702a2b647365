"""
Critiques et statut de visionnage d'un contenu.

La lecture est publique ; l'ecriture exige un utilisateur connecte,
toujours celui du jeton.
"""

from fastapi import APIRouter

from ....core.exceptions import ValidationError
from ....core.value_objects import ContentType
from ...deps import AuthUser, ContainerDep, SessionDep
from ...schemas import (
    ReviewListOut,
    ReviewOut,
    ReviewRequest,
    ReviewSavedOut,
    WatchStatusOut,
    WatchStatusRequest,
)


def build_router(content_type: ContentType) -> APIRouter:
    router = APIRouter()

    @router.get("/{content_id:int}/reviews", response_model=ReviewListOut)
    async def list_reviews(content_id: int, session: SessionDep, container: ContainerDep):
        catalog = container.catalog_service(session=session)
        catalog.get_visible(content_type, content_id)
        reviews = catalog.list_reviews(content_type, content_id)
        return ReviewListOut(reviews=[ReviewOut.from_row(review, user) for review, user in reviews])

    @router.post("/{content_id:int}/reviews", response_model=ReviewSavedOut)
    async def save_review(
        content_id: int,
        body: ReviewRequest,
        user: AuthUser,
        session: SessionDep,
        container: ContainerDep,
    ):
        """Cree ou remplace la critique de l'utilisateur courant."""
        review = container.catalog_service(session=session).save_review(
            content_type, content_id, user.user_id, body.rating, body.review
        )
        return ReviewSavedOut(review=ReviewOut.from_row(review))

    @router.delete("/{content_id:int}/reviews")
    async def delete_review(
        content_id: int, user: AuthUser, session: SessionDep, container: ContainerDep
    ):
        container.catalog_service(session=session).delete_review(
            content_type, content_id, user.user_id
        )
        return {"success": True}

    @router.get("/{content_id:int}/watch-status")
    async def get_watch_status(content_id: int, session: SessionDep, container: ContainerDep):
        status = container.catalog_service(session=session).get_watch_status(
            content_type, content_id
        )
        return {"watchStatus": status.value}

    @router.put("/{content_id:int}/watch-status", response_model=WatchStatusOut)
    async def update_watch_status(
        content_id: int,
        body: WatchStatusRequest,
        user: AuthUser,
        session: SessionDep,
        container: ContainerDep,
    ):
        if not body.watch_status:
            raise ValidationError("Invalid watch status")
        container.catalog_service(session=session).get_visible(content_type, content_id)
        content = container.content_admin_service(session=session).update_watch_status(
            content_type, content_id, body.watch_status.upper(), user.user_id
        )
        return WatchStatusOut(watch_status=content.watch_status)

    return router
