"""
Upload manuel d'images vers le stockage objet (administrateurs).
"""

from pathlib import PurePosixPath
from typing import Annotated, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from loguru import logger

from ...adapters.api.tmdb_client import TMDBClient
from ...adapters.storage.oss_storage import generate_file_path
from ...core.exceptions import ValidationError
from ...core.value_objects import EntityType
from ...services.operation_logger import LogAction
from ...utils.constants import ALLOWED_IMAGE_TYPES
from ..deps import AdminUser, ContainerDep, SessionDep, SettingsDep, require_admin
from ..schemas import TmdbImageRequest

router = APIRouter(prefix="/api/upload", tags=["upload"], dependencies=[Depends(require_admin)])

UPLOAD_KINDS = {
    "movie": EntityType.MOVIE,
    "tv": EntityType.TV_SHOW,
    "actor": EntityType.ACTOR,
}


def _entity_type(kind: Optional[str]) -> EntityType:
    try:
        return UPLOAD_KINDS[(kind or "").lower()]
    except KeyError:
        raise ValidationError("Invalid type") from None


@router.post("")
async def upload_image(
    user: AdminUser,
    session: SessionDep,
    container: ContainerDep,
    settings: SettingsDep,
    file: Annotated[UploadFile, File()],
    type: Annotated[str, Form()],
    id: Annotated[Optional[str], Form()] = None,
):
    """Depose une image (jpeg, png, webp, gif ; 5 Mo au plus)."""
    entity_type = _entity_type(type)
    extension = ALLOWED_IMAGE_TYPES.get(file.content_type or "")
    if extension is None:
        raise ValidationError("Invalid file type")

    data = await file.read()
    if len(data) > settings.upload_max_bytes:
        raise ValidationError("File too large")

    key = generate_file_path(type.lower(), id or uuid4().hex, extension)
    url = await container.storage().upload_bytes(key, data, file.content_type)
    container.operation_logger(session=session).log(
        LogAction.UPLOAD_IMAGE,
        entity_type,
        f'Uploaded image "{key}"',
        user_id=user.user_id,
        entity_id=int(id) if id and id.isdigit() else None,
        resource_name=key,
        metadata={"key": key, "size": len(data), "contentType": file.content_type},
    )
    logger.info("Image uploadee", key=key, size=len(data))
    return {"success": True, "url": url, "path": key}


@router.delete("")
async def delete_image(
    path: Annotated[str, Query()],
    user: AdminUser,
    session: SessionDep,
    container: ContainerDep,
):
    """Supprime un objet a partir de sa cle ou de son URL publique."""
    storage = container.storage()
    key = storage.key_from_url(path)
    if not key:
        raise ValidationError("Invalid path")

    await storage.delete(key)
    container.operation_logger(session=session).log(
        LogAction.DELETE_IMAGE,
        EntityType.SYSTEM,
        f'Deleted image "{key}"',
        user_id=user.user_id,
        resource_name=key,
        metadata={"key": key},
    )
    return {"success": True}


@router.post("/tmdb")
async def upload_from_tmdb(
    body: TmdbImageRequest,
    user: AdminUser,
    session: SessionDep,
    container: ContainerDep,
):
    """Copie une image TMDB (taille originale) vers le stockage objet."""
    entity_type = _entity_type(body.type)
    if not body.tmdb_image_path:
        raise ValidationError("TMDB image path is required")

    image_path = "/" + body.tmdb_image_path.lstrip("/")
    extension = PurePosixPath(image_path).suffix or ".jpg"
    key = generate_file_path(body.type.lower(), body.tmdb_id, extension)
    url = await container.storage().upload_from_url(
        TMDBClient.image_url(image_path, "original"), key
    )
    container.operation_logger(session=session).log(
        LogAction.UPLOAD_IMAGE,
        entity_type,
        f'Copied TMDB image "{body.tmdb_image_path}" to "{key}"',
        user_id=user.user_id,
        resource_name=key,
        metadata={"key": key, "tmdbImagePath": body.tmdb_image_path, "tmdbId": body.tmdb_id},
    )
    return {"success": True, "url": url}
