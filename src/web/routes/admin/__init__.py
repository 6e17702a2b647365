"""
Package routes d'administration, reservees aux administrateurs.

Regroupe les sous-modules : dashboard, content, images, logs, scheduled_tasks.
"""

from fastapi import APIRouter, Depends

from ...deps import require_admin
from . import content, dashboard, images, logs, scheduled_tasks

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])

router.include_router(dashboard.router)
router.include_router(content.router)
router.include_router(images.router)
router.include_router(logs.router)
router.include_router(scheduled_tasks.router)
