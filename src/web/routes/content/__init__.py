"""
Package routes publiques du catalogue.

Regroupe les sous-modules : search, detail, reviews, actors. Les routes
de fiche et de critiques existent en deux exemplaires, /movies et /tv.
"""

from fastapi import APIRouter

from ....core.value_objects import ContentType
from . import actors, detail, reviews, search

router = APIRouter(prefix="/api", tags=["catalog"])

router.include_router(search.router)
router.include_router(actors.router)
for content_type, prefix in ((ContentType.MOVIE, "/movies"), (ContentType.TV, "/tv")):
    router.include_router(detail.build_router(content_type), prefix=prefix)
    router.include_router(reviews.build_router(content_type), prefix=prefix)
