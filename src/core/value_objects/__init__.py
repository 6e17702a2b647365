"""
Objets valeur immutables representant des concepts du domaine sans identite.

Exports :
- WatchStatus : Statut de visionnage (UNWATCHED, WATCHING, WATCHED, DROPPED)
- UserRole : Role utilisateur (ADMIN, USER)
- EntityType : Type d'entite journalisee (MOVIE, TV_SHOW, ACTOR, USER, SYSTEM)
- ContentType : Type de contenu expose par l'API (movie, tv)
"""

from src.core.value_objects.catalog import (
    ContentType,
    EntityType,
    UserRole,
    WatchStatus,
)

__all__ = [
    "ContentType",
    "EntityType",
    "UserRole",
    "WatchStatus",
]
