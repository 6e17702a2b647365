"""
Objets valeur du catalogue : statuts de visionnage, rôles et types d'entités.

Les valeurs sont stockées telles quelles en base (colonnes texte) et exposées
dans les réponses JSON, elles doivent donc rester stables.
"""

from enum import Enum


class WatchStatus(str, Enum):
    """Statut de visionnage d'un film ou d'une série.

    Valeurs:
        UNWATCHED: Pas encore vu (defaut a l'import)
        WATCHING: En cours
        WATCHED: Termine
        DROPPED: Abandonne
    """

    UNWATCHED = "UNWATCHED"
    WATCHING = "WATCHING"
    WATCHED = "WATCHED"
    DROPPED = "DROPPED"


class UserRole(str, Enum):
    """Rôle d'un utilisateur du back-office."""

    ADMIN = "ADMIN"
    USER = "USER"


class EntityType(str, Enum):
    """Type d'entité visée par une entrée du journal des opérations."""

    MOVIE = "MOVIE"
    TV_SHOW = "TV_SHOW"
    ACTOR = "ACTOR"
    USER = "USER"
    SYSTEM = "SYSTEM"


class ContentType(str, Enum):
    """Type de contenu tel qu'il apparaît dans les URL et les requêtes (movie/tv)."""

    MOVIE = "movie"
    TV = "tv"

    @property
    def entity_type(self) -> EntityType:
        """Type d'entité correspondant pour le journal des opérations."""
        return EntityType.MOVIE if self is ContentType.MOVIE else EntityType.TV_SHOW

    @property
    def label(self) -> str:
        """Libellé lisible utilisé dans les descriptions de journal."""
        return "movie" if self is ContentType.MOVIE else "TV show"

    @property
    def display_name(self) -> str:
        """Libellé en début de phrase (messages d'erreur)."""
        return "Movie" if self is ContentType.MOVIE else "TV show"

    @classmethod
    def parse(cls, value: str | None) -> "ContentType":
        """Convertit une chaîne ('movie', 'tv') en ContentType.

        Leve ValueError si la valeur est inconnue.
        """
        try:
            return cls((value or "").lower())
        except ValueError:
            raise ValueError(f"Invalid content type: {value!r}") from None
