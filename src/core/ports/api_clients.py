"""
Interfaces ports pour les clients API.

Interfaces abstraites (ports) définissant les contrats pour les APIs de
métadonnées externes. L'implémentation concrète est le client TMDB
(src/adapters/api/tmdb_client.py), utilisé aussi bien par l'import que par
le rafraîchissement des métadonnées et le proxy de l'admin.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from src.core.value_objects import ContentType


@dataclass
class SearchResult:
    """
    Résultat de recherche depuis l'API de métadonnées.

    Attributs :
        tmdb_id : ID TMDB du contenu
        title : Titre localisé (title pour un film, name pour une série)
        original_title : Titre en langue originale
        date : Date de sortie ou de première diffusion (YYYY-MM-DD)
        overview : Résumé
        poster_path : Chemin relatif du poster TMDB
        rating : Note moyenne TMDB
        content_type : movie ou tv
    """

    tmdb_id: int
    title: str
    original_title: Optional[str] = None
    date: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    rating: Optional[float] = None
    content_type: ContentType = ContentType.MOVIE


@dataclass
class ContentDetails:
    """
    Informations détaillées d'un film ou d'une série.

    Les champs propres aux séries (last_date, number_of_*) restent à None
    pour un film, et runtime reste à None pour une série.
    """

    tmdb_id: int
    content_type: ContentType
    title: str
    original_title: Optional[str] = None
    overview: Optional[str] = None
    date: Optional[str] = None
    last_date: Optional[str] = None
    runtime: Optional[int] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None
    genres: tuple[str, ...] = ()
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    imdb_id: Optional[str] = None
    vote_average: Optional[float] = None


@dataclass
class CastCredit:
    """Membre de la distribution d'un contenu, dans l'ordre du générique."""

    tmdb_id: int
    name: str
    original_name: Optional[str] = None
    character: Optional[str] = None
    order: int = 0
    profile_path: Optional[str] = None
    gender: Optional[int] = None


@dataclass
class PersonDetails:
    """Fiche détaillée d'une personne (acteur)."""

    tmdb_id: int
    name: str
    original_name: Optional[str] = None
    biography: Optional[str] = None
    birthday: Optional[str] = None
    deathday: Optional[str] = None
    gender: Optional[int] = None
    profile_path: Optional[str] = None


class IMetadataClient(ABC):
    """
    Contrat d'une API de métadonnées films/séries.

    Toutes les méthodes retournent None (ou une liste vide) quand la
    ressource n'existe pas, et lèvent une exception en cas d'erreur réseau.
    """

    @abstractmethod
    async def search(
        self,
        query: str,
        content_type: ContentType,
        page: int = 1,
    ) -> list[SearchResult]:
        """
        Recherche des contenus par titre.

        Args :
            query : Titre recherché
            content_type : movie ou tv
            page : Page de résultats (1-indexée)
        """
        ...

    @abstractmethod
    async def get_details(
        self, content_type: ContentType, tmdb_id: int
    ) -> Optional[ContentDetails]:
        """Récupère la fiche détaillée d'un contenu, ou None si inconnu."""
        ...

    @abstractmethod
    async def refresh_details(
        self, content_type: ContentType, tmdb_id: int
    ) -> Optional[ContentDetails]:
        """Comme get_details, sans passer par le cache."""
        ...

    @abstractmethod
    async def get_credits(
        self, content_type: ContentType, tmdb_id: int
    ) -> list[CastCredit]:
        """Récupère la distribution d'un contenu, triée par ordre du générique."""
        ...

    @abstractmethod
    async def get_person(self, tmdb_id: int) -> Optional[PersonDetails]:
        """Récupère la fiche d'une personne, ou None si inconnue."""
        ...

    @abstractmethod
    async def get_genres(self, content_type: ContentType) -> list[str]:
        """Liste des noms de genres disponibles pour un type de contenu."""
        ...
