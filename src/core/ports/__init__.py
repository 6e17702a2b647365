"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Ports client API : Contrats pour les services externes
- IMetadataClient : API de métadonnées films/séries (TMDB)
- SearchResult, ContentDetails, CastCredit, PersonDetails : données échangées

Port stockage : Contrat pour l'hébergement des images et sauvegardes
- IObjectStorage : stockage objet avec URL publiques
"""

from src.core.ports.api_clients import (
    CastCredit,
    ContentDetails,
    IMetadataClient,
    PersonDetails,
    SearchResult,
)
from src.core.ports.storage import IObjectStorage

__all__ = [
    # Clients API
    "IMetadataClient",
    "SearchResult",
    "ContentDetails",
    "CastCredit",
    "PersonDetails",
    # Stockage
    "IObjectStorage",
]
