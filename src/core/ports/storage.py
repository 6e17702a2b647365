"""
Port du stockage objet.

Le stockage héberge les posters, backdrops, photos d'acteurs, uploads manuels
et copies de sauvegarde. Les clés sont des chemins relatifs au bucket
(ex: "movie/603/poster.jpg").
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional


class IObjectStorage(ABC):
    """Contrat d'un stockage objet exposant des URL publiques HTTPS."""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """False tant que le stockage n'est pas configure."""
        ...

    @abstractmethod
    async def upload_bytes(
        self, key: str, data: bytes, content_type: Optional[str] = None
    ) -> str:
        """
        Dépose un contenu binaire sous la clé donnée.

        Retourne :
            URL publique (https) de l'objet
        """
        ...

    @abstractmethod
    async def upload_from_url(self, url: str, key: str) -> str:
        """Télécharge une ressource distante puis la dépose sous la clé donnée."""
        ...

    @abstractmethod
    async def upload_file(self, path: Path, key: str) -> str:
        """Dépose un fichier local sous la clé donnée."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Supprime l'objet. Ne lève pas d'erreur si l'objet n'existe pas."""
        ...

    @abstractmethod
    def public_url(self, key: str) -> str:
        """URL publique (https) d'une clé."""
        ...

    @abstractmethod
    def key_from_url(self, url: str) -> Optional[str]:
        """Retrouve la clé d'un objet à partir de son URL publique."""
        ...
