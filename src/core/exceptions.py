"""
Exceptions du domaine.

Chaque exception porte le code HTTP avec lequel la couche web la restitue
(voir src/web/app.py). Les services levent ces exceptions, les routes ne
construisent jamais elles-memes les reponses d'erreur.
"""


class WatchListError(Exception):
    """Erreur de base de l'application."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(WatchListError):
    """Donnees d'entree invalides (champ manquant, valeur hors bornes...)."""

    status_code = 400


class AuthenticationError(WatchListError):
    """Jeton absent, invalide, ou droits insuffisants."""

    status_code = 401


class NotFoundError(WatchListError):
    """Ressource introuvable."""

    status_code = 404


class ContentAlreadyExistsError(WatchListError):
    """Contenu deja present dans le catalogue (meme tmdb_id)."""

    status_code = 409

    def __init__(self, message: str, existing_id: int | None = None) -> None:
        super().__init__(message)
        self.existing_id = existing_id


class ExternalServiceError(WatchListError):
    """Echec d'un service externe (TMDB, Douban)."""

    status_code = 502


class StorageError(ExternalServiceError):
    """Echec du stockage objet (upload, suppression)."""


class ServiceUnavailableError(WatchListError):
    """Integration non configuree (cle API ou bucket manquant)."""

    status_code = 503
