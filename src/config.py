"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe WATCHLIST_,
et peut optionnellement être fournie via un fichier .env.

Les intégrations externes (TMDB, OSS, Douban) sont optionnelles : les fonctionnalités
correspondantes sont désactivées si leurs identifiants ne sont pas fournis.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Trouver le fichier .env à la racine du projet (parent de src/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe WATCHLIST_.
    Exemple : WATCHLIST_JWT_SECRET=change-me

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="WATCHLIST_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Base de données
    database_url: str = Field(default="sqlite:///watchlist.db")

    # Authentification (JWT signé HS256, hash bcrypt)
    jwt_secret: str = Field(default="your-secret-key")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expires_days: int = Field(default=7, ge=1)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    auth_cookie_name: str = Field(default="auth-token")
    auth_cookie_secure: bool = Field(default=False)

    # TMDB (OPTIONNEL - import et rafraîchissement désactivés si absent)
    tmdb_api_key: Optional[str] = Field(default=None)
    tmdb_language: str = Field(default="zh-CN")
    cache_dir: Path = Field(default=Path(".cache/api"))

    # Stockage objet Aliyun OSS (OPTIONNEL)
    oss_region: Optional[str] = Field(default=None)
    oss_endpoint: Optional[str] = Field(default=None)
    oss_access_key_id: Optional[str] = Field(default=None)
    oss_access_key_secret: Optional[str] = Field(default=None)
    oss_bucket: Optional[str] = Field(default=None)
    oss_public_base_url: Optional[str] = Field(default=None)

    # Douban (OPTIONNEL - aucune note récupérée si absent)
    douban_api_key: Optional[str] = Field(default=None)

    # Upload d'images
    upload_max_bytes: int = Field(default=5 * 1024 * 1024, ge=1)

    # Sauvegardes et tâches planifiées
    backup_dir: Path = Field(default=Path("backups"))
    backup_keep: int = Field(default=6, ge=1)
    scheduler_timezone: str = Field(default="Asia/Shanghai")
    backup_cron: str = Field(default="0 3 * * *")
    metadata_update_cron: str = Field(default="0 2 * * *")
    auto_update_enabled: bool = Field(default=False)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/watchlist.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("cache_dir", "backup_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @property
    def tmdb_enabled(self) -> bool:
        """Vérifie si l'API TMDB est configurée."""
        return self.tmdb_api_key is not None

    @property
    def oss_enabled(self) -> bool:
        """Vérifie si le stockage OSS est entièrement configuré."""
        return all(
            (
                self.oss_access_key_id,
                self.oss_access_key_secret,
                self.oss_bucket,
                self.oss_endpoint or self.oss_region,
            )
        )

    @property
    def douban_enabled(self) -> bool:
        """Vérifie si l'API Douban est configurée."""
        return self.douban_api_key is not None
