"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour les interfaces CLI et Web.
Les services et repositories sont des Factory prenant une session : la couche
web leur passe la session de la requete (container.x(session=session)), la CLI
laisse le container en ouvrir une.
"""

from dependency_injector import containers, providers
from sqlmodel import Session

from .adapters.api.cache import APICache
from .adapters.api.douban_client import DoubanClient
from .adapters.api.tmdb_client import TMDBClient
from .adapters.storage.oss_storage import OSSStorage
from .config import Settings
from .infrastructure.persistence.database import get_engine, init_db
from .infrastructure.persistence.repositories import (
    SQLModelActorRepository,
    SQLModelContentRepository,
    SQLModelOperationLogRepository,
    SQLModelReviewRepository,
    SQLModelUserRepository,
)
from .services.auth import AuthService
from .services.backup import BackupService
from .services.catalog import CatalogService
from .services.content_admin import ContentAdminService
from .services.image_processor import ImageProcessor
from .services.log_migration import OperationLogMigrator
from .services.maintenance import MaintenanceService
from .services.metadata_refresh import MetadataRefreshService
from .services.operation_logger import OperationLogger
from .services.scheduler import ScheduledTaskService
from .services.tmdb_import import TMDBImportService


def _backup_storage(settings: Settings, storage: OSSStorage):
    """Stockage des sauvegardes, None si OSS n'est pas configure."""
    return storage if settings.oss_enabled else None


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Initialise la DB une fois
        catalog = container.catalog_service()
        admin = container.content_admin_service(session=session)
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Database - Resource pour initialisation unique (tables + migrations)
    database = providers.Resource(init_db, database_url=config.provided.database_url)

    # Session factory - nouvelle session a chaque appel
    session = providers.Factory(lambda: Session(get_engine()))

    # Repositories - Factory pour nouvelle instance avec session fraiche
    content_repository = providers.Factory(SQLModelContentRepository, session=session)
    actor_repository = providers.Factory(SQLModelActorRepository, session=session)
    user_repository = providers.Factory(SQLModelUserRepository, session=session)
    review_repository = providers.Factory(SQLModelReviewRepository, session=session)
    operation_log_repository = providers.Factory(
        SQLModelOperationLogRepository, session=session
    )

    # Cache API - Singleton pour partage entre clients
    api_cache = providers.Singleton(APICache, cache_dir=config.provided.cache_dir)

    # Clients API - Singleton avec api_key depuis config
    # Sans cle, les clients sont crees inactifs (enabled == False)
    tmdb_client = providers.Singleton(
        TMDBClient,
        api_key=config.provided.tmdb_api_key,
        cache=api_cache,
        language=config.provided.tmdb_language,
    )
    douban_client = providers.Singleton(
        DoubanClient,
        api_key=config.provided.douban_api_key,
    )

    # Stockage objet - bucket ouvert au premier appel
    storage = providers.Singleton(
        OSSStorage,
        access_key_id=config.provided.oss_access_key_id,
        access_key_secret=config.provided.oss_access_key_secret,
        bucket_name=config.provided.oss_bucket,
        region=config.provided.oss_region,
        endpoint=config.provided.oss_endpoint,
        public_base_url=config.provided.oss_public_base_url,
    )
    backup_storage = providers.Callable(_backup_storage, settings=config, storage=storage)

    # Services - Factory car dependent de la session
    operation_logger = providers.Factory(OperationLogger, session=session)
    auth_service = providers.Factory(AuthService, session=session, settings=config)
    catalog_service = providers.Factory(CatalogService, session=session)
    content_admin_service = providers.Factory(ContentAdminService, session=session)
    image_processor = providers.Factory(ImageProcessor, session=session, storage=storage)

    # Utiliser: container.import_service(session=s, image_processor=container.image_processor(session=s))
    import_service = providers.Factory(
        TMDBImportService,
        session=session,
        tmdb_client=tmdb_client,
        language=config.provided.tmdb_language,
    )
    refresh_service = providers.Factory(
        MetadataRefreshService,
        session=session,
        tmdb_client=tmdb_client,
        language=config.provided.tmdb_language,
    )
    scheduled_task_service = providers.Factory(
        ScheduledTaskService, session=session, settings=config
    )

    # Scripts de maintenance
    backup_service = providers.Factory(
        BackupService,
        session=session,
        storage=backup_storage,
        backup_dir=config.provided.backup_dir,
        keep=config.provided.backup_keep,
    )
    log_migrator = providers.Factory(OperationLogMigrator, session=session)
    maintenance_service = providers.Factory(
        MaintenanceService,
        session=session,
        report_dir=config.provided.backup_dir,
    )
