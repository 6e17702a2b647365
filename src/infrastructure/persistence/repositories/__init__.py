"""
Implementations SQLModel des repositories.

Chaque repository :
- Recoit une session SQLModel via injection de dependances
- Expose les requetes du domaine (recherche, pagination, cascade...)
- Commit lui-meme ses ecritures
"""

from src.infrastructure.persistence.repositories.actor_repository import (
    SQLModelActorRepository,
)
from src.infrastructure.persistence.repositories.content_repository import (
    SQLModelContentRepository,
)
from src.infrastructure.persistence.repositories.operation_log_repository import (
    SQLModelOperationLogRepository,
)
from src.infrastructure.persistence.repositories.review_repository import (
    SQLModelReviewRepository,
)
from src.infrastructure.persistence.repositories.user_repository import (
    SQLModelUserRepository,
)

__all__ = [
    "SQLModelActorRepository",
    "SQLModelContentRepository",
    "SQLModelOperationLogRepository",
    "SQLModelReviewRepository",
    "SQLModelUserRepository",
]
