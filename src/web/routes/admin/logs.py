"""
Consultation et saisie manuelle du journal des operations.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from ....core.exceptions import ValidationError
from ....core.value_objects import EntityType
from ....utils.constants import LOGS_PAGE_SIZE
from ...deps import AdminUser, ContainerDep, SessionDep
from ...schemas import LogCreatedOut, LogCreateRequest, LogListOut, LogOut, PaginationOut

router = APIRouter(prefix="/logs")


def _entity_type(value: Optional[str]) -> Optional[EntityType]:
    if not value:
        return None
    try:
        return EntityType(value.upper())
    except ValueError:
        raise ValidationError("Invalid entity type") from None


@router.get("", response_model=LogListOut)
async def list_logs(
    session: SessionDep,
    container: ContainerDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = LOGS_PAGE_SIZE,
    action: Optional[str] = None,
    entity_type: Annotated[Optional[str], Query(alias="entityType")] = None,
):
    """Entrees du journal, les plus recentes d'abord."""
    repository = container.operation_log_repository(session=session)
    entries, total = repository.list_page(page, limit, action or None, _entity_type(entity_type))
    return LogListOut(
        logs=[LogOut.model_validate(e) for e in entries],
        pagination=PaginationOut.build(page, limit, total),
    )


@router.post("", response_model=LogCreatedOut)
async def create_log(
    body: LogCreateRequest, user: AdminUser, session: SessionDep, container: ContainerDep
):
    if not body.action:
        raise ValidationError("Action is required")
    entity_type = _entity_type(body.entity_type)
    if entity_type is None:
        raise ValidationError("Entity type is required")

    entry = container.operation_logger(session=session).log(
        body.action,
        entity_type,
        body.description,
        user_id=user.user_id,
        entity_id=body.entity_id,
        metadata=body.metadata,
    )
    return LogCreatedOut(
        success=entry is not None, log=LogOut.model_validate(entry) if entry else None
    )
