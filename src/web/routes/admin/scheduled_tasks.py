"""
Configuration et declenchement manuel du rafraichissement planifie.
"""

from fastapi import APIRouter

from ....core.exceptions import ValidationError
from ...deps import AdminUser, ContainerDep, SessionDep
from ...schemas import ScheduledTaskRequest

router = APIRouter(prefix="/scheduled-tasks")


@router.get("")
async def scheduled_tasks_status(session: SessionDep, container: ContainerDep):
    return container.scheduled_task_service(session=session).status()


@router.post("")
async def scheduled_tasks_action(
    body: ScheduledTaskRequest, user: AdminUser, session: SessionDep, container: ContainerDep
):
    """Actions : configure (enabled, cronExpression) ou execute."""
    service = container.scheduled_task_service(session=session)

    if body.action == "configure":
        config = service.configure(body.enabled, body.cron_expression, user.user_id)
        return {
            "success": True,
            "config": {"enabled": config.enabled, "cronExpression": config.cron_expression},
        }
    if body.action == "execute":
        stats = await service.execute(container.refresh_service(session=session), user.user_id)
        return {"success": True, "results": stats.to_dict()}
    raise ValidationError("Invalid action")
