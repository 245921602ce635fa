from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.deps import get_task_service
from app.schemas.tasks import TaskCreate, TaskCreateResponse
from app.services.tasks import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post(
    "",
    response_model=TaskCreateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_202_ACCEPTED: {"model": TaskCreateResponse, "description": "Task already exists"}},
    summary="Create a task unless one exists for the asset and template",
)
async def create_task(
    payload: TaskCreate,
    service: TaskService = Depends(get_task_service),
):
    created = await service.create_if_not_exists(
        template_id=payload.template_id,
        asset_id=payload.asset_id,
        metadata=payload.metadata,
    )
    if created:
        return TaskCreateResponse(message="Task created successfully", created=True)
    body = TaskCreateResponse(message="Task already exists", created=False)
    return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content=body.model_dump())
