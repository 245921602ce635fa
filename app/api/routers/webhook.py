import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_task_service
from app.schemas.webhook import EVENT_PROCESSED, WebhookAck, WebhookEvent
from app.services.tasks import TaskService

router = APIRouter(tags=["webhook"])
logger = logging.getLogger(__name__)


@router.post("/webhook", response_model=WebhookAck, summary="Receive processing pipeline events")
async def handle_webhook(
    event: WebhookEvent,
    service: TaskService = Depends(get_task_service),
) -> WebhookAck:
    if event.event_type == EVENT_PROCESSED:
        await service.update_task_metadata(event.payload)
    else:
        logger.info("Ignoring webhook event", extra={"event_type": event.event_type})
    return WebhookAck(message="Event processed successfully")
