from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import InternalError, InvalidArgument, NotFound
from app.core.settings import settings
from app.db.soft_delete import live
from app.models.asset import ASSET_STATUS_PROCESSED
from app.models.task import Task
from app.services.assets import apply_status_transition

logger = logging.getLogger(__name__)


def extract_task_id(payload: dict[str, Any]) -> int:
    value = payload.get("task_id")
    # JSON numbers may decode as floats; bools are ints in Python but not ids.
    if isinstance(value, bool):
        value = None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        raise InvalidArgument("task_id not found or invalid in payload")
    return value


class TaskService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_live(self, asset_id: int, template_id: int) -> Task | None:
        stmt = select(Task).where(
            Task.asset_id == asset_id,
            Task.template_id == template_id,
            live(Task),
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_if_not_exists(
        self, template_id: int, asset_id: int, metadata: dict[str, Any] | None = None
    ) -> bool:
        """Insert a task for the pair unless a live one exists.

        The insert goes first and the partial unique index arbitrates, so two
        concurrent requests for the same pair yield exactly one row. Returns
        ``True`` when this call created the task.
        """
        task = Task(template_id=template_id, asset_id=asset_id, metadata_=metadata)
        self.db.add(task)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            existing = await self.find_live(asset_id, template_id)
            if existing:
                logger.info(
                    "Task already exists",
                    extra={"task_id": existing.id, "asset_id": asset_id, "template_id": template_id},
                )
                return False
            # No live duplicate, so the foreign keys were violated.
            raise InvalidArgument(
                "template_id or asset_id does not reference an existing record"
            ) from exc
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise InternalError(f"failed to create task: {exc}") from exc

        logger.info(
            "Task created",
            extra={"task_id": task.id, "asset_id": asset_id, "template_id": template_id},
        )
        return True

    async def get_with_asset(self, task_id: int) -> Task | None:
        stmt = (
            select(Task)
            .options(selectinload(Task.asset))
            .where(Task.id == task_id, live(Task))
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def update_task_metadata(self, payload: dict[str, Any]) -> Task:
        """Store a processing notification on its task.

        The payload replaces any previous metadata wholesale. A string
        ``s3_key`` in the payload becomes the asset's ``output_key``.
        """
        task_id = extract_task_id(payload)
        task = await self.get_with_asset(task_id)
        if not task:
            raise NotFound("task not found")

        task.metadata_ = dict(payload)
        s3_key = payload.get("s3_key")
        # A tombstoned asset keeps its last state.
        if isinstance(s3_key, str) and task.asset is not None and not task.asset.is_deleted:
            task.asset.output_key = s3_key
            if settings.webhook_marks_processed:
                apply_status_transition(task.asset, ASSET_STATUS_PROCESSED)

        await self.db.commit()
        logger.info(
            "Task metadata updated",
            extra={"task_id": task_id, "asset_id": task.asset_id, "has_output": isinstance(s3_key, str)},
        )
        return task
