from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.services.assets import AssetService
from app.services.storage.adapter import StorageAdapter
from app.services.tasks import TaskService
from app.services.templates import TemplateService


def get_storage(request: Request) -> StorageAdapter | None:
    """The adapter built at startup; ``None`` when S3 is not configured."""
    return getattr(request.app.state, "storage", None)


async def get_asset_service(
    db: AsyncSession = Depends(get_db),
    storage: StorageAdapter | None = Depends(get_storage),
) -> AssetService:
    return AssetService(db, storage)


async def get_template_service(
    db: AsyncSession = Depends(get_db),
    storage: StorageAdapter | None = Depends(get_storage),
) -> TemplateService:
    return TemplateService(db, storage)


async def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)
