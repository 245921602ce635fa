from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.core.errors import (
    InternalError,
    InvalidArgument,
    NotFound,
    ServiceError,
    UpstreamUnavailable,
)
from app.core.settings import settings
from app.db.soft_delete import live, mark_deleted
from app.models.asset import (
    ASSET_STATUS_PROCESSED,
    ASSET_STATUS_UPLOADED,
    ASSET_STATUSES,
    Asset,
)
from app.schemas.assets import AssetStatusResponse, AssetUpdate, AssetURLResponse
from app.services.storage.adapter import StorageAdapter
from app.services.storage.key_generator import KeyGenerator

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "video/mp4",
        "video/mpeg",
        "video/quicktime",
        "video/x-msvideo",
        "video/webm",
    }
)

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100


def is_valid_content_type(content_type: str | None) -> bool:
    return content_type in ALLOWED_CONTENT_TYPES


def clamp_limit(limit: int | None) -> int:
    if limit is None or limit <= 0:
        return DEFAULT_PAGE_LIMIT
    return min(limit, MAX_PAGE_LIMIT)


def normalize_status(status: str | None) -> str:
    normalized = (status or "").strip().lower()
    if normalized not in ASSET_STATUSES:
        raise InvalidArgument("invalid status: must be 'uploaded' or 'processed'")
    return normalized


def apply_status_transition(asset: Asset, new_status: str) -> None:
    """Set ``status`` and keep ``processed_at`` in step with it.

    Any status may follow any other; only the timestamp bookkeeping differs.
    """
    if new_status == ASSET_STATUS_PROCESSED:
        if asset.processed_at is None:
            asset.processed_at = datetime.now(timezone.utc)
    else:
        asset.processed_at = None
    asset.status = new_status


def require_storage(storage: StorageAdapter | None) -> StorageAdapter:
    if storage is None:
        raise UpstreamUnavailable("S3 client is not initialized")
    return storage


async def discard_upload(storage: StorageAdapter, object_key: str) -> None:
    """Best-effort removal of an object whose database row was never written."""
    try:
        await run_in_threadpool(storage.delete_object, object_key)
    except ServiceError as exc:
        logger.warning(
            "Compensating delete failed; object left orphaned",
            extra={"object_key": object_key, "error": str(exc)},
        )


class AssetService:
    def __init__(self, db: AsyncSession, storage: StorageAdapter | None):
        self.db = db
        self.storage = storage

    async def _get_live_asset(self, asset_id: int) -> Asset | None:
        stmt = select(Asset).where(Asset.id == asset_id, live(Asset))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _require_asset(self, asset_id: int) -> Asset:
        asset = await self._get_live_asset(asset_id)
        if not asset:
            raise NotFound("asset not found")
        return asset

    async def create_with_upload(
        self,
        *,
        content: bytes,
        filename: str,
        content_type: str | None,
        declared_size: int | None,
        custom_name: str | None = None,
    ) -> Asset:
        size = declared_size if declared_size is not None else len(content)
        if size <= 0:
            raise InvalidArgument("file is empty")
        if not is_valid_content_type(content_type):
            raise InvalidArgument("invalid file type: only images and videos are allowed")

        storage = require_storage(self.storage)
        input_key = KeyGenerator.asset_input_key(filename, custom_name)
        await run_in_threadpool(storage.put_object, input_key, content, content_type)

        asset = Asset(
            file_name=custom_name or filename,
            file_size=size,
            content_type=content_type,
            input_key=input_key,
            bucket=storage.bucket,
            status=ASSET_STATUS_UPLOADED,
        )
        self.db.add(asset)
        try:
            await self.db.commit()
        except Exception as exc:
            # The object goes first; rollback can fail too when the database is gone.
            await discard_upload(storage, input_key)
            await self.db.rollback()
            if isinstance(exc, SQLAlchemyError):
                raise InternalError(f"failed to create asset record: {exc}") from exc
            raise
        await self.db.refresh(asset)

        logger.info(
            "Asset uploaded",
            extra={"asset_id": asset.id, "input_key": input_key, "file_size": size},
        )
        return asset

    async def update_status(
        self, asset_id: int, status: str | None, output_key: str | None = None
    ) -> Asset:
        new_status = normalize_status(status)
        asset = await self._require_asset(asset_id)
        apply_status_transition(asset, new_status)
        if output_key:
            asset.output_key = output_key
        await self.db.commit()
        await self.db.refresh(asset)
        return asset

    async def get_by_id(self, asset_id: int) -> Asset:
        return await self._require_asset(asset_id)

    async def get_status(self, asset_id: int) -> AssetStatusResponse:
        """Report the asset's status, promoting it once its output object exists.

        An uploaded asset whose ``output_key`` is present in the object store
        becomes processed. A failed or impossible lookup leaves it as it is.
        """
        asset = await self._require_asset(asset_id)
        if (
            asset.status != ASSET_STATUS_PROCESSED
            and asset.output_key
            and self.storage is not None
        ):
            try:
                exists = await run_in_threadpool(self.storage.object_exists, asset.output_key)
            except ServiceError as exc:
                logger.warning(
                    "Output lookup failed",
                    extra={"asset_id": asset.id, "output_key": asset.output_key, "error": str(exc)},
                )
                exists = False
            if exists:
                apply_status_transition(asset, ASSET_STATUS_PROCESSED)
                await self.db.commit()
                logger.info("Asset output found; marked processed", extra={"asset_id": asset.id})
        return AssetStatusResponse(
            status=asset.status,
            message=f"Asset {asset.file_name} is {asset.status}",
        )

    async def list_assets(self, limit: int | None, offset: int | None) -> tuple[list[Asset], int, int, int]:
        """Return ``(page, total, limit, offset)`` after clamping the window.

        The total is a second query, so it may disagree with the page under
        concurrent writes.
        """
        limit = clamp_limit(limit)
        offset = max(offset or 0, 0)
        stmt = (
            select(Asset)
            .where(live(Asset))
            .order_by(Asset.id.desc())
            .offset(offset)
            .limit(limit)
        )
        assets = list((await self.db.execute(stmt)).scalars().all())
        count_stmt = select(func.count()).select_from(Asset).where(live(Asset))
        total = int((await self.db.execute(count_stmt)).scalar_one())
        return assets, total, limit, offset

    async def update(self, asset_id: int, payload: AssetUpdate) -> Asset:
        asset = await self._require_asset(asset_id)
        data = payload.model_dump(exclude_unset=True)
        if data.get("file_name"):
            asset.file_name = data["file_name"]
        if data.get("file_size"):
            asset.file_size = data["file_size"]
        if "content_type" in data and data["content_type"]:
            if not is_valid_content_type(data["content_type"]):
                raise InvalidArgument("invalid file type: only images and videos are allowed")
            asset.content_type = data["content_type"]
        if "output_key" in data:
            asset.output_key = data["output_key"]
        if data.get("status"):
            apply_status_transition(asset, normalize_status(data["status"]))
        await self.db.commit()
        await self.db.refresh(asset)
        return asset

    async def delete(self, asset_id: int) -> None:
        asset = await self._require_asset(asset_id)
        mark_deleted(asset)
        await self.db.commit()
        logger.info("Asset deleted", extra={"asset_id": asset_id})

    async def get_urls(self, asset_id: int, ttl_minutes: int | None = None) -> AssetURLResponse:
        asset = await self._require_asset(asset_id)
        storage = require_storage(self.storage)
        if ttl_minutes is None or ttl_minutes <= 0:
            ttl_minutes = settings.default_url_ttl_minutes
        expires_in = ttl_minutes * 60

        input_url = storage.generate_download_url(asset.input_key, expires_in=expires_in)
        output_url = None
        if asset.output_key:
            output_url = storage.generate_download_url(asset.output_key, expires_in=expires_in)
        return AssetURLResponse(input_url=input_url, output_url=output_url, expires_in=expires_in)
