from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.core.errors import Conflict, InternalError, InvalidArgument, ServiceError
from app.core.settings import settings
from app.db.soft_delete import live
from app.models.template import Template
from app.schemas.templates import TemplateWithURL
from app.services.assets import discard_upload, require_storage
from app.services.storage.adapter import StorageAdapter
from app.services.storage.key_generator import KeyGenerator

logger = logging.getLogger(__name__)


class TemplateService:
    def __init__(self, db: AsyncSession, storage: StorageAdapter | None):
        self.db = db
        self.storage = storage

    async def create(
        self,
        *,
        name: str | None,
        content: bytes | None,
        filename: str | None,
        content_type: str | None,
    ) -> Template:
        name = (name or "").strip()
        if not name or content is None or not filename:
            raise InvalidArgument("name and file are required")

        storage = require_storage(self.storage)
        storage_key = KeyGenerator.template_key(filename, name)
        await run_in_threadpool(
            storage.put_object, storage_key, content, content_type or "application/octet-stream"
        )

        template = Template(name=name, storage_key=storage_key, bucket=storage.bucket)
        self.db.add(template)
        try:
            await self.db.commit()
        except Exception as exc:
            await discard_upload(storage, storage_key)
            await self.db.rollback()
            if isinstance(exc, IntegrityError):
                raise Conflict(f"template '{name}' already exists") from exc
            if isinstance(exc, SQLAlchemyError):
                raise InternalError(f"failed to save template: {exc}") from exc
            raise
        await self.db.refresh(template)

        logger.info("Template registered", extra={"template_id": template.id, "storage_key": storage_key})
        return template

    async def list_templates(self) -> list[Template]:
        stmt = select(Template).where(live(Template)).order_by(Template.id.asc())
        return list((await self.db.execute(stmt)).scalars().all())

    async def list_with_urls(self) -> list[TemplateWithURL]:
        """Every live template with a short-lived download URL.

        A template whose URL cannot be signed is still listed, with an empty URL.
        """
        templates = await self.list_templates()
        expires_in = settings.template_url_ttl_minutes * 60
        items: list[TemplateWithURL] = []
        for template in templates:
            url = ""
            if self.storage is not None:
                try:
                    url = self.storage.generate_download_url(template.storage_key, expires_in=expires_in)
                except ServiceError as exc:
                    logger.warning(
                        "Presign failed for template",
                        extra={"template_id": template.id, "error": str(exc)},
                    )
            items.append(TemplateWithURL(id=template.id, name=template.name, url=url))
        return items
