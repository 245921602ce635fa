import logging

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from app.core.settings import settings
from app.db.init_db import init_db
from app.db.session import engine
from app.services.storage.adapter import build_storage_adapter

logger = logging.getLogger(__name__)


def register_event_handlers(app: FastAPI) -> None:
    @app.on_event("startup")
    async def on_startup() -> None:
        logger.info("Application startup")
        app.state.storage = build_storage_adapter(settings)
        if settings.auto_create_tables:
            try:
                await init_db()
            except (SQLAlchemyError, OSError) as exc:
                # Keep serving; /health reports the database as disconnected.
                logger.warning("Database unavailable at startup: %s", exc)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        logger.info("Application shutdown")
        await engine.dispose()
