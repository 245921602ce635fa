from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from app.core.settings import settings
from app.db.session import engine

APP_VERSION = "0.1.0"


async def _check_db() -> dict[str, str]:
    try:
        async with engine.connect() as conn:  # type: AsyncConnection
            await conn.execute(text("SELECT 1"))
        return {"status": "connected"}
    except Exception as exc:  # pragma: no cover - exercised in runtime
        return {"status": "disconnected", "error": str(exc)}


def _check_object_store(storage) -> str:
    return "configured" if storage is not None else "disabled"


async def health_payload(storage=None) -> dict[str, Any]:
    """Liveness report; always answers, whatever the state of the dependencies."""
    database = await _check_db()
    return {
        "status": "ok",
        "version": APP_VERSION,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": database["status"],
        "object_store": _check_object_store(storage),
    }
