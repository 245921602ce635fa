from fastapi import APIRouter, Request

from app.core.health import health_payload
from app.core.limiter import limiter

router = APIRouter(tags=["health"])


@router.get("/health", summary="Service liveness check")
@limiter.exempt
async def read_health(request: Request) -> dict:
    return await health_payload(getattr(request.app.state, "storage", None))
