from fastapi import APIRouter

from app.api.routers import assets, health, tasks, templates, webhook

api_router = APIRouter(prefix="/api")
api_router.include_router(assets.router)
api_router.include_router(templates.router)
api_router.include_router(tasks.router)

root_router = APIRouter()
root_router.include_router(health.router)
root_router.include_router(webhook.router)

__all__ = ["api_router", "root_router"]
