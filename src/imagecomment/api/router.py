from fastapi import APIRouter

from imagecomment.api import health, paste, settings

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(paste.router, prefix="/paste", tags=["paste"])
api_router.include_router(settings.router, prefix="/config", tags=["config"])
