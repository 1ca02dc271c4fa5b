from fastapi import APIRouter, Request

from imagecomment.config import get_settings

router = APIRouter()


@router.get("")
async def health(request: Request) -> dict:
    """Liveness check with the active clipboard probe."""
    settings = get_settings()
    orchestrator = getattr(request.app.state, "orchestrator", None)
    return {
        "status": "ok",
        "version": settings.app_version,
        "probe": orchestrator.probe_name if orchestrator else None,
    }
