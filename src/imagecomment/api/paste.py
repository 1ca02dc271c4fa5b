"""REST API for the paste-image command."""

from pathlib import Path

import structlog
from fastapi import APIRouter, HTTPException, Request

from imagecomment.hosts.recording_host import RecordingHost
from imagecomment.paste.host import EditorContext
from imagecomment.paste.models import PasteRequest, PasteResponse

logger = structlog.get_logger()

router = APIRouter()


def _context_from_request(body: PasteRequest) -> EditorContext | None:
    if not body.has_editor:
        return None
    workspace_root = None
    if body.workspace_root:
        workspace_root = Path(body.workspace_root).expanduser()
        if not workspace_root.is_absolute() or not workspace_root.is_dir():
            msg = f"Workspace not found: {body.workspace_root}"
            raise HTTPException(status_code=400, detail=msg)
    return EditorContext(
        document_path=Path(body.document_path) if body.document_path else None,
        language_id=body.language_id,
        workspace_root=workspace_root,
    )


@router.post("", response_model=PasteResponse)
async def paste_image(body: PasteRequest, request: Request) -> PasteResponse:
    """Probe the clipboard and return the editor actions to apply."""
    host = RecordingHost(_context_from_request(body))
    orchestrator = request.app.state.orchestrator
    result = await orchestrator.paste_image(host)
    logger.info(
        "paste_handled",
        outcome=result.outcome.value,
        language=body.language_id,
    )
    return PasteResponse(
        outcome=result.outcome,
        saved_path=str(result.saved_path) if result.saved_path else None,
        text=result.text,
        actions=host.actions,
    )
