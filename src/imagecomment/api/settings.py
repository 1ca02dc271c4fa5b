"""Effective configuration as seen by a workspace."""

from pathlib import Path

from fastapi import APIRouter, HTTPException

from imagecomment.config import get_settings

router = APIRouter()


@router.get("")
async def effective_settings(workspace_root: str | None = None) -> dict:
    """Paste settings after merging the workspace's config file."""
    if workspace_root and not Path(workspace_root).expanduser().is_dir():
        raise HTTPException(status_code=400, detail="Workspace not found")
    settings = get_settings(Path(workspace_root).expanduser() if workspace_root else None)
    return settings.model_dump(
        include={
            "save_directory",
            "use_relative_path",
            "comment_template",
            "probe_timeout_s",
            "locale",
        }
    )
