"""Pydantic models for the paste API."""

from enum import StrEnum

from pydantic import BaseModel, Field

from imagecomment.paste.orchestrator import PasteOutcome


class ActionKind(StrEnum):
    """Editor actions the client must apply, in order."""

    INSERT = "insert"
    DEFAULT_PASTE = "default_paste"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    STATUS = "status"


class HostAction(BaseModel):
    kind: ActionKind
    text: str = ""
    timeout_ms: int | None = Field(
        default=None,
        description="How long a status message stays visible",
    )


class PasteRequest(BaseModel):
    """Context of the editor that issued the paste-image command."""

    has_editor: bool = Field(
        default=True,
        description="False when no text editor has focus",
    )
    document_path: str | None = Field(default=None, description="Active document")
    language_id: str = Field(default="plaintext", description="Editor language id")
    workspace_root: str | None = Field(
        default=None,
        description="Workspace folder containing the document",
    )


class PasteResponse(BaseModel):
    outcome: PasteOutcome
    saved_path: str | None = None
    text: str | None = None
    actions: list[HostAction] = Field(default_factory=list)
