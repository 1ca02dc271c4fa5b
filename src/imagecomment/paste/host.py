"""Interface to the editor that asked for the paste."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


class HostBinaryOpenError(Exception):
    """The host tried to open a binary file as text.

    Editors raise this as a side effect of their own behaviour when
    an image lands in the workspace; it is not a paste failure.
    """


@dataclass
class EditorContext:
    """The text-editing surface the paste targets."""

    document_path: Path | None
    language_id: str
    workspace_root: Path | None


class EditorHost(ABC):
    """Operations the orchestrator needs from the editor."""

    @abstractmethod
    def active_editor(self) -> EditorContext | None:
        """Active editor, or None when no text surface has focus."""

    @abstractmethod
    async def insert_text(self, text: str) -> None:
        """Insert text at the current cursor position."""

    @abstractmethod
    async def default_paste(self) -> None:
        """Run the editor's built-in paste."""

    @abstractmethod
    def show_info(self, message: str) -> None: ...

    @abstractmethod
    def show_warning(self, message: str) -> None: ...

    @abstractmethod
    def show_error(self, message: str) -> None: ...

    @abstractmethod
    def set_status(self, message: str, timeout_ms: int) -> None:
        """Transient status-bar message."""
