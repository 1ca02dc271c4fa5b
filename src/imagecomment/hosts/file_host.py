"""Editor host backed by a file on disk, for command-line use."""

import asyncio
import sys
from pathlib import Path
from typing import IO

import pyperclip
import structlog

from imagecomment.comment import language_for_path
from imagecomment.paste.host import (
    EditorContext,
    EditorHost,
    HostBinaryOpenError,
)

logger = structlog.get_logger()

WORKSPACE_MARKERS = (".git", ".image-comment.json", "pyproject.toml", "package.json")


def find_workspace_root(document: Path) -> Path:
    """Nearest parent holding a project marker, else the file's dir."""
    start = document.resolve().parent
    for candidate in (start, *start.parents):
        if any((candidate / marker).exists() for marker in WORKSPACE_MARKERS):
            return candidate
    return start


def cursor_offset(content: str, line: int | None, column: int | None) -> int:
    """Character offset of a 1-based line/column, clamped to the text.

    No line means end of text; no column means start of line.
    """
    if line is None:
        return len(content)
    lines = content.splitlines(keepends=True)
    if not lines or line > len(lines):
        return len(content)
    index = max(line, 1) - 1
    offset = sum(len(text) for text in lines[:index])
    body = lines[index].rstrip("\r\n")
    col = min(max(column or 1, 1), len(body) + 1) - 1
    return offset + col


class FileEditorHost(EditorHost):
    """Treats a text file as the active editor.

    Text is inserted at a 1-based line/column; without a line it is
    appended. Messages are written to ``out`` (stderr by default).
    """

    def __init__(
        self,
        document: Path | None,
        *,
        line: int | None = None,
        column: int | None = None,
        language_id: str | None = None,
        workspace_root: Path | None = None,
        out: IO[str] | None = None,
    ) -> None:
        self._document = document
        self._line = line
        self._column = column
        self._language_id = language_id
        self._workspace_root = workspace_root
        self._out = out or sys.stderr

    def active_editor(self) -> EditorContext | None:
        if self._document is None:
            return None
        return EditorContext(
            document_path=self._document,
            language_id=self._language_id or language_for_path(self._document),
            workspace_root=self._workspace_root
            or find_workspace_root(self._document),
        )

    async def insert_text(self, text: str) -> None:
        await asyncio.to_thread(self._insert, text)

    def _insert(self, text: str) -> None:
        path = self._document
        if path is None:
            sys.stdout.write(text)
            return
        try:
            content = path.read_text(encoding="utf-8") if path.exists() else ""
        except UnicodeDecodeError as exc:
            msg = f"Cannot edit binary file: {path}"
            raise HostBinaryOpenError(msg) from exc
        offset = cursor_offset(content, self._line, self._column)
        path.write_text(content[:offset] + text + content[offset:], encoding="utf-8")
        logger.debug("text_inserted", document=str(path), offset=offset)

    async def default_paste(self) -> None:
        try:
            text = await asyncio.to_thread(pyperclip.paste)
        except pyperclip.PyperclipException as exc:
            self.show_error(f"Clipboard unavailable: {exc}")
            return
        if text:
            await self.insert_text(text)

    def show_info(self, message: str) -> None:
        print(message, file=self._out)

    def show_warning(self, message: str) -> None:
        print(f"warning: {message}", file=self._out)

    def show_error(self, message: str) -> None:
        print(f"error: {message}", file=self._out)

    def set_status(self, message: str, timeout_ms: int) -> None:
        print(message, file=self._out)
