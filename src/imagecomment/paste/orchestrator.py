"""Paste orchestrator - races the probe, saves the image, inserts the comment."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

import structlog

from imagecomment.clipboard.base import ClipboardProbe
from imagecomment.clipboard.guard import discard_temp_file
from imagecomment.clipboard.models import ImageInfo
from imagecomment.clipboard.runner import CancellationToken
from imagecomment.comment import (
    contains_terminator,
    generate_comment,
    has_block_comment,
)
from imagecomment.config import Settings, get_settings
from imagecomment.files import embed_path, persist_image
from imagecomment.messages import Messages
from imagecomment.paste.host import (
    EditorContext,
    EditorHost,
    HostBinaryOpenError,
)

STATUS_TIMEOUT_MS = 5000

SettingsProvider = Callable[[Path | None], Settings]


class PasteOutcome(StrEnum):
    """How a paste-image invocation ended."""

    DEFAULT_PASTE = "default_paste"
    NO_IMAGE = "no_image"
    INSERTED = "inserted"
    SAVED = "saved"
    FAILED = "failed"
    SUPPRESSED = "suppressed"


@dataclass
class PasteResult:
    outcome: PasteOutcome
    saved_path: Path | None = None
    text: str | None = None

    @property
    def file_name(self) -> str | None:
        return self.saved_path.name if self.saved_path else None


class PasteOrchestrator:
    """Runs one "paste image" command against an editor host.

    The probe is raced against ``probe_timeout_s``. When the timer
    wins, the probe's token is cancelled (killing its helper
    process) and whatever it still produces is thrown away, so an
    invocation inserts at most one comment.
    """

    def __init__(
        self,
        probe: ClipboardProbe,
        *,
        settings_provider: SettingsProvider | None = None,
        logger: Any = None,
    ) -> None:
        self._probe = probe
        self._settings_provider = settings_provider or get_settings
        self._log = logger or structlog.get_logger()
        self._abandoned: set[asyncio.Task] = set()

    @property
    def probe_name(self) -> str:
        return self._probe.name

    async def paste_image(self, host: EditorHost) -> PasteResult:
        """Handle one paste-image command.

        Args:
            host: The editor that issued the command.

        Returns:
            PasteResult describing what was done.
        """
        editor = host.active_editor()
        if editor is None:
            self._log.info("no_active_editor")
            await host.default_paste()
            return PasteResult(PasteOutcome.DEFAULT_PASTE)

        settings = self._settings_provider(editor.workspace_root)
        messages = Messages(settings.locale)
        host.set_status(
            messages.detecting_image(),
            int(settings.probe_timeout_s * 1000),
        )

        info = await self.detect_image(host, settings, messages)
        if info is None:
            host.show_info(messages.no_image_found())
            return PasteResult(PasteOutcome.NO_IMAGE)

        return await self._save_and_insert(host, editor, info, settings, messages)

    async def detect_image(
        self,
        host: EditorHost,
        settings: Settings,
        messages: Messages,
    ) -> ImageInfo | None:
        """Run the probe, giving up after ``settings.probe_timeout_s``."""
        token = CancellationToken()

        def warn(size: int, limit: int) -> None:
            if not token.cancelled:
                host.show_warning(messages.image_too_large(size, limit))

        task = asyncio.create_task(self._probe.detect(token, warn))
        try:
            done, _ = await asyncio.wait({task}, timeout=settings.probe_timeout_s)
        except asyncio.CancelledError:
            self._abandon(task, token)
            raise

        if task in done:
            return task.result()

        self._log.warning(
            "probe_timed_out",
            probe=self._probe.name,
            timeout_s=settings.probe_timeout_s,
        )
        self._abandon(task, token)
        return None

    def _abandon(self, task: asyncio.Task, token: CancellationToken) -> None:
        token.cancel()
        self._abandoned.add(task)
        task.add_done_callback(self._discard_late_result)

    def _discard_late_result(self, task: asyncio.Task) -> None:
        """Drop the result of a probe nobody waits for anymore."""
        self._abandoned.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._log.warning("late_probe_failed", error=str(exc))
            return
        info = task.result()
        if info is not None and info.is_temp:
            discard_temp_file(info.path, self._log)
        self._log.debug("late_probe_result_discarded", found=info is not None)

    def _cleanup(self, info: ImageInfo) -> None:
        # User files are never removed
        if info.is_temp and info.path.exists():
            discard_temp_file(info.path, self._log)

    async def _save_and_insert(
        self,
        host: EditorHost,
        editor: EditorContext,
        info: ImageInfo,
        settings: Settings,
        messages: Messages,
    ) -> PasteResult:
        root = editor.workspace_root
        if root is None:
            self._cleanup(info)
            host.show_error(messages.no_workspace_folder())
            return PasteResult(PasteOutcome.FAILED)

        try:
            saved = persist_image(info, root / settings.save_directory)
            self._log.info(
                "image_saved",
                path=str(saved),
                source=info.source.value,
            )
            path_text = embed_path(saved, root, settings.use_relative_path)
            text = generate_comment(
                path_text,
                editor.language_id,
                settings.comment_template,
            )
            self._warn_unsafe_comment(path_text, text, editor.language_id, settings)
        except Exception as exc:
            self._log.exception(
                "paste_image_failed",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            self._cleanup(info)
            host.show_error(messages.failed_to_save_image(str(exc)))
            try:
                await host.default_paste()
            except Exception:
                self._log.exception("default_paste_failed")
            return PasteResult(PasteOutcome.FAILED)

        outcome = PasteOutcome.INSERTED
        try:
            await host.insert_text(text)
        except HostBinaryOpenError as exc:
            self._log.info("host_binary_open_ignored", error=str(exc))
            return PasteResult(PasteOutcome.SUPPRESSED, saved_path=saved)
        except Exception as exc:
            # The image is already saved; keep it and report the save
            self._log.exception(
                "insert_failed",
                error_type=type(exc).__name__,
                error=str(exc),
                path=str(saved),
            )
            outcome = PasteOutcome.SAVED

        host.set_status(messages.image_saved(saved.name), STATUS_TIMEOUT_MS)
        return PasteResult(outcome, saved_path=saved, text=text)

    def _warn_unsafe_comment(
        self,
        path_text: str,
        text: str,
        language_id: str,
        settings: Settings,
    ) -> None:
        if contains_terminator(path_text, language_id) or contains_terminator(
            settings.comment_template, language_id
        ):
            self._log.warning(
                "comment_terminator_in_text",
                language=language_id,
                text=text,
            )
        if "\n" in text and not has_block_comment(language_id):
            self._log.warning(
                "comment_block_unavailable",
                language=language_id,
                text=text,
            )
