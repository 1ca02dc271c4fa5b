"""Base class for platform clipboard probes."""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import structlog

from imagecomment.clipboard.guard import SizeWarning, discard_temp_file
from imagecomment.clipboard.models import ImageInfo
from imagecomment.clipboard.runner import (
    CancellationToken,
    CommandResult,
    run_command,
)


class ClipboardProbe(ABC):
    """Inspects the system clipboard for an image.

    Each platform variant knows which helper programs to call and
    how to read their answers. ``detect`` never raises: every
    failure folds into None.
    """

    name = "base"

    # Upper bound for a single helper invocation
    command_timeout_s: float = 15.0

    def __init__(self, logger: Any = None) -> None:
        self._log = logger or structlog.get_logger()

    async def detect(
        self,
        token: CancellationToken,
        warn: SizeWarning | None = None,
    ) -> ImageInfo | None:
        """Look for an image on the clipboard.

        Args:
            token: Cancelled when the caller stopped waiting.
            warn: Called when an image exceeds the size limit.

        Returns:
            ImageInfo, or None when no usable image was found.
        """
        try:
            info = await self._detect(token, warn)
        except asyncio.CancelledError:
            raise
        except Exception:
            self._log.exception("probe_failed", probe=self.name)
            return None

        if info is not None and token.cancelled:
            self._log.info("probe_result_discarded", probe=self.name)
            if info.is_temp:
                discard_temp_file(info.path, self._log)
            return None
        if info is not None:
            self._log.info(
                "image_detected",
                probe=self.name,
                path=str(info.path),
                source=info.source.value,
            )
        return info

    @abstractmethod
    async def _detect(
        self,
        token: CancellationToken,
        warn: SizeWarning | None,
    ) -> ImageInfo | None:
        """Platform-specific detection."""

    async def _run(
        self,
        args: list[str],
        token: CancellationToken,
        stdout_path: Path | None = None,
    ) -> CommandResult | None:
        return await run_command(
            args,
            token,
            stdout_path=stdout_path,
            timeout=self.command_timeout_s,
            log=self._log,
        )


class NullProbe(ClipboardProbe):
    """Probe for platforms without clipboard support."""

    name = "unsupported"

    async def _detect(
        self,
        token: CancellationToken,
        warn: SizeWarning | None,
    ) -> ImageInfo | None:
        return None
