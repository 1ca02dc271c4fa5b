"""Append-only diagnostic log channel."""

import logging
import sys
from pathlib import Path
from typing import IO, Any

import structlog


class DiagnosticChannel:
    """Owns the diagnostic log sink and the logger bound to it.

    Whoever builds the PasteOrchestrator creates the channel, hands
    ``logger`` to the components and closes it on shutdown. Without
    a path the log goes to stderr.
    """

    def __init__(
        self,
        path: Path | None = None,
        name: str = "image-comment",
        level: int = logging.DEBUG,
    ) -> None:
        self.path = path
        self._file: IO[str] | None = None
        sink: IO[str] = sys.stderr
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._file = path.open("a", encoding="utf-8")
            sink = self._file

        self.logger: Any = structlog.wrap_logger(
            structlog.WriteLogger(sink),
            wrapper_class=structlog.make_filtering_bound_logger(level),
            processors=[
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.format_exc_info,
                structlog.processors.KeyValueRenderer(
                    key_order=["timestamp", "level", "event"],
                ),
            ],
        ).bind(channel=name)

    @property
    def closed(self) -> bool:
        return self._file is not None and self._file.closed

    def close(self) -> None:
        if self._file is not None and not self._file.closed:
            self._file.close()

    def __enter__(self) -> "DiagnosticChannel":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
