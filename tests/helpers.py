"""Shared test doubles."""

import asyncio
from pathlib import Path

from imagecomment.clipboard.base import ClipboardProbe
from imagecomment.clipboard.guard import new_temp_path
from imagecomment.clipboard.models import ImageInfo, ImageSource

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def make_temp_image(extension: str = "png") -> ImageInfo:
    """Materialise a probe-style temp file."""
    path = new_temp_path(extension)
    path.write_bytes(PNG_BYTES)
    return ImageInfo(path=path, extension=extension, source=ImageSource.TEMP)


class FakeProbe(ClipboardProbe):
    """Probe returning canned results.

    ``result`` may be an ImageInfo, None, or a zero-arg callable
    producing a fresh ImageInfo on every call.
    """

    name = "fake"

    def __init__(self, result=None, *, delay: float = 0.0, oversize: int | None = None):
        super().__init__()
        self._result = result
        self._delay = delay
        self._oversize = oversize
        self.calls = 0
        self.tokens = []

    async def _detect(self, token, warn):
        self.calls += 1
        self.tokens.append(token)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._oversize is not None:
            if warn is not None:
                warn(self._oversize, 50 * 1024 * 1024)
            return None
        if callable(self._result):
            return self._result()
        return self._result


def user_image(path: Path) -> ImageInfo:
    path.write_bytes(PNG_BYTES)
    return ImageInfo(path=path, extension=path.suffix[1:], source=ImageSource.USER)
