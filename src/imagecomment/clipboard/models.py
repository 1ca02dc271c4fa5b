"""Value types produced by clipboard probes."""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class ImageSource(StrEnum):
    """Where a detected image file came from."""

    TEMP = "temp"
    USER = "user"


@dataclass(frozen=True)
class ImageInfo:
    """An image found on the clipboard, ready to be persisted once.

    ``TEMP`` files were written by a probe and may be moved or deleted.
    ``USER`` files belong to the user and are only ever copied.
    """

    path: Path
    extension: str
    source: ImageSource

    @property
    def is_temp(self) -> bool:
        return self.source is ImageSource.TEMP
