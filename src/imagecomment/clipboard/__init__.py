import sys
from typing import Any

from imagecomment.clipboard.base import ClipboardProbe, NullProbe
from imagecomment.clipboard.linux import LinuxProbe
from imagecomment.clipboard.macos import MacOSProbe
from imagecomment.clipboard.models import ImageInfo, ImageSource
from imagecomment.clipboard.runner import CancellationToken
from imagecomment.clipboard.windows import WindowsProbe

PROBE_REGISTRY: dict[str, type[ClipboardProbe]] = {
    "darwin": MacOSProbe,
    "win32": WindowsProbe,
    "linux": LinuxProbe,
}


def select_probe(platform: str | None = None, logger: Any = None) -> ClipboardProbe:
    """Build the probe for a platform (defaults to the running one)."""
    platform = platform or sys.platform
    if platform.startswith("linux"):
        platform = "linux"
    probe_cls = PROBE_REGISTRY.get(platform, NullProbe)
    return probe_cls(logger=logger)


__all__ = [
    "CancellationToken",
    "ClipboardProbe",
    "ImageInfo",
    "ImageSource",
    "LinuxProbe",
    "MacOSProbe",
    "NullProbe",
    "WindowsProbe",
    "select_probe",
]
