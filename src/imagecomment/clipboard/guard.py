"""Checks applied to every file a clipboard probe hands over.

Only files in the system temp directory are ever deleted here. A file
that came from the user (a copied file, a Finder selection) is
validated but never touched.
"""

import os
import random
import re
import stat
import string
import tempfile
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

import structlog

from imagecomment.clipboard.constants import (
    IMAGE_EXTENSIONS,
    MAX_IMAGE_SIZE,
    TEMP_FILE_PREFIX,
)
from imagecomment.clipboard.models import ImageInfo, ImageSource

logger = structlog.get_logger()

# Called with (actual_size, max_size) in bytes
SizeWarning = Callable[[int, int], None]

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_WINDOWS_DRIVE_RE = re.compile(r"^/[A-Za-z]:")


def system_temp_dir() -> Path:
    """Resolved system temp directory."""
    return Path(os.path.realpath(tempfile.gettempdir()))


def is_inside_temp_dir(path: str | Path) -> bool:
    """True when path resolves to a location under the temp dir."""
    try:
        resolved = Path(os.path.realpath(path))
    except (OSError, ValueError):
        return False
    return system_temp_dir() in resolved.parents


def _random_suffix(length: int = 6) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(random.choices(alphabet, k=length))  # noqa: S311


def new_temp_stem() -> Path:
    """Fresh extension-less path in the temp dir."""
    millis = int(time.time() * 1000)
    return system_temp_dir() / f"{TEMP_FILE_PREFIX}-{millis}-{_random_suffix()}"


def new_temp_path(extension: str) -> Path:
    """Fresh temp file path with the given extension."""
    return new_temp_stem().with_suffix(f".{extension}")


def sanitize_clipboard_path(raw: str | None) -> Path | None:
    """Turn clipboard text into a normalised local path.

    Takes the first non-comment line (uri-lists may hold several),
    decodes file:// URIs and removes control characters so crafted
    clipboard content cannot smuggle extra lines or escapes into
    later checks.
    """
    if not raw:
        return None

    candidate = ""
    for line in raw.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            candidate = line
            break

    if candidate.startswith("file://"):
        candidate = unquote(urlparse(candidate).path)
        # file:///C:/Users/x.png -> C:/Users/x.png
        if _WINDOWS_DRIVE_RE.match(candidate):
            candidate = candidate[1:]

    candidate = _CONTROL_CHARS_RE.sub("", candidate).strip()
    if not candidate:
        return None
    return Path(os.path.normpath(candidate))


def discard_temp_file(path: str | Path | None, log: Any = None) -> bool:
    """Delete a probe-created file.

    Refuses anything outside the system temp dir. Never raises.

    Returns:
        True when a file was removed.
    """
    log = log or logger
    if path is None:
        return False
    if not is_inside_temp_dir(path):
        log.warning("temp_cleanup_refused", path=str(path))
        return False
    try:
        Path(path).unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        log.warning("temp_cleanup_failed", path=str(path), error=str(exc))
        return False
    log.debug("temp_file_removed", path=str(path))
    return True


def check_candidate(
    path: Path,
    source: ImageSource,
    *,
    warn: SizeWarning | None = None,
    log: Any = None,
) -> ImageInfo | None:
    """Apply the post-detection checks shared by all probes.

    The file must exist, be a regular file (not a directory or
    symlink), carry an allow-listed extension and not exceed
    MAX_IMAGE_SIZE. A rejected temp file is deleted; an oversized
    one also triggers ``warn``.
    """
    log = log or logger
    temp = source is ImageSource.TEMP

    try:
        st = path.lstat()
    except OSError:
        log.debug("candidate_missing", path=str(path))
        return None

    if not stat.S_ISREG(st.st_mode):
        log.debug("candidate_not_regular_file", path=str(path))
        if temp:
            discard_temp_file(path, log)
        return None

    extension = path.suffix[1:].lower()
    if extension not in IMAGE_EXTENSIONS:
        log.debug("candidate_unsupported_format", path=str(path))
        if temp:
            discard_temp_file(path, log)
        return None

    if st.st_size > MAX_IMAGE_SIZE:
        log.warning(
            "image_too_large",
            path=str(path),
            size=st.st_size,
            limit=MAX_IMAGE_SIZE,
        )
        if temp:
            discard_temp_file(path, log)
        if warn is not None:
            warn(st.st_size, MAX_IMAGE_SIZE)
        return None

    return ImageInfo(path=path, extension=extension, source=source)
