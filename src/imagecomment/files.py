"""Persist detected images into the project save directory."""

import os
import random
import shutil
import string
from datetime import UTC, datetime
from pathlib import Path

from imagecomment.clipboard.models import ImageInfo

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def generate_file_name(extension: str, now: datetime | None = None) -> str:
    """Unique name like ``image-20250101-093000-k3x9qa.png``.

    The timestamp is UTC; the random suffix keeps two pastes in the
    same second apart.
    """
    now = now or datetime.now(UTC)
    timestamp = now.astimezone(UTC).strftime("%Y%m%d-%H%M%S")
    suffix = "".join(random.choices(_SUFFIX_ALPHABET, k=6))  # noqa: S311
    return f"image-{timestamp}-{suffix}.{extension}"


def persist_image(info: ImageInfo, target_dir: Path) -> Path:
    """Move or copy an image into target_dir under a fresh name.

    Temp files are moved; user files are copied and left in place.

    Returns:
        Path of the saved file.

    Raises:
        FileNotFoundError: If the source vanished or the
            destination was not created.
        OSError: If the directory or file operation fails.
    """
    if not info.path.is_file():
        msg = f"Source image file not found: {info.path}"
        raise FileNotFoundError(msg)

    target_dir.mkdir(parents=True, exist_ok=True)
    destination = target_dir / generate_file_name(info.extension)

    if info.is_temp:
        shutil.move(info.path, destination)
    else:
        shutil.copyfile(info.path, destination)

    if not destination.is_file():
        msg = f"Target image file was not created: {destination}"
        raise FileNotFoundError(msg)
    return destination


def embed_path(file_path: Path, workspace_root: Path, use_relative: bool) -> str:
    """Path written into the comment.

    Relative paths always use forward slashes so the comment reads
    the same on every platform.
    """
    if use_relative:
        return os.path.relpath(file_path, workspace_root).replace("\\", "/")
    return str(file_path)
