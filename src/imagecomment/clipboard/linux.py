"""Linux clipboard probe via xclip, or wl-paste on Wayland."""

import shutil

from imagecomment.clipboard.base import ClipboardProbe
from imagecomment.clipboard.guard import (
    SizeWarning,
    check_candidate,
    discard_temp_file,
    new_temp_path,
    sanitize_clipboard_path,
)
from imagecomment.clipboard.models import ImageInfo, ImageSource
from imagecomment.clipboard.runner import CancellationToken

URI_LIST_TARGET = "text/uri-list"

# Preference order when the clipboard offers several formats
IMAGE_TARGETS: list[tuple[str, str]] = [
    ("image/png", "png"),
    ("image/jpeg", "jpg"),
    ("image/gif", "gif"),
]


def _read_target_cmd(tool: str, target: str) -> list[str]:
    if tool == "xclip":
        return ["xclip", "-selection", "clipboard", "-t", target, "-o"]
    return ["wl-paste", "--no-newline", "--type", target]


def _list_targets_cmd(tool: str) -> list[str]:
    if tool == "xclip":
        return ["xclip", "-selection", "clipboard", "-t", "TARGETS", "-o"]
    return ["wl-paste", "--list-types"]


def pick_image_target(targets: str) -> tuple[str, str] | None:
    """Choose the preferred image MIME type from a target listing."""
    offered = {line.strip() for line in targets.splitlines()}
    for mime, ext in IMAGE_TARGETS:
        if mime in offered:
            return mime, ext
    return None


class LinuxProbe(ClipboardProbe):
    """Copied file URI first, then raw image data.

    Unlike macOS and Windows the two checks run one after the
    other: when the clipboard references an existing file, that
    file alone decides the result.
    """

    name = "linux"

    def _tool(self) -> str | None:
        if shutil.which("xclip"):
            return "xclip"
        if shutil.which("wl-paste"):
            return "wl-paste"
        return None

    async def _detect(
        self,
        token: CancellationToken,
        warn: SizeWarning | None,
    ) -> ImageInfo | None:
        tool = self._tool()
        if tool is None:
            self._log.warning("clipboard_tool_missing", need="xclip or wl-paste")
            return None

        uri = await self._run(_read_target_cmd(tool, URI_LIST_TARGET), token)
        if uri is not None and uri.ok:
            path = sanitize_clipboard_path(uri.stdout)
            if path is not None and path.exists():
                return check_candidate(
                    path,
                    ImageSource.USER,
                    warn=warn,
                    log=self._log,
                )

        targets = await self._run(_list_targets_cmd(tool), token)
        if targets is None or not targets.ok:
            return None
        picked = pick_image_target(targets.stdout)
        if picked is None:
            return None
        mime, ext = picked

        temp = new_temp_path(ext)
        try:
            result = await self._run(
                _read_target_cmd(tool, mime),
                token,
                stdout_path=temp,
            )
        except BaseException:
            discard_temp_file(temp, self._log)
            raise
        if result is None or not result.ok:
            if result is not None:
                self._log.warning(
                    "clipboard_read_failed",
                    tool=tool,
                    mime=mime,
                    stderr=result.stderr.strip(),
                )
            discard_temp_file(temp, self._log)
            return None

        if not temp.exists() or temp.stat().st_size == 0:
            discard_temp_file(temp, self._log)
            return None
        return check_candidate(temp, ImageSource.TEMP, warn=warn, log=self._log)
