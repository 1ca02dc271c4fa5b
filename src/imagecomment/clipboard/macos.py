"""macOS clipboard probe via osascript."""

import asyncio
from pathlib import Path

from imagecomment.clipboard.base import ClipboardProbe
from imagecomment.clipboard.guard import (
    SizeWarning,
    check_candidate,
    discard_temp_file,
    is_inside_temp_dir,
    new_temp_stem,
    sanitize_clipboard_path,
)
from imagecomment.clipboard.models import ImageInfo, ImageSource
from imagecomment.clipboard.runner import CancellationToken

NO_FILE = "no-file"
NO_IMAGE = "no-image"

# Copying a file in Finder leaves it selected, so the selection is
# the most reliable way to learn which file was copied.
FINDER_SELECTION_SCRIPT = """\
try
  tell application "Finder"
    set selectedItems to selection as alias list
    if (count of selectedItems) > 0 then
      return POSIX path of (item 1 of selectedItems)
    end if
  end tell
end try
return "no-file"
"""

# argv: <temp path without extension>
# Prints the written file path, "no-image" or "error:<message>".
CLIPBOARD_DATA_SCRIPT = """\
on run argv
  set basePath to item 1 of argv
  try
    set imageData to (the clipboard as «class PNGf»)
    set ext to "png"
  on error
    try
      set imageData to (the clipboard as «class JPEG»)
      set ext to "jpg"
    on error
      try
        set imageData to (the clipboard as «class GIFf»)
        set ext to "gif"
      on error
        return "no-image"
      end try
    end try
  end try
  set filePath to basePath & "." & ext
  try
    set fileRef to open for access (POSIX file filePath) with write permission
    set eof fileRef to 0
    write imageData to fileRef
    close access fileRef
  on error errMsg
    try
      close access (POSIX file filePath)
    end try
    return "error:" & errMsg
  end try
  return filePath
end run
"""

_DATA_EXTENSIONS = ("png", "jpg", "gif")


class MacOSProbe(ClipboardProbe):
    """Finder selection first, raw clipboard image data second.

    Both detections run together; when both find something the
    selected file wins and the extracted temp file is deleted.
    """

    name = "macos"

    async def _detect(
        self,
        token: CancellationToken,
        warn: SizeWarning | None,
    ) -> ImageInfo | None:
        selected, copied = await asyncio.gather(
            self._selected_file(token, warn),
            self._clipboard_data(token, warn),
            return_exceptions=True,
        )
        if isinstance(selected, BaseException):
            self._log.warning("finder_selection_failed", error=str(selected))
            selected = None
        if isinstance(copied, BaseException):
            self._log.warning("clipboard_data_failed", error=str(copied))
            copied = None

        if selected is not None:
            if copied is not None:
                discard_temp_file(copied.path, self._log)
            return selected
        return copied

    async def _selected_file(
        self,
        token: CancellationToken,
        warn: SizeWarning | None,
    ) -> ImageInfo | None:
        result = await self._run(["osascript", "-e", FINDER_SELECTION_SCRIPT], token)
        if result is None or not result.ok:
            return None
        raw = result.stdout.strip()
        if not raw or raw == NO_FILE:
            return None
        path = sanitize_clipboard_path(raw)
        if path is None:
            return None
        return check_candidate(path, ImageSource.USER, warn=warn, log=self._log)

    async def _clipboard_data(
        self,
        token: CancellationToken,
        warn: SizeWarning | None,
    ) -> ImageInfo | None:
        stem = new_temp_stem()
        try:
            result = await self._run(
                ["osascript", "-e", CLIPBOARD_DATA_SCRIPT, str(stem)],
                token,
            )
        except BaseException:
            self._discard_outputs(stem)
            raise
        if result is None or not result.ok:
            self._discard_outputs(stem)
            return None

        output = result.stdout.strip()
        if output == NO_IMAGE:
            return None
        if output.startswith("error:"):
            self._log.warning("clipboard_write_failed", error=output[6:])
            self._discard_outputs(stem)
            return None

        path = sanitize_clipboard_path(output)
        if path is None or not is_inside_temp_dir(path):
            self._log.error(
                "clipboard_output_outside_temp_dir",
                output=output,
            )
            self._discard_outputs(stem)
            return None
        return check_candidate(path, ImageSource.TEMP, warn=warn, log=self._log)

    def _discard_outputs(self, stem: Path) -> None:
        for ext in _DATA_EXTENSIONS:
            discard_temp_file(stem.with_name(f"{stem.name}.{ext}"), self._log)
