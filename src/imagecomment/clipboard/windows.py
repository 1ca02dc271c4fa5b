"""Windows clipboard probe via PowerShell."""

import asyncio
import base64
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
from imagecomment.clipboard.runner import (
    CancellationToken,
    filter_powershell_stderr,
)

_PREAMBLE = """\
$ProgressPreference = 'SilentlyContinue'
[Console]::OutputEncoding = [System.Text.Encoding]::UTF8
Add-Type -AssemblyName System.Windows.Forms
Add-Type -AssemblyName System.Drawing
"""

FILE_DROP_SCRIPT = (
    _PREAMBLE
    + """\
$files = [System.Windows.Forms.Clipboard]::GetFileDropList()
if ($files.Count -gt 0) { Write-Output $files[0] }
"""
)

# {base} is a single-quoted PowerShell literal without extension
IMAGE_SCRIPT_TEMPLATE = (
    _PREAMBLE
    + """\
$base = {base}
$image = [System.Windows.Forms.Clipboard]::GetImage()
if ($image -ne $null) {{
  $formats = [System.Drawing.Imaging.ImageFormat]
  $guid = $image.RawFormat.Guid
  if ($guid -eq $formats::Jpeg.Guid) {{ $ext = 'jpg'; $codec = $formats::Jpeg }}
  elseif ($guid -eq $formats::Gif.Guid) {{ $ext = 'gif'; $codec = $formats::Gif }}
  elseif ($guid -eq $formats::Bmp.Guid) {{ $ext = 'bmp'; $codec = $formats::Bmp }}
  else {{ $ext = 'png'; $codec = $formats::Png }}
  $target = "$base.$ext"
  try {{
    $image.Save($target, $codec)
    Write-Output $target
  }} catch {{
    Write-Error $_.Exception.Message
  }} finally {{
    $image.Dispose()
  }}
}}
"""
)

_DATA_EXTENSIONS = ("png", "jpg", "gif", "bmp")


def powershell_literal(value: str) -> str:
    """Quote a value as a single-quoted PowerShell string."""
    return "'" + value.replace("'", "''") + "'"


def encode_command(script: str) -> str:
    """Encode a script for ``powershell -EncodedCommand``."""
    return base64.b64encode(script.encode("utf-16-le")).decode("ascii")


def powershell_args(script: str) -> list[str]:
    return [
        "powershell",
        "-NoProfile",
        "-NonInteractive",
        "-Sta",
        "-EncodedCommand",
        encode_command(script),
    ]


class WindowsProbe(ClipboardProbe):
    """File-drop list first, clipboard bitmap second.

    Both queries run together; a copied file takes priority over
    image data, whose temp file is then deleted.
    """

    name = "windows"

    async def _detect(
        self,
        token: CancellationToken,
        warn: SizeWarning | None,
    ) -> ImageInfo | None:
        dropped, copied = await asyncio.gather(
            self._file_drop(token, warn),
            self._image_data(token, warn),
            return_exceptions=True,
        )
        if isinstance(dropped, BaseException):
            self._log.warning("file_drop_failed", error=str(dropped))
            dropped = None
        if isinstance(copied, BaseException):
            self._log.warning("clipboard_data_failed", error=str(copied))
            copied = None

        if dropped is not None:
            if copied is not None:
                discard_temp_file(copied.path, self._log)
            return dropped
        return copied

    def _log_stderr(self, stderr: str) -> None:
        filtered = filter_powershell_stderr(stderr)
        if filtered:
            self._log.warning("powershell_stderr", stderr=filtered)

    async def _file_drop(
        self,
        token: CancellationToken,
        warn: SizeWarning | None,
    ) -> ImageInfo | None:
        result = await self._run(powershell_args(FILE_DROP_SCRIPT), token)
        if result is None:
            return None
        self._log_stderr(result.stderr)
        path = sanitize_clipboard_path(result.stdout)
        self._log.debug("file_drop_path", path=str(path) if path else None)
        if path is None:
            return None
        return check_candidate(path, ImageSource.USER, warn=warn, log=self._log)

    async def _image_data(
        self,
        token: CancellationToken,
        warn: SizeWarning | None,
    ) -> ImageInfo | None:
        stem = new_temp_stem()
        script = IMAGE_SCRIPT_TEMPLATE.format(base=powershell_literal(str(stem)))
        try:
            result = await self._run(powershell_args(script), token)
        except BaseException:
            self._discard_outputs(stem)
            raise
        if result is None:
            self._discard_outputs(stem)
            return None
        self._log_stderr(result.stderr)

        path = sanitize_clipboard_path(result.stdout)
        if path is None:
            self._discard_outputs(stem)
            return None
        if not is_inside_temp_dir(path):
            self._log.error(
                "clipboard_output_outside_temp_dir",
                output=str(path),
                temp_stem=str(stem),
            )
            self._discard_outputs(stem)
            return None
        return check_candidate(path, ImageSource.TEMP, warn=warn, log=self._log)

    def _discard_outputs(self, stem: Path) -> None:
        for ext in _DATA_EXTENSIONS:
            discard_temp_file(stem.with_name(f"{stem.name}.{ext}"), self._log)
