"""Run clipboard helper programs without blocking the event loop.

Every helper (osascript, powershell, xclip, wl-paste) is started
directly, never through a shell, and is tied to a CancellationToken
so a probe that lost its race against the paste timeout does not
leave the process running.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger()


class CancellationToken:
    """Tells a running probe that its result is no longer wanted."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass
class CommandResult:
    """Exit status and decoded output of a helper program."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass


async def run_command(
    args: list[str],
    token: CancellationToken,
    *,
    stdout_path: Path | None = None,
    timeout: float | None = None,
    log: Any = None,
) -> CommandResult | None:
    """Run a helper program and collect its output.

    Args:
        args: Program and arguments.
        token: Cancelling it kills the process.
        stdout_path: Stream stdout into this file instead of
            capturing it, so image bytes never sit in memory.
        timeout: Seconds before the process is killed.
        log: Logger to report problems to.

    Returns:
        The CommandResult, or None when the program is missing,
        could not start, timed out or was cancelled.
    """
    log = log or logger
    if token.cancelled:
        return None

    out_file = open(stdout_path, "wb") if stdout_path is not None else None
    try:
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=out_file if out_file is not None else asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            log.debug("command_unavailable", command=args[0], error=str(exc))
            return None

        communicate = asyncio.ensure_future(proc.communicate())
        cancelled = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {communicate, cancelled},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
            if communicate not in done:
                log.info(
                    "command_aborted",
                    command=args[0],
                    reason="cancelled" if token.cancelled else "timeout",
                )
                _kill(proc)
                await communicate
                return None
        except asyncio.CancelledError:
            _kill(proc)
            # Reap the child before the loop that watches it goes away
            await asyncio.shield(proc.wait())
            raise
        finally:
            cancelled.cancel()

        stdout, stderr = communicate.result()
    finally:
        if out_file is not None:
            out_file.close()

    return CommandResult(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=_decode(stdout),
        stderr=_decode(stderr),
    )


def filter_powershell_stderr(stderr: str) -> str | None:
    """Strip PowerShell CLIXML progress records from stderr.

    Returns the real error text, or None when nothing is left.
    """
    trimmed = (stderr or "").strip()
    if not trimmed:
        return None
    if trimmed.startswith("#< CLIXML") or "<Objs Version=" in trimmed:
        return None
    return trimmed
