"""External command execution with timeouts and cancellation.

All speech binaries and ffmpeg calls go through run_command so every
subprocess carries a timeout and can be abandoned when a request is cancelled.
"""

import logging
import shutil
import subprocess
import time

from ..cancel import CancelToken
from ..errors import CommandError, CommandTimeoutError, SynthesisCancelled

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
_POLL_INTERVAL = 0.25


def which(binary: str) -> str | None:
    """Return the full path of a binary on PATH, or None."""
    return shutil.which(binary)


def ffmpeg_available() -> bool:
    """Check if ffmpeg is on PATH."""
    return which("ffmpeg") is not None


def run_command(
    cmd: list[str],
    timeout: float = DEFAULT_TIMEOUT,
    cancel: CancelToken | None = None,
) -> bytes:
    """Run a command to completion and return its stdout.

    Args:
        cmd: Command and arguments (no shell)
        timeout: Seconds before the process is killed
        cancel: Optional token; the process is killed when it is cancelled

    Returns:
        Captured stdout bytes

    Raises:
        CommandError: If the command cannot start or exits non-zero
        CommandTimeoutError: If the timeout expires
        SynthesisCancelled: If the token is cancelled while waiting
    """
    logger.debug(f"Running: {' '.join(cmd[:3])}{' ...' if len(cmd) > 3 else ''}")

    try:
        process = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        raise CommandError(f"Failed to start {cmd[0]}: {e}") from e

    deadline = time.monotonic() + timeout
    try:
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise CommandTimeoutError(f"{cmd[0]} timed out after {timeout:.0f}s")
            try:
                stdout, stderr = process.communicate(timeout=min(_POLL_INTERVAL, remaining))
                break
            except subprocess.TimeoutExpired:
                if cancel is not None and cancel.is_cancelled:
                    raise SynthesisCancelled(f"{cmd[0]} abandoned: request cancelled") from None
    finally:
        if process.poll() is None:
            process.kill()
            process.communicate()

    if process.returncode != 0:
        detail = stderr.decode("utf-8", errors="replace").strip()[-300:]
        raise CommandError(
            f"{cmd[0]} exited with status {process.returncode}: {detail}",
            returncode=process.returncode,
        )

    return stdout


__all__ = ["DEFAULT_TIMEOUT", "ffmpeg_available", "run_command", "which"]
