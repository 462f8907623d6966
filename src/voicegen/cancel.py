"""Cooperative cancellation for in-flight generation requests."""

import threading
import time

from .errors import SynthesisCancelled


class CancelToken:
    """Thread-safe cancellation flag shared by one request's components."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        """Return True once cancel() has been called."""
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise SynthesisCancelled if cancellation was requested."""
        if self._event.is_set():
            raise SynthesisCancelled("Request cancelled by caller")

    def wait(self, timeout: float) -> bool:
        """Sleep up to timeout seconds, waking early on cancellation.

        Returns:
            True if the token was cancelled during the wait.
        """
        return self._event.wait(timeout)


def interruptible_sleep(seconds: float, cancel: CancelToken | None = None) -> None:
    """Sleep, waking early and raising SynthesisCancelled if the token is cancelled."""
    if seconds <= 0:
        return
    if cancel is None:
        time.sleep(seconds)
    elif cancel.wait(seconds):
        cancel.raise_if_cancelled()


__all__ = ["CancelToken", "interruptible_sleep"]
