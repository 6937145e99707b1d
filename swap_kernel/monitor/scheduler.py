"""Cooperative waiting for the monitor loop."""

import threading
import time


class StopToken:
    """
    Cancellation token checked at every wait boundary.

    All monitor waits go through `wait_ms`, so a stop request is observed
    within one interval.
    """

    def __init__(self):
        self._event = threading.Event()

    def set(self) -> None:
        self._event.set()

    def clear(self) -> None:
        self._event.clear()

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait_ms(self, interval_ms: int) -> bool:
        """Wait up to `interval_ms`. Returns True if stop was requested."""
        return self._event.wait(timeout=max(0, interval_ms) / 1000.0)


class Deadline:
    """Monotonic deadline for bounded searches."""

    def __init__(self, timeout_ms: int):
        self._expires_at = time.monotonic() + timeout_ms / 1000.0

    def expired(self) -> bool:
        return time.monotonic() >= self._expires_at

    def remaining_ms(self) -> int:
        return max(0, int((self._expires_at - time.monotonic()) * 1000))
