"""Time source for the retry driver.

The driver never calls ``time`` directly: it reads monotonic time and
sleeps through a ``Clock`` so waits can be cancelled and so tests can
substitute a clock that advances instantly.
"""

from __future__ import annotations

import threading
import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic time source with a cancellable sleep."""

    def monotonic(self) -> float: ...

    def sleep(self, seconds: float, cancel: threading.Event | None = None) -> bool:
        """Sleep up to *seconds*.  Return ``True`` if *cancel* was set."""
        ...


class SystemClock:
    """Wall-clock implementation backed by ``time.monotonic``."""

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float, cancel: threading.Event | None = None) -> bool:
        if cancel is None:
            if seconds > 0:
                time.sleep(seconds)
            return False
        return cancel.wait(max(seconds, 0.0))


SYSTEM_CLOCK = SystemClock()
