"""
Server clock used for cooldown, cast and buff timers.

Runtime timers store absolute end times against this clock. It starts at
zero whenever the process starts, so end times are meaningless across a
restart and are only ever persisted as remaining durations.
"""

import time
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current server time in seconds."""

    def now(self) -> float: ...


class ServerClock:
    """Monotonic seconds since this clock was created."""

    def __init__(self):
        self._started = time.monotonic()

    def now(self) -> float:
        return time.monotonic() - self._started
