"""Time sources feeding the nonce time prefix."""

from __future__ import annotations

import time
from typing import Protocol

from textnonce.models import TimePrefix

NANOS_PER_SECOND = 1_000_000_000


class Clock(Protocol):
    def now(self) -> TimePrefix: ...


class SystemClock:
    """Wall-clock time split into whole seconds and sub-second nanoseconds."""

    def now(self) -> TimePrefix:
        seconds, nanoseconds = divmod(time.time_ns(), NANOS_PER_SECOND)
        return TimePrefix(seconds=seconds, nanoseconds=nanoseconds)


class FixedClock:
    """Always reports the same instant. Useful for reproducible layouts."""

    def __init__(self, seconds: int, nanoseconds: int = 0) -> None:
        if not 0 <= nanoseconds < NANOS_PER_SECOND:
            raise ValueError("nanoseconds must be in [0, 1_000_000_000)")
        self._prefix = TimePrefix(seconds=seconds, nanoseconds=nanoseconds)

    def now(self) -> TimePrefix:
        return self._prefix
