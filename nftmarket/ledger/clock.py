import time
from typing import Protocol


class Clock(Protocol):
    def now_seconds(self) -> int: ...


class SystemClock:
    """Wall clock in whole Unix seconds"""

    def now_seconds(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to; used by tests and simulations"""

    __slots__ = ("_now",)

    def __init__(self, now: int = 0) -> None:
        self._now = now

    def now_seconds(self) -> int:
        return self._now

    def set(self, now: int) -> None:
        if now < self._now:
            raise ValueError("clock cannot move backwards")
        self._now = now

    def advance(self, seconds: int) -> int:
        self.set(self._now + seconds)
        return self._now
