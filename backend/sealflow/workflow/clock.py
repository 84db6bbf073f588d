"""Wall-clock source for application timestamps."""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Naive local time, matching the DateTime columns."""

    def now(self) -> datetime:
        return datetime.now()


system_clock = SystemClock()
