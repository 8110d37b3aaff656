"""
Repeat schedule for diagnostics runs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from sqldiagnostics.domain.config import RunSettings


@dataclass(frozen=True)
class RepeatSchedule:
    """
    How many times to run and how long to wait in between.

    ``iterations = floor(duration_hours * 60 / interval_minutes)`` when both
    are positive; otherwise a single run. A positive schedule too short to
    fit one interval still runs once.
    """

    iterations: int = 1
    interval_minutes: int = 0

    @classmethod
    def from_settings(cls, settings: RunSettings) -> "RepeatSchedule":
        return cls.compute(settings.interval_minutes, settings.duration_hours)

    @classmethod
    def compute(cls, interval_minutes: int | None, duration_hours: float | None) -> "RepeatSchedule":
        interval = interval_minutes or 0
        duration = duration_hours or 0
        if interval < 0 or duration < 0:
            raise ValueError("Interval and duration cannot be negative")
        if interval == 0 or duration == 0:
            return cls(iterations=1, interval_minutes=0)

        # rounding absorbs float noise such as 0.7 * 60 / 7 == 5.999...
        iterations = math.floor(round(duration * 60 / interval, 9))
        return cls(iterations=max(1, iterations), interval_minutes=interval)

    @property
    def repeats(self) -> bool:
        return self.iterations > 1

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60.0

    @property
    def sleeps(self) -> int:
        """Number of waits; there is no wait after the final run."""
        return max(0, self.iterations - 1)
