"""Elapsed-time stopwatch used as the workout duration clock."""

from __future__ import annotations

from sportsclock.core.scheduler import Clock, monotonic_clock


class Stopwatch:
    def __init__(self, clock: Clock = monotonic_clock) -> None:
        self._clock = clock
        self._accumulated_sec = 0.0
        self._started_at: float | None = None

    @property
    def is_running(self) -> bool:
        return self._started_at is not None

    @property
    def elapsed_sec(self) -> float:
        if self._started_at is None:
            return self._accumulated_sec
        return self._accumulated_sec + (self._clock() - self._started_at)

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed_sec * 1000.0

    def start(self) -> None:
        if self._started_at is None:
            self._started_at = self._clock()

    def stop(self) -> None:
        if self._started_at is None:
            return
        self._accumulated_sec += self._clock() - self._started_at
        self._started_at = None

    def reset(self) -> None:
        self._accumulated_sec = 0.0
        self._started_at = None


def format_time(time_ms: float) -> str:
    total_seconds = max(0, int(time_ms // 1000))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
