"""Tick drivers and clocks injected into the timing engine."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol


TickCallback = Callable[[], None]
Clock = Callable[[], float]


class TickScheduler(Protocol):
    def schedule(self, callback: TickCallback) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


def monotonic_clock() -> float:
    return time.monotonic()


class AsyncioTickScheduler:
    """Runs tick callbacks on the running asyncio loop at a fixed rate."""

    def __init__(self, interval_sec: float = 1 / 30) -> None:
        self._interval_sec = interval_sec

    def schedule(self, callback: TickCallback) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(self._interval_sec, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


@dataclass
class ManualClock:
    now_sec: float = 0.0

    def __call__(self) -> float:
        return self.now_sec

    def advance(self, seconds: float) -> None:
        self.now_sec += seconds


@dataclass
class ManualTickScheduler:
    """Collects scheduled callbacks until the test (or a simulation) runs them."""

    pending: dict[int, TickCallback] = field(default_factory=dict)
    _next_handle: int = 0

    def schedule(self, callback: TickCallback) -> int:
        self._next_handle += 1
        self.pending[self._next_handle] = callback
        return self._next_handle

    def cancel(self, handle: int) -> None:
        self.pending.pop(handle, None)

    def run_pending(self) -> int:
        due = list(self.pending.items())
        self.pending.clear()
        for _, callback in due:
            callback()
        return len(due)


def run_for(
    clock: ManualClock,
    scheduler: ManualTickScheduler,
    seconds: float,
    frame_sec: float = 0.05,
) -> None:
    """Advance a manual clock frame by frame, firing ticks after each frame."""
    frames = int(round(seconds / frame_sec))
    for _ in range(frames):
        clock.advance(frame_sec)
        scheduler.run_pending()
