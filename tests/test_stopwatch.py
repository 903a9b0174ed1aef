from __future__ import annotations

import pytest

from sportsclock.core.scheduler import ManualClock
from sportsclock.core.stopwatch import Stopwatch, format_time


def test_stopwatch_accumulates_across_pauses() -> None:
    clock = ManualClock()
    watch = Stopwatch(clock)

    watch.start()
    clock.advance(5.0)
    watch.stop()
    clock.advance(100.0)
    watch.start()
    clock.advance(2.5)

    assert watch.is_running
    assert watch.elapsed_sec == pytest.approx(7.5)
    assert watch.elapsed_ms == pytest.approx(7_500)


def test_stopwatch_start_and_stop_are_idempotent() -> None:
    clock = ManualClock()
    watch = Stopwatch(clock)

    watch.stop()
    watch.start()
    clock.advance(1.0)
    watch.start()
    clock.advance(1.0)
    watch.stop()
    watch.stop()

    assert watch.elapsed_sec == pytest.approx(2.0)


def test_stopwatch_reset_clears_and_stops() -> None:
    clock = ManualClock()
    watch = Stopwatch(clock)
    watch.start()
    clock.advance(3.0)

    watch.reset()
    clock.advance(3.0)

    assert watch.is_running is False
    assert watch.elapsed_sec == 0


@pytest.mark.parametrize(
    ("time_ms", "expected"),
    [
        (0, "00:00:00"),
        (59_999, "00:00:59"),
        (61_000, "00:01:01"),
        (3_725_000, "01:02:05"),
        (-500, "00:00:00"),
    ],
)
def test_format_time(time_ms: float, expected: str) -> None:
    assert format_time(time_ms) == expected
