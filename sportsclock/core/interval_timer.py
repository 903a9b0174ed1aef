"""Drift-corrected countdown/rest clock.

Time left is always derived from an absolute end time on a monotonic clock, so
late or dropped ticks never accumulate error and a stop/start pair never loses
or double-counts elapsed time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

from sportsclock.core.scheduler import Clock, TickScheduler, monotonic_clock
from sportsclock.core.sound import (
    SoundCallback,
    SoundCue,
    SoundPolicy,
    SoundRequest,
    clamp_volume,
)


TimerPhase = Literal["stopped", "running", "resting"]
PhaseCallback = Callable[[TimerPhase], None]
CycleCallback = Callable[[], None]

_FINAL_TICK_SECONDS = 3


@dataclass
class TimerState:
    phase: TimerPhase = "stopped"
    time_left_ms: float = 0.0
    cycle_count: int = 0
    halfway_sound_fired: bool = False


class IntervalTimer:
    def __init__(
        self,
        duration_seconds: float,
        rest_duration_seconds: float = 0.0,
        sound_policy: SoundPolicy | None = None,
        *,
        scheduler: TickScheduler,
        clock: Clock = monotonic_clock,
        on_sound: SoundCallback | None = None,
        on_phase_change: PhaseCallback | None = None,
        on_cycle_complete: CycleCallback | None = None,
        debug: bool = False,
    ) -> None:
        self._scheduler = scheduler
        self._clock = clock
        self._on_sound = on_sound
        self._on_phase_change = on_phase_change
        self._on_cycle_complete = on_cycle_complete
        self._debug = debug
        self._policy = sound_policy or SoundPolicy()

        self._duration_ms = float(duration_seconds) * 1000.0
        self._rest_ms = float(rest_duration_seconds) * 1000.0
        self._remaining_ms = self._duration_ms
        self._end_ms = 0.0
        self._handle: Optional[Any] = None
        self._last_tick_second: int | None = None

        self.state = TimerState(time_left_ms=self._duration_ms)

    # -- read side -----------------------------------------------------------

    @property
    def phase(self) -> TimerPhase:
        return self.state.phase

    @property
    def is_running(self) -> bool:
        return self.state.phase == "running"

    @property
    def is_resting(self) -> bool:
        return self.state.phase == "resting"

    @property
    def is_active(self) -> bool:
        return self.state.phase != "stopped"

    @property
    def cycle_count(self) -> int:
        return self.state.cycle_count

    @property
    def time_left_ms(self) -> float:
        return max(0.0, self.state.time_left_ms)

    @property
    def time_left(self) -> float:
        return self.time_left_ms / 1000.0

    @property
    def duration_ms(self) -> float:
        return self._duration_ms

    @property
    def rest_duration_ms(self) -> float:
        return self._rest_ms

    @property
    def sound_policy(self) -> SoundPolicy:
        return self._policy

    @property
    def workout_mode(self) -> bool:
        return self._on_cycle_complete is not None

    @property
    def is_past_halfway(self) -> bool:
        left = self.time_left_ms
        return self.is_running and 0 < left <= self._duration_ms / 2

    # -- commands ------------------------------------------------------------

    def start(self) -> None:
        if self.state.phase != "stopped":
            return
        self._end_ms = self._now_ms() + self._remaining_ms
        self._set_phase("running")
        current_second = math.ceil(self._remaining_ms / 1000.0)
        self._last_tick_second = (
            None if current_second > _FINAL_TICK_SECONDS else current_second
        )
        if self._remaining_ms >= self._duration_ms:
            self._fire("restart")
        self._schedule()

    def stop(self) -> None:
        if self.state.phase == "stopped":
            return
        self._cancel()
        if self.state.phase == "running":
            remaining = max(0.0, self._end_ms - self._now_ms())
            self._remaining_ms = remaining
            self.state.time_left_ms = remaining
        else:
            # rest is never resumed mid-interval
            self._arm_full_window()
        self._set_phase("stopped")

    def reset(self) -> None:
        self._cancel()
        self.state.cycle_count = 0
        self._arm_full_window()
        self._end_ms = self._now_ms() + self._duration_ms
        self._set_phase("running")
        self._fire("restart")
        self._schedule()

    def reset_cycle_count(self) -> None:
        self.state.cycle_count = 0

    def set_duration(
        self,
        duration_seconds: float,
        *,
        keep_active: bool | None = None,
    ) -> None:
        """Load a new full duration.

        An active timer re-anchors straight into the new window; an inactive
        one only rewinds its remaining time. ``keep_active`` overrides the
        detection, which lets a workout driver restart a timer that stopped on
        cycle completion.
        """
        active = self.is_active if keep_active is None else keep_active
        self._duration_ms = float(duration_seconds) * 1000.0
        self._cancel()
        self._arm_full_window()
        if not self.workout_mode:
            self.state.cycle_count = 0

        if active:
            self._end_ms = self._now_ms() + self._duration_ms
            self._set_phase("running")
            self._fire("restart")
            self._schedule()
        else:
            self._set_phase("stopped")

    def set_rest_duration(self, rest_duration_seconds: float) -> None:
        self._rest_ms = float(rest_duration_seconds) * 1000.0

    def set_sound_policy(self, policy: SoundPolicy) -> None:
        self._policy = policy

    # -- tick ----------------------------------------------------------------

    def _tick(self) -> None:
        self._handle = None
        phase = self.state.phase
        if phase == "stopped":
            return

        now = self._now_ms()
        remaining = self._end_ms - now

        if phase == "running":
            if remaining > 0:
                self.state.time_left_ms = remaining
                if (
                    not self.state.halfway_sound_fired
                    and remaining <= self._duration_ms / 2
                ):
                    self.state.halfway_sound_fired = True
                    self._fire("halfway")
                self._final_seconds_cue(remaining)
            else:
                self._complete_cycle(now)
                if self.state.phase == "stopped" or self._handle is not None:
                    return
        else:
            self.state.time_left_ms = 0.0
            if remaining <= 0:
                self._arm_full_window()
                self._end_ms = now + self._duration_ms
                self._set_phase("running")
                self._fire("restart")
            else:
                self._final_seconds_cue(remaining)

        self._schedule()

    def _complete_cycle(self, now: float) -> None:
        self.state.time_left_ms = 0.0
        self.state.cycle_count += 1
        self._fire("end")
        self._log(f"cycle {self.state.cycle_count} complete")

        if self._on_cycle_complete is not None:
            self._remaining_ms = self._duration_ms
            self._set_phase("stopped")
            self._on_cycle_complete()
            return

        if self._rest_ms > 0:
            self._end_ms = now + self._rest_ms
            self._last_tick_second = None
            self._set_phase("resting")
            return

        self._arm_full_window()
        self._end_ms = now + self._duration_ms
        self._fire("restart")

    def _final_seconds_cue(self, remaining_ms: float) -> None:
        current_second = math.ceil(remaining_ms / 1000.0)
        if 0 < current_second <= _FINAL_TICK_SECONDS and current_second != self._last_tick_second:
            self._last_tick_second = current_second
            self._fire("tick")

    # -- helpers -------------------------------------------------------------

    def _arm_full_window(self) -> None:
        self.state.halfway_sound_fired = False
        self._last_tick_second = None
        self._remaining_ms = self._duration_ms
        self.state.time_left_ms = self._duration_ms

    def _set_phase(self, phase: TimerPhase) -> None:
        if phase == self.state.phase:
            return
        self.state.phase = phase
        self._log(f"phase -> {phase}")
        if self._on_phase_change is not None:
            self._on_phase_change(phase)

    def _fire(self, cue: SoundCue) -> None:
        if not self._policy.allows(cue):
            return
        if self._on_sound is not None:
            self._on_sound(SoundRequest(cue=cue, volume=clamp_volume(self._policy.volume)))

    def _schedule(self) -> None:
        if self._handle is None:
            self._handle = self._scheduler.schedule(self._tick)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
            self._handle = None

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def _log(self, message: str) -> None:
        if self._debug:
            print(f"[TIMER] {message}")
