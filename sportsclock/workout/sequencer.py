"""Active-workout step sequencer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from sportsclock.workout.model import Step


PlanResolver = Callable[[str], Sequence[Step]]
FinishCallback = Callable[[bool], None]
StepKey = tuple[str, int, int]


@dataclass
class Session:
    steps: tuple[Step, ...]
    source_plan_ids: tuple[str, ...]
    current_index: int = 0
    restart_epoch: int = 0

    @property
    def current_step(self) -> Step:
        return self.steps[self.current_index]


@dataclass
class _PauseFlags:
    workout: bool = False
    countdown: bool = False


class SessionSequencer:
    def __init__(
        self,
        resolve_plan_steps: PlanResolver,
        on_finish: FinishCallback | None = None,
        debug: bool = False,
    ) -> None:
        self._resolve_plan_steps = resolve_plan_steps
        self._on_finish = on_finish
        self._debug = debug
        self._session: Session | None = None
        self._paused = _PauseFlags()

    # -- read side -----------------------------------------------------------

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def current_step(self) -> Step | None:
        if self._session is None:
            return None
        return self._session.current_step

    @property
    def current_index(self) -> int | None:
        if self._session is None:
            return None
        return self._session.current_index

    @property
    def session_step_count(self) -> int:
        if self._session is None:
            return 0
        return len(self._session.steps)

    @property
    def restart_epoch(self) -> int:
        if self._session is None:
            return 0
        return self._session.restart_epoch

    @property
    def next_upcoming_step(self) -> Step | None:
        """Next exercise after the current position, skipping rests."""
        if self._session is None:
            return None
        for step in self._session.steps[self._session.current_index + 1 :]:
            if step.is_exercise:
                return step
        return None

    @property
    def step_key(self) -> StepKey | None:
        if self._session is None:
            return None
        return (
            self._session.current_step.id,
            self._session.current_index,
            self._session.restart_epoch,
        )

    @property
    def is_workout_paused(self) -> bool:
        return self._paused.workout

    @property
    def is_countdown_paused(self) -> bool:
        return self._paused.countdown

    @property
    def should_timer_run(self) -> bool:
        step = self.current_step
        if step is None or step.is_rep_based:
            return False
        return not (self._paused.workout or self._paused.countdown)

    # -- lifecycle -----------------------------------------------------------

    def start_workout(self, plan_ids: Iterable[str]) -> bool:
        ids = tuple(plan_ids)
        steps: list[Step] = []
        for plan_id in ids:
            steps.extend(self._resolve_plan_steps(plan_id))
        if not steps:
            self._log(f"no steps resolved for {list(ids)}, session not started")
            return False

        self._session = Session(steps=tuple(steps), source_plan_ids=ids)
        self._paused = _PauseFlags()
        self._log(f"started with {len(steps)} steps from {list(ids)}")
        return True

    def stop_workout(self) -> None:
        self._end_session(completed=False)

    def next_step(self) -> None:
        session = self._session
        if session is None:
            return
        self._paused.countdown = False
        if session.current_index + 1 >= len(session.steps):
            self._end_session(completed=True)
            return
        session.current_index += 1
        self._log(f"step {session.current_index + 1}/{len(session.steps)}")

    def previous_step(self) -> None:
        session = self._session
        if session is None:
            return
        self._paused.countdown = False
        if session.current_index > 0:
            session.current_index -= 1
            self._log(f"step {session.current_index + 1}/{len(session.steps)}")

    def pause_workout(self) -> None:
        if self._session is not None:
            self._paused.workout = True

    def resume_workout(self) -> None:
        if self._session is not None:
            self._paused.workout = False

    def pause_step_countdown(self) -> None:
        if self._session is not None:
            self._paused.countdown = True

    def resume_step_countdown(self) -> None:
        if self._session is not None:
            self._paused.countdown = False

    def restart_current_step(self) -> None:
        if self._session is None:
            return
        self._session.restart_epoch += 1
        self._paused.countdown = False

    def restart_workout(self) -> None:
        if self._session is None:
            return
        self._session.current_index = 0
        self._session.restart_epoch += 1
        self._paused = _PauseFlags()

    def _end_session(self, completed: bool) -> None:
        had_session = self._session is not None
        self._session = None
        self._paused = _PauseFlags()
        if not had_session:
            return
        self._log("completed" if completed else "stopped")
        if self._on_finish is not None:
            self._on_finish(completed)

    def _log(self, message: str) -> None:
        if self._debug:
            print(f"[SESSION] {message}")
