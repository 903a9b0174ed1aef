"""Controller shared by the terminal runner and the web UI.

Owns one SessionSequencer, a workout-mode IntervalTimer that follows the
current step, a free-running IntervalTimer for plain interval training and a
Stopwatch for the workout duration.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Sequence

from sportsclock.core.interval_timer import IntervalTimer
from sportsclock.core.scheduler import Clock, TickScheduler, monotonic_clock
from sportsclock.core.settings import TimerSettings
from sportsclock.core.sound import SoundCallback, SoundPolicy
from sportsclock.core.stopwatch import Stopwatch
from sportsclock.workout.library import PlanLibrary
from sportsclock.workout.model import Step, StepKind
from sportsclock.workout.sequencer import SessionSequencer, StepKey
from sportsclock.workout.session_store import SessionRecord, now_utc_iso
from sportsclock.workout.set_grouping import step_display_name


@dataclass(frozen=True)
class WorkoutProgress:
    step_index: int
    step_total: int
    step_name: str
    step_kind: StepKind
    is_rep_based: bool
    is_warmup: bool
    reps: int
    step_duration_sec: float
    time_left_sec: float
    next_exercise_name: str | None
    elapsed_sec: float
    workout_paused: bool
    countdown_paused: bool


@dataclass(frozen=True)
class WorkoutResult:
    name: str
    completed: bool
    elapsed_sec: float
    plan_ids: tuple[str, ...] = ()
    planned_duration_sec: float = 0
    started_at_utc: str = ""


FinishCallback = Callable[[WorkoutResult], None]


class WorkoutController:
    def __init__(
        self,
        library: PlanLibrary,
        settings: TimerSettings | None = None,
        *,
        scheduler: TickScheduler,
        clock: Clock = monotonic_clock,
        on_sound: SoundCallback | None = None,
        on_finish: FinishCallback | None = None,
        debug: bool = False,
    ) -> None:
        self.library = library
        self.settings = settings or TimerSettings()
        self._on_finish = on_finish
        self._applied_key: StepKey | None = None
        self._session_name = ""
        self._started_at_utc = ""
        self._plan_ids: tuple[str, ...] = ()
        self._planned_duration_sec = 0.0
        self.last_result: WorkoutResult | None = None

        self.sequencer = SessionSequencer(
            library.resolve_steps,
            on_finish=self._on_session_finish,
            debug=debug,
        )
        self.step_timer = IntervalTimer(
            0,
            0,
            self.settings.sound_policy(),
            scheduler=scheduler,
            clock=clock,
            on_sound=on_sound,
            on_cycle_complete=self._on_step_elapsed,
            debug=debug,
        )
        self.interval_timer = IntervalTimer(
            self.settings.countdown_duration,
            self.settings.countdown_rest_duration,
            self.settings.sound_policy(),
            scheduler=scheduler,
            clock=clock,
            on_sound=on_sound,
            debug=debug,
        )
        self.stopwatch = Stopwatch(clock)

    @property
    def workout_active(self) -> bool:
        return self.sequencer.is_active

    @property
    def session_name(self) -> str:
        return self._session_name

    @property
    def current_step(self) -> Step | None:
        return self.sequencer.current_step

    # -- workout commands ----------------------------------------------------

    def start_workout(self, plan_ids: Sequence[str]) -> bool:
        self.library.select(plan_ids)
        if not self.sequencer.start_workout(plan_ids):
            return False
        self._session_name = self.library.session_name(plan_ids)
        self._started_at_utc = now_utc_iso()
        self._plan_ids = tuple(plan_ids)
        self._planned_duration_sec = _planned_seconds(self.sequencer)
        self.last_result = None
        self.interval_timer.stop()
        self.stopwatch.reset()
        self._applied_key = None
        self._sync()
        return True

    def stop_workout(self) -> None:
        self.sequencer.stop_workout()
        self._sync()

    def next_step(self) -> None:
        self.sequencer.next_step()
        self._sync()

    def previous_step(self) -> None:
        self.sequencer.previous_step()
        self._sync()

    def pause_workout(self) -> None:
        self.sequencer.pause_workout()
        self._sync()

    def resume_workout(self) -> None:
        self.sequencer.resume_workout()
        self._sync()

    def pause_step_countdown(self) -> None:
        self.sequencer.pause_step_countdown()
        self._sync()

    def resume_step_countdown(self) -> None:
        self.sequencer.resume_step_countdown()
        self._sync()

    def restart_current_step(self) -> None:
        self.sequencer.restart_current_step()
        self._sync()

    def restart_workout(self) -> None:
        self.sequencer.restart_workout()
        self.stopwatch.reset()
        self._sync()

    def complete_rep_step(self) -> None:
        step = self.sequencer.current_step
        if step is not None and step.is_rep_based:
            self.next_step()

    # -- free-running interval mode -------------------------------------------

    def toggle_interval(self) -> None:
        if self.workout_active:
            return
        if self.interval_timer.is_active:
            self.interval_timer.stop()
            self.stopwatch.stop()
        else:
            self.interval_timer.start()
            self.stopwatch.start()

    def reset_interval(self) -> None:
        if self.workout_active:
            self.restart_current_step()
            return
        self.stopwatch.reset()
        self.interval_timer.reset()
        self.stopwatch.start()

    def update_settings(self, settings: TimerSettings) -> None:
        previous = self.settings
        self.settings = settings
        self.interval_timer.set_sound_policy(settings.sound_policy())
        self.interval_timer.set_rest_duration(settings.countdown_rest_duration)
        if settings.countdown_duration != previous.countdown_duration:
            self.interval_timer.set_duration(settings.countdown_duration)
        step = self.sequencer.current_step
        if step is not None:
            self.step_timer.set_sound_policy(self._policy_for(step))

    # -- snapshots -----------------------------------------------------------

    def progress(self) -> WorkoutProgress | None:
        step = self.sequencer.current_step
        index = self.sequencer.current_index
        if step is None or index is None:
            return None
        upcoming = self.sequencer.next_upcoming_step
        return WorkoutProgress(
            step_index=index + 1,
            step_total=self.sequencer.session_step_count,
            step_name=step_display_name(step),
            step_kind=step.kind,
            is_rep_based=step.is_rep_based,
            is_warmup=step.is_warmup,
            reps=step.reps,
            step_duration_sec=0 if step.is_rep_based else step.duration_seconds,
            time_left_sec=0 if step.is_rep_based else self.step_timer.time_left,
            next_exercise_name=step_display_name(upcoming) if upcoming else None,
            elapsed_sec=self.stopwatch.elapsed_sec,
            workout_paused=self.sequencer.is_workout_paused,
            countdown_paused=self.sequencer.is_countdown_paused,
        )

    # -- internals -----------------------------------------------------------

    def _policy_for(self, step: Step) -> SoundPolicy:
        policy = self.settings.sound_policy()
        if step.is_rest:
            return replace(policy, play_halfway=False)
        return policy

    def _sync(self) -> None:
        """Bring the step timer and stopwatch in line with the sequencer."""
        seq = self.sequencer
        step = seq.current_step
        if step is None:
            self._applied_key = None
            self.step_timer.stop()
            self.stopwatch.stop()
            return

        key = seq.step_key
        if key != self._applied_key:
            self._applied_key = key
            self.step_timer.set_sound_policy(self._policy_for(step))
            if step.is_rep_based:
                self.step_timer.set_duration(0, keep_active=False)
            else:
                self.step_timer.set_duration(
                    step.duration_seconds,
                    keep_active=seq.should_timer_run,
                )

        if seq.should_timer_run:
            self.step_timer.start()
        else:
            self.step_timer.stop()

        if seq.is_workout_paused:
            self.stopwatch.stop()
        else:
            self.stopwatch.start()

    def _on_step_elapsed(self) -> None:
        self.sequencer.next_step()
        self._sync()

    def _on_session_finish(self, completed: bool) -> None:
        self.stopwatch.stop()
        result = WorkoutResult(
            name=self._session_name,
            completed=completed,
            elapsed_sec=self.stopwatch.elapsed_sec,
            plan_ids=self._plan_ids,
            planned_duration_sec=self._planned_duration_sec,
            started_at_utc=self._started_at_utc,
        )
        self.last_result = result
        if self._on_finish is not None:
            self._on_finish(result)


def _planned_seconds(sequencer: SessionSequencer) -> float:
    session = sequencer.session
    if session is None:
        return 0.0
    return sum(step.duration_seconds for step in session.steps if step.is_timed)


def session_record(result: WorkoutResult, ended_at_utc: str | None = None) -> SessionRecord:
    ended = ended_at_utc or now_utc_iso()
    return SessionRecord(
        started_at_utc=result.started_at_utc or ended,
        ended_at_utc=ended,
        workout_name=result.name,
        plan_ids=result.plan_ids,
        completed=result.completed,
        planned_duration_sec=int(round(result.planned_duration_sec)),
        elapsed_duration_sec=int(round(result.elapsed_sec)),
    )
