from __future__ import annotations

import pytest

from sportsclock.core.scheduler import ManualClock, ManualTickScheduler, run_for
from sportsclock.core.settings import TimerSettings
from sportsclock.core.sound import SoundRequest
from sportsclock.ui.controller import WorkoutController, WorkoutResult, session_record
from sportsclock.workout.library import PlanLibrary
from sportsclock.workout.model import Plan, Step


PLAN = Plan(
    id="p1",
    name="Quick",
    steps=(
        Step(id="jj", name="Jumping Jacks", duration_seconds=3),
        Step(id="r1", name="Rest", kind="rest", duration_seconds=2),
        Step(id="pu", name="Push-ups", is_rep_based=True, reps=10),
        Step(id="plank", name="Plank", duration_seconds=4),
    ),
)


def _make(settings: TimerSettings | None = None):
    clock = ManualClock()
    scheduler = ManualTickScheduler()
    sounds: list[str] = []
    results: list[WorkoutResult] = []

    def on_sound(request: SoundRequest) -> None:
        sounds.append(request.cue)

    controller = WorkoutController(
        PlanLibrary([PLAN]),
        settings or TimerSettings(),
        scheduler=scheduler,
        clock=clock,
        on_sound=on_sound,
        on_finish=results.append,
    )
    return controller, clock, scheduler, sounds, results


def test_timed_steps_advance_on_their_own_until_rep_step() -> None:
    controller, clock, scheduler, _, _ = _make()
    assert controller.start_workout(["p1"])
    assert controller.step_timer.is_running

    run_for(clock, scheduler, 3.1)
    progress = controller.progress()
    assert progress is not None
    assert progress.step_name == "Rest"
    assert progress.step_kind == "rest"

    run_for(clock, scheduler, 2.1)
    progress = controller.progress()
    assert progress is not None
    assert progress.is_rep_based
    assert progress.time_left_sec == 0
    assert controller.step_timer.phase == "stopped"

    run_for(clock, scheduler, 30.0)
    assert controller.current_step is not None
    assert controller.current_step.id == "pu"


def test_workout_completes_after_last_step() -> None:
    controller, clock, scheduler, _, results = _make()
    controller.start_workout(["p1"])
    run_for(clock, scheduler, 5.2)

    controller.complete_rep_step()
    run_for(clock, scheduler, 4.1)

    assert controller.workout_active is False
    assert len(results) == 1
    assert results[0].completed is True
    assert results[0].name == "Quick"
    assert results[0].elapsed_sec == pytest.approx(9.3, abs=0.2)
    assert scheduler.pending == {}


def test_stop_workout_reports_aborted() -> None:
    controller, clock, scheduler, _, results = _make()
    controller.start_workout(["p1"])
    run_for(clock, scheduler, 1.0)

    controller.stop_workout()

    assert results and results[0].completed is False
    assert controller.progress() is None
    assert scheduler.pending == {}


def test_pause_workout_freezes_step_time_and_stopwatch() -> None:
    controller, clock, scheduler, _, _ = _make()
    controller.start_workout(["p1"])
    run_for(clock, scheduler, 1.0)

    controller.pause_workout()
    left = controller.step_timer.time_left_ms
    elapsed = controller.stopwatch.elapsed_sec
    run_for(clock, scheduler, 20.0)

    assert controller.step_timer.time_left_ms == left
    assert controller.stopwatch.elapsed_sec == elapsed
    assert controller.current_step is not None and controller.current_step.id == "jj"

    controller.resume_workout()
    run_for(clock, scheduler, 1.0)
    assert controller.step_timer.time_left_ms == pytest.approx(left - 1_000, abs=60)


def test_countdown_pause_keeps_stopwatch_running() -> None:
    controller, clock, scheduler, _, _ = _make()
    controller.start_workout(["p1"])
    controller.pause_step_countdown()

    run_for(clock, scheduler, 10.0)

    assert controller.current_step is not None and controller.current_step.id == "jj"
    assert controller.stopwatch.elapsed_sec == pytest.approx(10.0, abs=0.01)


def test_step_change_while_paused_waits_for_resume() -> None:
    controller, clock, scheduler, sounds, _ = _make()
    controller.start_workout(["p1"])
    controller.pause_workout()
    sounds.clear()

    controller.next_step()

    assert controller.step_timer.phase == "stopped"
    assert controller.step_timer.time_left_ms == 2_000
    assert sounds == []

    controller.resume_workout()
    assert controller.step_timer.is_running
    assert sounds == ["restart"]


def test_restart_current_step_rewinds_countdown() -> None:
    controller, clock, scheduler, _, _ = _make()
    controller.start_workout(["p1"])
    run_for(clock, scheduler, 2.0)

    controller.restart_current_step()

    assert controller.step_timer.time_left_ms == 3_000
    assert controller.current_step is not None and controller.current_step.id == "jj"


def test_restart_workout_returns_to_first_step() -> None:
    controller, clock, scheduler, _, _ = _make()
    controller.start_workout(["p1"])
    run_for(clock, scheduler, 3.5)
    controller.pause_workout()

    controller.restart_workout()

    assert controller.current_step is not None and controller.current_step.id == "jj"
    assert controller.step_timer.is_running
    assert controller.step_timer.time_left_ms == 3_000
    assert controller.stopwatch.elapsed_sec == 0


def test_rest_steps_do_not_play_halfway_cue() -> None:
    controller, clock, scheduler, sounds, _ = _make()
    controller.start_workout(["p1"])
    run_for(clock, scheduler, 3.1)
    sounds.clear()

    run_for(clock, scheduler, 1.8)

    assert controller.current_step is not None and controller.current_step.is_rest
    assert "halfway" not in sounds


def test_each_timed_step_start_plays_restart_cue() -> None:
    controller, clock, scheduler, sounds, _ = _make()
    controller.start_workout(["p1"])
    run_for(clock, scheduler, 3.1)

    assert sounds.count("restart") == 2
    assert sounds.count("end") == 1
    assert sounds.count("halfway") == 1


def test_start_with_no_steps_keeps_controller_idle() -> None:
    controller, _, scheduler, _, results = _make()

    assert controller.start_workout(["missing"]) is False
    assert controller.workout_active is False
    assert results == []
    assert scheduler.pending == {}


def test_interval_mode_is_disabled_during_workout() -> None:
    controller, clock, scheduler, _, _ = _make(TimerSettings(countdown_duration=10, countdown_rest_duration=2))
    controller.toggle_interval()
    run_for(clock, scheduler, 11.0)
    assert controller.interval_timer.is_resting
    assert controller.interval_timer.cycle_count == 1

    controller.start_workout(["p1"])
    assert controller.interval_timer.phase == "stopped"

    controller.toggle_interval()
    assert controller.interval_timer.phase == "stopped"


def test_update_settings_reloads_interval_duration() -> None:
    controller, clock, scheduler, _, _ = _make()

    controller.update_settings(TimerSettings(countdown_duration=25, countdown_rest_duration=0))

    assert controller.interval_timer.time_left_ms == 25_000
    assert controller.interval_timer.rest_duration_ms == 0


def test_progress_reports_next_exercise_and_set_names() -> None:
    controller, _, _, _, _ = _make()
    controller.start_workout(["p1"])

    progress = controller.progress()

    assert progress is not None
    assert progress.step_index == 1
    assert progress.step_total == 4
    assert progress.next_exercise_name == "Push-ups"


def test_finished_session_converts_to_history_record() -> None:
    controller, clock, scheduler, _, results = _make()
    controller.start_workout(["p1"])
    run_for(clock, scheduler, 5.2)
    controller.complete_rep_step()
    run_for(clock, scheduler, 4.1)

    result = results[0]
    record = session_record(result, ended_at_utc="2026-03-01T10:00:09+00:00")

    assert result.plan_ids == ("p1",)
    assert result.planned_duration_sec == 9
    assert result.started_at_utc
    assert record.workout_name == "Quick"
    assert record.plan_ids == ("p1",)
    assert record.completed is True
    assert record.planned_duration_sec == 9
    assert record.elapsed_duration_sec == 9
    assert record.ended_at_utc == "2026-03-01T10:00:09+00:00"
