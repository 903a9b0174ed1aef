from __future__ import annotations

from sportsclock.workout.model import SetInfo, Step
from sportsclock.workout.sequencer import SessionSequencer


def _ex(step_id: str, name: str, duration: float = 30, **kwargs) -> Step:
    return Step(id=step_id, name=name, kind="exercise", duration_seconds=duration, **kwargs)


def _rest(step_id: str, duration: float = 15) -> Step:
    return Step(id=step_id, name="Rest", kind="rest", duration_seconds=duration)


PLANS: dict[str, list[Step]] = {
    "sets": [
        _ex("a1", "A", set_info=SetInfo(1, 2)),
        _rest("r1"),
        _ex("a2", "A", set_info=SetInfo(2, 2)),
    ],
    "reps": [
        Step(id="p1", name="Push-ups", is_rep_based=True, reps=12),
        _rest("r2"),
        _ex("plank", "Plank"),
    ],
    "empty": [],
}


def _make(finishes: list[bool] | None = None) -> SessionSequencer:
    return SessionSequencer(
        lambda plan_id: PLANS.get(plan_id, []),
        on_finish=finishes.append if finishes is not None else None,
    )


def test_start_workout_merges_plans_in_order() -> None:
    seq = _make()

    assert seq.start_workout(["sets", "reps"]) is True

    assert seq.session_step_count == 6
    assert seq.current_index == 0
    assert seq.current_step is not None and seq.current_step.id == "a1"
    assert seq.session is not None
    assert seq.session.source_plan_ids == ("sets", "reps")
    assert seq.restart_epoch == 0


def test_empty_resolution_creates_no_session() -> None:
    seq = _make()

    assert seq.start_workout([]) is False
    assert seq.start_workout(["empty", "missing"]) is False

    assert seq.is_active is False
    assert seq.current_step is None
    assert seq.current_index is None
    assert seq.session_step_count == 0


def test_next_step_completes_after_last_step() -> None:
    finishes: list[bool] = []
    seq = _make(finishes)
    seq.start_workout(["sets"])

    seq.next_step()
    seq.next_step()
    assert seq.is_active
    assert seq.current_index == 2

    seq.next_step()
    assert seq.is_active is False
    assert finishes == [True]


def test_stop_workout_reports_aborted_and_clears_flags() -> None:
    finishes: list[bool] = []
    seq = _make(finishes)
    seq.start_workout(["sets"])
    seq.pause_workout()
    seq.pause_step_countdown()

    seq.stop_workout()
    seq.stop_workout()

    assert finishes == [False]
    assert seq.is_workout_paused is False
    assert seq.is_countdown_paused is False


def test_previous_step_is_floored_at_zero() -> None:
    seq = _make()
    seq.start_workout(["sets"])

    seq.previous_step()
    assert seq.current_index == 0

    seq.next_step()
    seq.previous_step()
    assert seq.current_index == 0


def test_navigation_clears_countdown_pause_only() -> None:
    seq = _make()
    seq.start_workout(["sets"])
    seq.pause_workout()
    seq.pause_step_countdown()

    seq.next_step()
    assert seq.is_countdown_paused is False
    assert seq.is_workout_paused is True

    seq.pause_step_countdown()
    seq.previous_step()
    assert seq.is_countdown_paused is False


def test_pause_flags_are_independent_and_or_gates_timer() -> None:
    seq = _make()
    seq.start_workout(["sets"])
    assert seq.should_timer_run is True

    seq.pause_workout()
    assert seq.should_timer_run is False
    seq.pause_step_countdown()
    seq.resume_workout()
    assert seq.should_timer_run is False

    seq.resume_step_countdown()
    assert seq.should_timer_run is True


def test_pause_without_session_is_noop() -> None:
    seq = _make()

    seq.pause_workout()
    seq.pause_step_countdown()
    seq.restart_current_step()
    seq.restart_workout()
    seq.next_step()
    seq.previous_step()

    assert seq.is_workout_paused is False
    assert seq.is_countdown_paused is False
    assert seq.is_active is False


def test_rep_based_step_never_runs_timer() -> None:
    seq = _make()
    seq.start_workout(["reps"])

    assert seq.current_step is not None and seq.current_step.is_rep_based
    assert seq.should_timer_run is False


def test_restart_current_step_bumps_epoch_in_place() -> None:
    seq = _make()
    seq.start_workout(["sets"])
    seq.next_step()
    key_before = seq.step_key
    seq.pause_step_countdown()

    seq.restart_current_step()

    assert seq.current_index == 1
    assert seq.restart_epoch == 1
    assert seq.step_key != key_before
    assert seq.is_countdown_paused is False


def test_restart_workout_rewinds_and_clears_both_flags() -> None:
    seq = _make()
    seq.start_workout(["sets"])
    seq.next_step()
    seq.next_step()
    seq.pause_workout()
    seq.pause_step_countdown()

    seq.restart_workout()

    assert seq.current_index == 0
    assert seq.restart_epoch == 1
    assert seq.is_workout_paused is False
    assert seq.is_countdown_paused is False


def test_start_workout_resets_previous_session_state() -> None:
    seq = _make()
    seq.start_workout(["sets"])
    seq.next_step()
    seq.restart_current_step()
    seq.pause_workout()

    seq.start_workout(["reps"])

    assert seq.current_index == 0
    assert seq.restart_epoch == 0
    assert seq.is_workout_paused is False


def test_next_upcoming_step_skips_rests() -> None:
    seq = _make()
    seq.start_workout(["reps"])

    upcoming = seq.next_upcoming_step
    assert upcoming is not None and upcoming.id == "plank"

    seq.next_step()
    seq.next_step()
    assert seq.next_upcoming_step is None
