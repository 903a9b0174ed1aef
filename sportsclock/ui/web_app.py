"""NiceGUI web front end for the workout timer."""

from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from nicegui import ui

from sportsclock.core.scheduler import AsyncioTickScheduler
from sportsclock.core.settings import TimerSettings
from sportsclock.core.sound import TONES, SoundRequest
from sportsclock.core.stopwatch import format_time
from sportsclock.ui.controller import WorkoutController, WorkoutResult, session_record
from sportsclock.workout.library import PlanLibrary
from sportsclock.workout.parser import PlanParseError, load_plans
from sportsclock.workout.session_store import append_session, load_recent_sessions


@dataclass
class WebState:
    status: str = "Idle"


def _tone_script(request: SoundRequest) -> str:
    tones = [
        {
            "f": tone.frequency_hz,
            "ms": tone.duration_ms,
            "type": tone.waveform,
            "delay": tone.delay_ms,
        }
        for tone in TONES[request.cue]
    ]
    return (
        """
        (() => {
          const ctx = window.__scCtx || (window.__scCtx = new (window.AudioContext || window.webkitAudioContext)());
          if (ctx.state === 'suspended') ctx.resume();
          const volume = %s;
          for (const t of %s) {
            setTimeout(() => {
              const osc = ctx.createOscillator();
              const gain = ctx.createGain();
              osc.type = t.type;
              osc.frequency.value = t.f;
              gain.gain.setValueAtTime(volume, ctx.currentTime);
              gain.gain.exponentialRampToValueAtTime(0.0001, ctx.currentTime + t.ms / 1000);
              osc.connect(gain);
              gain.connect(ctx.destination);
              osc.start();
              osc.stop(ctx.currentTime + t.ms / 1000);
            }, t.delay);
          }
        })();
        """
        % (request.volume, json.dumps(tones))
    )


def _load_library(plan_files: list[Path]) -> tuple[PlanLibrary, list[str]]:
    library = PlanLibrary()
    errors: list[str] = []
    for file in plan_files:
        if file.is_dir():
            try:
                library.load_dir(file)
            except (OSError, PlanParseError) as exc:
                errors.append(f"{file}: {exc}")
            continue
        try:
            for plan in load_plans(file):
                library.add(plan)
        except (OSError, PlanParseError) as exc:
            errors.append(f"{file.name}: {exc}")
    return library, errors


def run_web_ui(
    *,
    plan_files: list[Path],
    settings: TimerSettings | None = None,
    host: str = "127.0.0.1",
    port: int = 8088,
    history_path: Path | None = None,
    record_history: bool = True,
) -> int:
    library, load_errors = _load_library(plan_files)
    state = WebState()
    pending_sounds: deque[SoundRequest] = deque(maxlen=8)

    def on_finish(result: WorkoutResult) -> None:
        verb = "completed" if result.completed else "stopped"
        state.status = f"Workout {verb} in {format_time(result.elapsed_sec * 1000)}"
        if record_history:
            append_session(session_record(result), path=history_path)
        refresh_history()

    controller = WorkoutController(
        library,
        settings,
        scheduler=AsyncioTickScheduler(),
        on_sound=pending_sounds.append,
        on_finish=on_finish,
    )

    ui.add_head_html(
        """
        <style>
          body { background: #000; color: #e5e7eb; font-family: Arial, "Segoe UI", sans-serif; }
          .sc-clock { font-size: 7rem; font-weight: 700; line-height: 1; }
          .sc-halfway { color: #ef4444; }
          .sc-rest { color: #38bdf8; }
        </style>
        """
    )

    with ui.column().classes("w-full items-center gap-2 p-4"):
        status_label = ui.label()
        step_label = ui.label().classes("text-4xl font-bold")
        clock_label = ui.label().classes("sc-clock")
        next_label = ui.label().classes("text-lg text-gray-400")
        footer_label = ui.label().classes("text-sm text-gray-400")

        with ui.row().classes("gap-2"):
            prev_btn = ui.button("Previous")
            pause_step_btn = ui.button("Pause step")
            restart_step_btn = ui.button("Restart step")
            done_btn = ui.button("Done")
            next_btn = ui.button("Next")
        with ui.row().classes("gap-2"):
            pause_btn = ui.button("Pause workout")
            restart_btn = ui.button("Restart workout")
            stop_btn = ui.button("Stop workout", color="negative")

        ui.separator()
        plan_select = ui.select(
            {plan.id: plan.name for plan in library.plans},
            multiple=True,
            label="Plans",
        ).classes("w-96")
        with ui.row().classes("gap-2"):
            start_btn = ui.button("Start workout", color="positive")
            interval_btn = ui.button("Start/Stop interval")
            reset_interval_btn = ui.button("Reset interval")

        ui.label("Recent sessions").classes("text-base font-medium")
        history = ui.table(
            columns=[
                {"name": "ended", "label": "Ended", "field": "ended"},
                {"name": "status", "label": "Status", "field": "status"},
                {"name": "workout", "label": "Workout", "field": "workout"},
                {"name": "duration", "label": "Duration", "field": "duration"},
            ],
            rows=[],
        ).classes("w-96")

    def refresh_history() -> None:
        rows: list[dict[str, str]] = []
        for item in load_recent_sessions(limit=12, path=history_path):
            rows.append(
                {
                    "ended": item.ended_at_utc.split("T")[0],
                    "status": "OK" if item.completed else "STOP",
                    "workout": item.workout_name,
                    "duration": format_time(item.elapsed_duration_sec * 1000),
                }
            )
        history.rows = rows
        history.update()

    for message in load_errors:
        ui.notify(message, color="negative")

    def refresh_ui() -> None:
        while pending_sounds:
            ui.run_javascript(_tone_script(pending_sounds.popleft()))

        progress = controller.progress()
        elapsed = format_time(controller.stopwatch.elapsed_ms)
        if progress is not None:
            step_label.text = progress.step_name
            if progress.is_rep_based:
                clock_label.text = f"{progress.reps} reps"
            else:
                clock_label.text = f"{int(progress.time_left_sec + 0.999)}"
            clock_label.classes(
                remove="sc-halfway sc-rest",
                add="sc-rest" if progress.step_kind == "rest" else "",
            )
            if progress.step_kind == "exercise" and controller.step_timer.is_past_halfway:
                clock_label.classes(add="sc-halfway")
            next_label.text = (
                f"Next up: {progress.next_exercise_name}" if progress.next_exercise_name else ""
            )
            flags = " (paused)" if progress.workout_paused else ""
            flags += " (step paused)" if progress.countdown_paused else ""
            status_label.text = (
                f"{controller.session_name} - step {progress.step_index}/{progress.step_total}{flags}"
            )
            footer_label.text = f"Workout time {elapsed}"
            pause_btn.text = "Resume workout" if progress.workout_paused else "Pause workout"
            pause_step_btn.text = "Resume step" if progress.countdown_paused else "Pause step"
        else:
            timer = controller.interval_timer
            step_label.text = "Rest" if timer.is_resting else ""
            clock_label.text = f"{int(timer.time_left + 0.999)}"
            clock_label.classes(remove="sc-halfway sc-rest")
            if timer.is_past_halfway:
                clock_label.classes(add="sc-halfway")
            next_label.text = ""
            status_label.text = state.status
            footer_label.text = f"Cycles {timer.cycle_count} | {elapsed}"

        active = controller.workout_active
        for button in (prev_btn, next_btn, pause_btn, pause_step_btn, restart_step_btn, restart_btn, stop_btn):
            button.set_enabled(active)
        done_btn.set_enabled(progress is not None and progress.is_rep_based)
        start_btn.set_enabled(not active)
        interval_btn.set_enabled(not active)

    def on_start() -> None:
        plan_ids = list(plan_select.value or [])
        if not controller.start_workout(plan_ids):
            ui.notify("Selected plans have no steps", color="negative")
            return
        state.status = "Workout started"
        refresh_ui()

    def on_pause() -> None:
        if controller.sequencer.is_workout_paused:
            controller.resume_workout()
        else:
            controller.pause_workout()
        refresh_ui()

    def on_pause_step() -> None:
        if controller.sequencer.is_countdown_paused:
            controller.resume_step_countdown()
        else:
            controller.pause_step_countdown()
        refresh_ui()

    def action(callback: Callable[[], None]) -> Callable[[], None]:
        def _run() -> None:
            callback()
            refresh_ui()

        return _run

    start_btn.on_click(on_start)
    stop_btn.on_click(action(controller.stop_workout))
    prev_btn.on_click(action(controller.previous_step))
    next_btn.on_click(action(controller.next_step))
    done_btn.on_click(action(controller.complete_rep_step))
    pause_btn.on_click(on_pause)
    pause_step_btn.on_click(on_pause_step)
    restart_step_btn.on_click(action(controller.restart_current_step))
    restart_btn.on_click(action(controller.restart_workout))
    interval_btn.on_click(action(controller.toggle_interval))
    reset_interval_btn.on_click(action(controller.reset_interval))

    refresh_history()
    refresh_ui()
    ui.timer(0.1, refresh_ui)
    ui.run(host=host, port=port, reload=False, title="sportsclock")
    return 0
