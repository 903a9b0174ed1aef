"""Terminal CLI entrypoint for the sportsclock workout timer."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
from pathlib import Path

from sportsclock.core.scheduler import AsyncioTickScheduler, ManualClock, ManualTickScheduler
from sportsclock.core.settings import SettingsError, TimerSettings, load_settings
from sportsclock.core.sound import SoundRequest
from sportsclock.core.stopwatch import format_time
from sportsclock.ui.controller import (
    FinishCallback,
    WorkoutController,
    WorkoutProgress,
    WorkoutResult,
    session_record,
)
from sportsclock.workout.library import PlanLibrary, WarmupRoutine
from sportsclock.workout.model import Step
from sportsclock.workout.parser import PlanParseError, load_plans
from sportsclock.workout.runner import SessionRunner, run_simulated
from sportsclock.workout.session_store import append_session, load_recent_sessions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="sportsclock workout timer")
    parser.add_argument(
        "--plan",
        action="append",
        default=[],
        type=Path,
        help="Plan file (.json/.csv); repeat to run several plans back to back",
    )
    parser.add_argument(
        "--circuit",
        action="store_true",
        help="Run a single plan in circuit order regardless of its execution mode",
    )
    parser.add_argument(
        "--warmup",
        type=Path,
        default=None,
        help="Plan file whose steps are prepended as a warm-up",
    )
    parser.add_argument(
        "--interval",
        action="store_true",
        help="Run the free interval countdown (no plan) until Ctrl+C",
    )
    parser.add_argument("--duration", type=int, default=None, help="Interval countdown seconds")
    parser.add_argument("--rest", type=int, default=None, help="Interval rest seconds")
    parser.add_argument(
        "--start-delay",
        type=int,
        default=None,
        help="Countdown in seconds before the first step starts",
    )
    parser.add_argument("--mute", action="store_true", help="Do not print sound cues")
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Settings JSON (default: ~/.sportsclock/settings.json)",
    )
    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Fast-forward the workout on a simulated clock (rep steps auto-complete)",
    )
    parser.add_argument(
        "--history",
        type=Path,
        default=None,
        help="Session history file (default: ~/.sportsclock/sessions.jsonl)",
    )
    parser.add_argument(
        "--no-history",
        action="store_true",
        help="Do not record this session in the history",
    )
    parser.add_argument(
        "--show-history",
        action="store_true",
        help="Print recent sessions and exit",
    )
    parser.add_argument(
        "--ui-web",
        action="store_true",
        help="Launch web UI (NiceGUI)",
    )
    parser.add_argument("--web-host", default="127.0.0.1", help="Host bind for --ui-web")
    parser.add_argument("--web-port", type=int, default=8088, help="Port for --ui-web")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print timer phase changes and session transitions",
    )
    return parser


def _apply_overrides(settings: TimerSettings, args: argparse.Namespace) -> TimerSettings:
    if args.duration is not None:
        settings = replace(settings, countdown_duration=max(0, args.duration))
    if args.rest is not None:
        settings = replace(settings, countdown_rest_duration=max(0, args.rest))
    if args.start_delay is not None:
        settings = replace(settings, pre_workout_countdown_duration=max(0, args.start_delay))
    if args.mute:
        settings = replace(settings, is_muted=True)
    if args.warmup is not None:
        settings = replace(settings, is_warmup_enabled=True)
    return settings


def build_library(
    plan_files: list[Path],
    *,
    force_circuit: bool = False,
    warmup_file: Path | None = None,
    settings: TimerSettings | None = None,
    debug: bool = False,
) -> tuple[PlanLibrary, list[str]]:
    library = PlanLibrary(debug=debug)
    plan_ids: list[str] = []
    for file in plan_files:
        for plan in load_plans(file):
            if force_circuit:
                plan = replace(plan, execution_mode="circuit")
            library.add(plan)
            plan_ids.append(plan.id)

    if warmup_file is not None:
        warmup_steps: list[Step] = []
        for plan in load_plans(warmup_file):
            warmup_steps.extend(plan.steps)
        rest_after = (settings or TimerSettings()).rest_after_warmup_duration
        library.warmup = WarmupRoutine(steps=tuple(warmup_steps), rest_after_sec=rest_after)
    return library, plan_ids


def _print_sound(request: SoundRequest) -> None:
    print(f"  ♪ {request.cue} (vol {request.volume:.2f})")


def _print_progress(progress: WorkoutProgress) -> None:
    if progress.is_rep_based:
        detail = f"{progress.reps} reps - press Enter when done"
    else:
        detail = f"{progress.time_left_sec:5.1f}s left"
    flags = ""
    if progress.workout_paused:
        flags = " [paused]"
    elif progress.countdown_paused:
        flags = " [countdown paused]"
    upcoming = f" | next: {progress.next_exercise_name}" if progress.next_exercise_name else ""
    print(
        f"[{progress.step_index}/{progress.step_total}] {progress.step_name}: {detail}"
        f" | elapsed {format_time(progress.elapsed_sec * 1000)}{upcoming}{flags}"
    )


def _print_result(result: WorkoutResult) -> None:
    status = "completed" if result.completed else "stopped"
    print(f"Workout '{result.name}' {status} in {format_time(result.elapsed_sec * 1000)}")


def _finish_handler(history_path: Path | None, record_history: bool) -> FinishCallback:
    def on_finish(result: WorkoutResult) -> None:
        _print_result(result)
        if record_history:
            append_session(session_record(result), path=history_path)

    return on_finish


def show_history(history_path: Path | None, limit: int = 20) -> int:
    records = load_recent_sessions(limit=limit, path=history_path)
    if not records:
        print("No sessions recorded yet")
        return 0
    for record in records:
        status = "OK  " if record.completed else "STOP"
        print(
            f"{record.ended_at_utc.split('T')[0]}  {status}  "
            f"{format_time(record.elapsed_duration_sec * 1000)}  {record.workout_name}"
        )
    return 0


async def run_plans(
    library: PlanLibrary,
    plan_ids: list[str],
    settings: TimerSettings,
    debug: bool,
    *,
    history_path: Path | None = None,
    record_history: bool = True,
) -> int:
    controller = WorkoutController(
        library,
        settings,
        scheduler=AsyncioTickScheduler(),
        on_sound=None if settings.is_muted else _print_sound,
        on_finish=_finish_handler(history_path, record_history),
        debug=debug,
    )
    runner = SessionRunner(controller)

    async def wait_for_enter(step: Step) -> None:
        await asyncio.to_thread(input)

    completed = await runner.run(
        plan_ids,
        _print_progress,
        start_delay_sec=settings.pre_workout_countdown_duration,
        on_countdown=lambda remaining: print(f"Starting in {remaining}s - get ready"),
        wait_for_reps=wait_for_enter,
    )
    return 0 if completed else 1


def simulate_plans(library: PlanLibrary, plan_ids: list[str], settings: TimerSettings, debug: bool) -> int:
    clock = ManualClock()
    scheduler = ManualTickScheduler()
    controller = WorkoutController(
        library,
        settings,
        scheduler=scheduler,
        clock=clock,
        on_sound=None if settings.is_muted else _print_sound,
        on_finish=_print_result,
        debug=debug,
    )
    completed = run_simulated(controller, clock, scheduler, plan_ids, _print_progress)
    return 0 if completed else 1


async def run_interval(settings: TimerSettings, debug: bool) -> int:
    controller = WorkoutController(
        PlanLibrary(),
        settings,
        scheduler=AsyncioTickScheduler(),
        on_sound=None if settings.is_muted else _print_sound,
        debug=debug,
    )
    timer = controller.interval_timer
    print(
        f"Interval {settings.countdown_duration}s / rest {settings.countdown_rest_duration}s"
        " - Ctrl+C to stop"
    )
    controller.reset_interval()
    try:
        while True:
            state = "REST" if timer.is_resting else f"{timer.time_left:5.1f}s"
            print(f"Cycle {timer.cycle_count + 1}: {state}")
            await asyncio.sleep(1.0)
    finally:
        controller.toggle_interval()
        print(f"Stopped after {timer.cycle_count} cycles")


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    try:
        settings = _apply_overrides(load_settings(args.settings), args)
    except SettingsError as exc:
        print(f"Invalid settings: {exc}")
        return 1

    if args.show_history:
        return show_history(args.history)

    if args.ui_web:
        from sportsclock.ui.web_app import run_web_ui

        return run_web_ui(
            plan_files=args.plan,
            settings=settings,
            host=args.web_host,
            port=args.web_port,
            history_path=args.history,
            record_history=not args.no_history,
        )

    if args.interval:
        try:
            return asyncio.run(run_interval(settings, args.debug))
        except KeyboardInterrupt:
            return 0

    if not args.plan:
        parser.print_help()
        return 1

    try:
        library, plan_ids = build_library(
            args.plan,
            force_circuit=args.circuit,
            warmup_file=args.warmup,
            settings=settings,
            debug=args.debug,
        )
    except (OSError, PlanParseError) as exc:
        print(f"Unable to load plan: {exc}")
        return 1

    if args.simulate:
        return simulate_plans(library, plan_ids, settings, args.debug)
    try:
        return asyncio.run(
            run_plans(
                library,
                plan_ids,
                settings,
                args.debug,
                history_path=args.history,
                record_history=not args.no_history,
            )
        )
    except KeyboardInterrupt:
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
