"""Drive a workout session to completion and publish progress snapshots."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Sequence

from sportsclock.core.scheduler import ManualClock, ManualTickScheduler, run_for
from sportsclock.workout.model import Step

if TYPE_CHECKING:
    from sportsclock.ui.controller import WorkoutController, WorkoutProgress


ProgressCallback = Callable[["WorkoutProgress"], None]
CountdownCallback = Callable[[int], None]
RepWaiter = Callable[[Step], Awaitable[None]]


class SessionRunner:
    def __init__(self, controller: WorkoutController, report_interval_sec: float = 1.0) -> None:
        self._controller = controller
        self._report_interval_sec = report_interval_sec
        self._task: Optional[asyncio.Task[bool]] = None
        self._stop_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(
        self,
        plan_ids: Sequence[str],
        on_progress: ProgressCallback,
        *,
        start_delay_sec: int = 0,
        on_countdown: CountdownCallback | None = None,
        wait_for_reps: RepWaiter | None = None,
    ) -> None:
        if self.is_running:
            raise RuntimeError("Workout already running")

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            self.run(
                plan_ids,
                on_progress,
                start_delay_sec=start_delay_sec,
                on_countdown=on_countdown,
                wait_for_reps=wait_for_reps,
            )
        )

    async def stop(self) -> None:
        if not self.is_running:
            return

        self._stop_event.set()
        assert self._task is not None
        await self._task
        self._task = None

    async def run(
        self,
        plan_ids: Sequence[str],
        on_progress: ProgressCallback,
        *,
        start_delay_sec: int = 0,
        on_countdown: CountdownCallback | None = None,
        wait_for_reps: RepWaiter | None = None,
    ) -> bool:
        """Run a session; returns True when it completed rather than stopped."""
        for remaining in range(start_delay_sec, 0, -1):
            if self._stop_event.is_set():
                return False
            if on_countdown is not None:
                on_countdown(remaining)
            await asyncio.sleep(1.0)

        controller = self._controller
        if not controller.start_workout(plan_ids):
            return False

        try:
            while controller.workout_active and not self._stop_event.is_set():
                progress = controller.progress()
                if progress is not None:
                    on_progress(progress)

                step = controller.current_step
                if step is not None and step.is_rep_based and wait_for_reps is not None:
                    await self._wait_rep_or_stop(wait_for_reps(step))
                    if not self._stop_event.is_set():
                        controller.complete_rep_step()
                    continue

                await asyncio.sleep(self._report_interval_sec)
        finally:
            if controller.workout_active:
                controller.stop_workout()

        result = controller.last_result
        return result is not None and result.completed

    async def _wait_rep_or_stop(self, rep_done: Awaitable[None]) -> None:
        rep_task = asyncio.ensure_future(rep_done)
        stop_task = asyncio.ensure_future(self._stop_event.wait())
        _, pending = await asyncio.wait(
            {rep_task, stop_task}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()


def run_simulated(
    controller: WorkoutController,
    clock: ManualClock,
    scheduler: ManualTickScheduler,
    plan_ids: Sequence[str],
    on_progress: ProgressCallback,
    *,
    frame_sec: float = 0.1,
    max_sec: float = 6 * 3600,
) -> bool:
    """Fast-forward a session on a manual clock; rep steps complete at once."""
    if not controller.start_workout(plan_ids):
        return False

    simulated = 0.0
    while controller.workout_active and simulated < max_sec:
        progress = controller.progress()
        if progress is not None:
            on_progress(progress)
        step = controller.current_step
        if step is not None and step.is_rep_based:
            controller.complete_rep_step()
            continue
        run_for(clock, scheduler, 1.0, frame_sec=frame_sec)
        simulated += 1.0

    if controller.workout_active:
        controller.stop_workout()
    result = controller.last_result
    return result is not None and result.completed
