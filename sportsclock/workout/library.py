"""In-memory plan library that resolves plan ids to executable step lists."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Sequence

from sportsclock.workout.circuit import generate_circuit_steps
from sportsclock.workout.model import Plan, Step
from sportsclock.workout.parser import load_plans


WARMUP_REST_STEP_ID = "warmup-rest"


@dataclass(frozen=True)
class WarmupRoutine:
    steps: tuple[Step, ...] = ()
    rest_after_sec: float = 15

    def enabled_steps(self) -> list[Step]:
        return [replace(step, is_warmup=True) for step in self.steps if step.is_enabled]


class PlanLibrary:
    def __init__(self, plans: Iterable[Plan] = (), debug: bool = False) -> None:
        self._plans: dict[str, Plan] = {}
        self._debug = debug
        self._selection: tuple[str, ...] = ()
        self._warmup_pending = False
        self.warmup: WarmupRoutine | None = None
        for plan in plans:
            self.add(plan)

    @property
    def plans(self) -> list[Plan]:
        return list(self._plans.values())

    def add(self, plan: Plan) -> None:
        self._plans[plan.id] = plan

    def get(self, plan_id: str) -> Plan | None:
        return self._plans.get(plan_id)

    def load_dir(self, root: Path) -> list[Plan]:
        loaded: list[Plan] = []
        for file in sorted([*root.glob("*.json"), *root.glob("*.csv")]):
            for plan in load_plans(file):
                self.add(plan)
                loaded.append(plan)
                self._log(f"loaded '{plan.name}' ({len(plan.steps)} steps) from {file.name}")
        return loaded

    def select(self, plan_ids: Sequence[str]) -> tuple[str, ...]:
        """Remember which plans are about to start together.

        Unknown ids are dropped. Circuit order only applies when a single
        known plan is started; merged sessions always run linearly.
        """
        self._selection = tuple(plan_id for plan_id in plan_ids if plan_id in self._plans)
        self._warmup_pending = self.warmup is not None
        return self._selection

    def session_name(self, plan_ids: Sequence[str]) -> str:
        return " & ".join(self._plans[p].name for p in plan_ids if p in self._plans)

    def resolve_steps(self, plan_id: str) -> list[Step]:
        plan = self._plans.get(plan_id)
        if plan is None:
            self._log(f"unknown plan id '{plan_id}'")
            return []

        steps: list[Step] = list(plan.steps)
        if plan.execution_mode == "circuit" and len(self._selection) <= 1:
            steps = generate_circuit_steps(steps)

        if steps and self._warmup_pending and self._selection[:1] == (plan_id,):
            self._warmup_pending = False
            steps = self._warmup_prefix() + steps
        return steps

    def _warmup_prefix(self) -> list[Step]:
        assert self.warmup is not None
        prefix = self.warmup.enabled_steps()
        if prefix and self.warmup.rest_after_sec > 0:
            prefix.append(
                Step(
                    id=WARMUP_REST_STEP_ID,
                    name="Rest before workout",
                    kind="rest",
                    duration_seconds=self.warmup.rest_after_sec,
                    is_warmup=True,
                )
            )
        return prefix

    def _log(self, message: str) -> None:
        if self._debug:
            print(f"[PLAN] {message}")
