"""Workout domain models."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal


StepKind = Literal["exercise", "rest"]
ExecutionMode = Literal["linear", "circuit"]


@dataclass(frozen=True)
class SetInfo:
    current: int
    total: int


@dataclass(frozen=True)
class Step:
    id: str
    name: str
    kind: StepKind = "exercise"
    is_rep_based: bool = False
    duration_seconds: float = 0
    reps: int = 0
    set_info: SetInfo | None = None
    is_warmup: bool = False
    is_enabled: bool = True

    @property
    def is_exercise(self) -> bool:
        return self.kind == "exercise"

    @property
    def is_rest(self) -> bool:
        return self.kind == "rest"

    @property
    def is_timed(self) -> bool:
        return not self.is_rep_based

    def with_set_info(self, set_info: SetInfo | None) -> Step:
        return replace(self, set_info=set_info)


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    steps: tuple[Step, ...]
    execution_mode: ExecutionMode = "linear"
    color: str | None = None

    @property
    def total_duration_sec(self) -> float:
        return sum(step.duration_seconds for step in self.steps if step.is_timed)
