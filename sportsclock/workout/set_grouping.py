"""Set-group detection and renumbering for the plan editor."""

from __future__ import annotations

from collections import Counter
from typing import Sequence, Union

from sportsclock.workout.model import SetInfo, Step


DisplayItem = Union[Step, list[Step]]


def group_for_display(steps: Sequence[Step]) -> list[DisplayItem]:
    """Fold each complete ``Set 1/n .. n/n`` run into one list.

    Steps that open a set run which does not complete are emitted on their
    own, and scanning resumes at the very next step.
    """
    out: list[DisplayItem] = []
    i = 0
    while i < len(steps):
        run_length = _set_run_length(steps, i)
        if run_length is None:
            out.append(steps[i])
            i += 1
        else:
            out.append(list(steps[i : i + run_length]))
            i += run_length
    return out


def _set_run_length(steps: Sequence[Step], start: int) -> int | None:
    head = steps[start]
    info = head.set_info
    if not head.is_exercise or info is None or info.current != 1 or info.total <= 1:
        return None

    j = start + 1
    for expected in range(2, info.total + 1):
        if j < len(steps) and steps[j].is_rest:
            j += 1
        if j >= len(steps):
            return None
        candidate = steps[j]
        if (
            not candidate.is_exercise
            or candidate.name != head.name
            or candidate.set_info is None
            or candidate.set_info.current != expected
        ):
            return None
        j += 1
    return j - start


def renumber_all_sets(steps: Sequence[Step]) -> list[Step]:
    totals = Counter(step.name for step in steps if step.is_exercise)
    seen: Counter[str] = Counter()
    out: list[Step] = []
    for step in steps:
        if not step.is_exercise:
            out.append(step)
            continue
        total = totals[step.name]
        if total <= 1:
            out.append(step.with_set_info(None))
            continue
        seen[step.name] += 1
        out.append(step.with_set_info(SetInfo(current=seen[step.name], total=total)))
    return out


def step_display_name(step: Step) -> str:
    info = step.set_info
    if info is None or info.total <= 1:
        return step.name
    return f"{step.name} (Set {info.current}/{info.total})"


def expand_set_group(template: Step, sets: int, rest_seconds: float) -> list[Step]:
    """Author ``sets`` numbered copies of an exercise with rests in between."""
    if sets <= 1:
        return [template.with_set_info(None)]

    out: list[Step] = []
    for n in range(1, sets + 1):
        out.append(
            Step(
                id=f"{template.id}-set{n}",
                name=template.name,
                kind="exercise",
                is_rep_based=template.is_rep_based,
                duration_seconds=template.duration_seconds,
                reps=template.reps,
                set_info=SetInfo(current=n, total=sets),
            )
        )
        if n < sets and rest_seconds > 0:
            out.append(
                Step(
                    id=f"{template.id}-rest{n}",
                    name="Rest",
                    kind="rest",
                    duration_seconds=rest_seconds,
                )
            )
    return out
