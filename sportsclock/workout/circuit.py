"""Linear to circuit (round-robin) step ordering."""

from __future__ import annotations

import re
from typing import Sequence

from sportsclock.workout.model import Step


_SET_SUFFIX = re.compile(r"(.+?)\s*\((Set|Rep|סט)\s*\d+", re.IGNORECASE)


def base_exercise_name(name: str) -> str:
    """Strip a set/rep counter: ``"Push-ups (Set 1/3)"`` -> ``"Push-ups"``."""
    match = _SET_SUFFIX.match(name)
    return match.group(1).strip() if match else name


def generate_circuit_steps(steps: Sequence[Step]) -> list[Step]:
    blocks_by_name: dict[str, list[list[Step]]] = {}

    i = 0
    while i < len(steps):
        step = steps[i]
        i += 1
        if not step.is_exercise:
            # a rest with no exercise before it belongs to no round
            continue

        block = [step]
        if i < len(steps) and steps[i].is_rest:
            block.append(steps[i])
            i += 1
        blocks_by_name.setdefault(base_exercise_name(step.name), []).append(block)

    rounds = max((len(blocks) for blocks in blocks_by_name.values()), default=0)
    out: list[Step] = []
    for round_index in range(rounds):
        for blocks in blocks_by_name.values():
            if round_index < len(blocks):
                out.extend(blocks[round_index])
    return out
