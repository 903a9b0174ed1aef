"""Plan file parser (CSV/JSON)."""

from __future__ import annotations

import csv
import json
import re
from pathlib import Path
from typing import Any

from sportsclock.workout.model import ExecutionMode, Plan, SetInfo, Step, StepKind


class PlanParseError(ValueError):
    """Raised when a plan file is invalid."""


_STEP_KINDS: tuple[StepKind, ...] = ("exercise", "rest")
_EXECUTION_MODES: tuple[ExecutionMode, ...] = ("linear", "circuit")


def slugify(name: str) -> str:
    s = re.sub(r"[^a-zA-Z0-9]+", "-", name.strip().lower()).strip("-")
    return s or "plan"


def load_plans(path: str | Path) -> list[Plan]:
    """Load every plan in a file; JSON files may hold one plan or an array."""
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return _load_json(file_path)
    if suffix == ".csv":
        return [_load_csv(file_path)]
    raise PlanParseError(f"Unsupported plan format '{file_path.suffix}'. Use .json or .csv")


def load_plan(path: str | Path) -> Plan:
    plans = load_plans(path)
    if len(plans) != 1:
        raise PlanParseError(f"Expected exactly one plan in {Path(path).name}, found {len(plans)}")
    return plans[0]


def _load_json(path: Path) -> list[Plan]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise PlanParseError(f"Invalid JSON: {exc}") from exc

    if isinstance(data, list):
        return [plan_from_dict(item, default_name=f"{path.stem} {i + 1}") for i, item in enumerate(data)]
    return [plan_from_dict(data, default_name=path.stem)]


def plan_from_dict(data: object, *, default_name: str = "Plan") -> Plan:
    if not isinstance(data, dict):
        raise PlanParseError("Plan JSON must be an object")

    name_obj = data.get("name", default_name)
    if not isinstance(name_obj, str):
        raise PlanParseError("Plan field 'name' must be a string")
    name = name_obj.strip() or default_name

    steps_obj = data.get("steps")
    if not isinstance(steps_obj, list):
        raise PlanParseError("Plan field 'steps' must be an array")

    mode_obj = data.get("executionMode", data.get("execution_mode", "linear"))
    if mode_obj not in _EXECUTION_MODES:
        raise PlanParseError(f"Plan field 'executionMode' must be one of {_EXECUTION_MODES}")

    color_obj = data.get("color")
    plan_id = str(data.get("id") or slugify(name))

    steps: list[Step] = []
    for i, raw in enumerate(steps_obj):
        if not isinstance(raw, dict):
            raise PlanParseError(f"Step {i + 1}: must be an object")
        steps.append(_build_step(raw, index=i, plan_id=plan_id))

    return Plan(
        id=plan_id,
        name=name,
        steps=tuple(steps),
        execution_mode=mode_obj,
        color=str(color_obj) if color_obj is not None else None,
    )


def _load_csv(path: Path) -> Plan:
    steps: list[Step] = []
    plan_id = slugify(path.stem)
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        fields = set(reader.fieldnames or [])
        required = {"name", "kind", "duration_sec"}
        if not required.issubset(fields):
            raise PlanParseError(
                "CSV must contain headers: name,kind,duration_sec[,reps,is_rep_based]"
            )

        for i, row in enumerate(reader):
            steps.append(
                _build_step(
                    {
                        "name": row.get("name"),
                        "type": row.get("kind"),
                        "duration": row.get("duration_sec"),
                        "reps": row.get("reps"),
                        "isRepBased": _parse_flag(
                            row.get("is_rep_based"), field_name="is_rep_based", index=i
                        ),
                    },
                    index=i,
                    plan_id=plan_id,
                )
            )

    return Plan(id=plan_id, name=path.stem, steps=tuple(steps))


def _field(raw: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _build_step(raw: dict[str, Any], *, index: int, plan_id: str) -> Step:
    name_obj = _field(raw, "name")
    if name_obj is None or not str(name_obj).strip():
        raise PlanParseError(f"Step {index + 1}: missing name")

    kind_obj = _field(raw, "type", "kind") or "exercise"
    if kind_obj not in _STEP_KINDS:
        raise PlanParseError(f"Step {index + 1}: type must be 'exercise' or 'rest'")

    duration = _parse_number_field(
        raw=_field(raw, "duration", "duration_seconds", "duration_sec"),
        field_name="duration",
        index=index,
    )
    reps = int(
        _parse_number_field(raw=_field(raw, "reps"), field_name="reps", index=index)
    )
    if duration < 0:
        raise PlanParseError(f"Step {index + 1}: duration must be >= 0")
    if reps < 0:
        raise PlanParseError(f"Step {index + 1}: reps must be >= 0")

    is_rep_based = _parse_flag(
        _field(raw, "isRepBased", "is_rep_based"), field_name="isRepBased", index=index
    )

    return Step(
        id=str(_field(raw, "id") or f"{plan_id}-step{index + 1}"),
        name=str(name_obj).strip(),
        kind=kind_obj,
        is_rep_based=is_rep_based,
        duration_seconds=duration,
        reps=reps,
        set_info=_parse_set_info(_field(raw, "setInfo", "set_info"), index=index),
        is_warmup=_parse_flag(
            _field(raw, "isWarmup", "is_warmup"), field_name="isWarmup", index=index
        ),
        is_enabled=_parse_flag(
            _field(raw, "isEnabled", "is_enabled"),
            field_name="isEnabled",
            index=index,
            default=True,
        ),
    )


def _parse_set_info(raw: object, *, index: int) -> SetInfo | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise PlanParseError(f"Step {index + 1}: setInfo must be an object")
    current = int(_parse_number_field(raw=raw.get("current"), field_name="setInfo.current", index=index))
    total = int(_parse_number_field(raw=raw.get("total"), field_name="setInfo.total", index=index))
    if total < 1 or not 1 <= current <= total:
        raise PlanParseError(f"Step {index + 1}: setInfo must satisfy 1 <= current <= total")
    return SetInfo(current=current, total=total)


def _parse_number_field(*, raw: object, field_name: str, index: int) -> float:
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        return 0.0
    if isinstance(raw, bool):
        raise PlanParseError(f"Step {index + 1}: invalid {field_name}")
    try:
        return float(str(raw).strip())
    except ValueError as exc:
        raise PlanParseError(f"Step {index + 1}: invalid {field_name}") from exc


def _parse_flag(raw: object, *, field_name: str, index: int, default: bool = False) -> bool:
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text == "":
        return default
    if text in {"0", "false", "no"}:
        return False
    if text in {"1", "true", "yes"}:
        return True
    raise PlanParseError(f"Step {index + 1}: invalid {field_name}")
