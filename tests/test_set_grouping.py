from __future__ import annotations

from sportsclock.workout.model import SetInfo, Step
from sportsclock.workout.set_grouping import (
    expand_set_group,
    group_for_display,
    renumber_all_sets,
    step_display_name,
)


def _ex(step_id: str, name: str, current: int | None = None, total: int | None = None) -> Step:
    info = SetInfo(current, total) if current is not None and total is not None else None
    return Step(id=step_id, name=name, kind="exercise", duration_seconds=30, set_info=info)


def _rest(step_id: str) -> Step:
    return Step(id=step_id, name="Rest", kind="rest", duration_seconds=15)


def _shape(items: list) -> list:
    return [[s.id for s in item] if isinstance(item, list) else item.id for item in items]


def test_complete_set_run_with_rests_becomes_one_group() -> None:
    steps = [
        _ex("w", "Warm"),
        _ex("a1", "A", 1, 3),
        _rest("r1"),
        _ex("a2", "A", 2, 3),
        _rest("r2"),
        _ex("a3", "A", 3, 3),
        _rest("tail"),
    ]

    assert _shape(group_for_display(steps)) == [
        "w",
        ["a1", "r1", "a2", "r2", "a3"],
        "tail",
    ]


def test_set_run_without_rests() -> None:
    steps = [_ex("a1", "A", 1, 2), _ex("a2", "A", 2, 2), _ex("b", "B")]

    assert _shape(group_for_display(steps)) == [["a1", "a2"], "b"]


def test_broken_run_falls_back_to_singletons() -> None:
    steps = [
        _ex("a1", "A", 1, 3),
        _rest("r1"),
        _ex("a2", "A", 2, 3),
        _ex("b1", "B", 1, 2),
        _ex("b2", "B", 2, 2),
    ]

    assert _shape(group_for_display(steps)) == ["a1", "r1", "a2", ["b1", "b2"]]


def test_truncated_run_at_end_of_list() -> None:
    steps = [_ex("a1", "A", 1, 2), _rest("r1")]

    assert _shape(group_for_display(steps)) == ["a1", "r1"]


def test_wrong_current_breaks_run() -> None:
    steps = [_ex("a1", "A", 1, 2), _ex("a3", "A", 3, 2)]

    assert _shape(group_for_display(steps)) == ["a1", "a3"]


def test_renumber_assigns_dense_sequential_sets() -> None:
    steps = [
        _ex("a1", "A", 1, 3),
        _rest("r1"),
        _ex("a3", "A", 3, 3),
        _ex("b", "B", 1, 2),
        _ex("a-new", "A"),
    ]

    out = renumber_all_sets(steps)

    assert [s.set_info for s in out] == [
        SetInfo(1, 3),
        None,
        SetInfo(2, 3),
        None,
        SetInfo(3, 3),
    ]


def test_renumber_is_fixed_point() -> None:
    steps = [
        _ex("a1", "A"),
        _rest("r1"),
        _ex("b1", "B", 4, 9),
        _ex("a2", "A"),
        _ex("b2", "B"),
    ]

    once = renumber_all_sets(steps)

    assert renumber_all_sets(once) == once


def test_renumbered_sets_group_for_display() -> None:
    steps = [_ex("a1", "A"), _rest("r1"), _ex("a2", "A")]

    items = group_for_display(renumber_all_sets(steps))

    assert _shape(items) == [["a1", "r1", "a2"]]


def test_step_display_name() -> None:
    assert step_display_name(_ex("a", "Squat", 2, 3)) == "Squat (Set 2/3)"
    assert step_display_name(_ex("b", "Plank")) == "Plank"


def test_expand_set_group_interleaves_rests_without_trailing_rest() -> None:
    template = Step(id="sq", name="Squat", is_rep_based=True, reps=10)

    out = expand_set_group(template, sets=3, rest_seconds=20)

    assert [s.id for s in out] == ["sq-set1", "sq-rest1", "sq-set2", "sq-rest2", "sq-set3"]
    assert out[-1].set_info == SetInfo(3, 3)
    assert all(s.reps == 10 for s in out if s.is_exercise)
    assert _shape(group_for_display(out)) == [[s.id for s in out]]
