"""Tests for the exercise catalog and workout helpers."""

import pytest
from pydantic import ValidationError

from nutrition_sync.domain.catalog import (
    DEFAULT_TEMPLATES,
    EXERCISE_CATALOG,
    add_set,
    find_exercise,
    instantiate_template,
    new_workout_exercise,
    search_exercises,
    template_from_exercises,
    toggle_set,
    update_set,
)
from nutrition_sync.domain.logs import CardioSet, StrengthSet


def test_catalog_ids_are_unique() -> None:
    ids = [definition.id for definition in EXERCISE_CATALOG]
    assert len(ids) == len(set(ids))


def test_search_exercises_filters_by_name_and_muscle() -> None:
    results = search_exercises("curl", muscle="Arms")

    assert results
    assert all(item.muscle == "Arms" for item in results)
    assert all("curl" in item.name.lower() for item in results)
    assert search_exercises("curl", muscle="Cardio") == []


def test_new_workout_exercise_uses_cardio_sets() -> None:
    treadmill = find_exercise("treadmill")
    assert treadmill is not None

    exercise = new_workout_exercise(treadmill)

    assert exercise.exercise_id == "treadmill"
    assert len(exercise.sets) == 1
    assert isinstance(exercise.sets[0], CardioSet)


def test_add_set_repeats_previous_values() -> None:
    bench = find_exercise("bench_press")
    assert bench is not None
    exercise = new_workout_exercise(bench)
    first_id = exercise.sets[0].id
    exercise = update_set(exercise, first_id, weight=60, reps=8)
    exercise = toggle_set(exercise, first_id)

    exercise = add_set(exercise)

    first, second = exercise.sets
    assert isinstance(second, StrengthSet)
    assert second.id != first.id
    assert (second.weight, second.reps) == (60, 8)
    assert first.completed is True
    assert second.completed is False


def test_update_set_validates_values() -> None:
    bike = find_exercise("bike")
    assert bike is not None
    exercise = new_workout_exercise(bike)
    set_id = exercise.sets[0].id

    updated = update_set(exercise, set_id, duration=25, speed=18)

    assert updated.sets[0].duration == 25
    assert exercise.sets[0].duration == 0
    with pytest.raises(ValidationError):
        update_set(exercise, set_id, speed=-1)


def test_instantiate_template_gives_fresh_ids() -> None:
    template = DEFAULT_TEMPLATES[0]

    exercises = instantiate_template(template)

    assert [item.exercise_id for item in exercises] == [
        item.exercise_id for item in template.exercises
    ]
    template_set_ids = {s.id for item in template.exercises for s in item.sets}
    new_set_ids = {s.id for item in exercises for s in item.sets}
    assert template_set_ids.isdisjoint(new_set_ids)
    assert not any(s.completed for item in exercises for s in item.sets)


def test_template_from_exercises_clears_completion() -> None:
    rowing = find_exercise("rowing")
    assert rowing is not None
    exercise = new_workout_exercise(rowing)
    exercise = toggle_set(exercise, exercise.sets[0].id)

    template = template_from_exercises("Cardio day", [exercise])

    assert template.name == "Cardio day"
    assert template.exercises[0].sets[0].completed is False
