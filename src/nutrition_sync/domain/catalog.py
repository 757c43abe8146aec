"""Static exercise catalog and workout building helpers."""

from collections.abc import Callable
from dataclasses import dataclass
from uuid import uuid4

from pydantic import BaseModel, Field

from nutrition_sync.domain.logs import (
    CARDIO_MUSCLE,
    MODEL_CONFIG,
    ExerciseSet,
    StrengthSet,
    WorkoutExercise,
    set_type_for,
)

MUSCLE_GROUPS = ("Chest", "Back", "Legs", "Shoulders", "Arms", "Core", CARDIO_MUSCLE)


@dataclass(frozen=True)
class ExerciseDefinition:
    """An exercise available in the static catalog."""

    id: str
    name: str
    muscle: str


EXERCISE_CATALOG: tuple[ExerciseDefinition, ...] = (
    ExerciseDefinition("chest_press_machine", "Chest Press Machine", "Chest"),
    ExerciseDefinition("decline_cable_press", "Decline Cable Press Full", "Chest"),
    ExerciseDefinition("decline_cable_fly", "Decline Cable Flys", "Chest"),
    ExerciseDefinition("bench_press", "Barbell Bench Press", "Chest"),
    ExerciseDefinition("lat_pulldown_wide", "Lat Pull Down Wide", "Back"),
    ExerciseDefinition("lat_pulldown_close", "Lat Pulldown Close Grip", "Back"),
    ExerciseDefinition("seated_row_neutral", "Seated Rows Neutral Grip", "Back"),
    ExerciseDefinition("seated_row_wide", "Seated Row Wide Grip", "Back"),
    ExerciseDefinition("rows_machine_wide", "Rows Machine Wide Grip", "Back"),
    ExerciseDefinition("back_extension", "Back Extension (Glutes/Erector)", "Back"),
    ExerciseDefinition("db_rdl", "Dumbbell Romanian Deadlift", "Legs"),
    ExerciseDefinition("seated_leg_curl", "Seated Leg Curl Down", "Legs"),
    ExerciseDefinition("leg_extensions", "Leg Extensions", "Legs"),
    ExerciseDefinition("machine_abduction", "Machine Abductions", "Legs"),
    ExerciseDefinition(
        "standing_calf_raise_db", "Standing Calf Raises With Dumbbell", "Legs"
    ),
    ExerciseDefinition("leg_press", "Leg Presses", "Legs"),
    ExerciseDefinition("seated_calf_raise", "Seated Calf Raise", "Legs"),
    ExerciseDefinition(
        "front_shoulder_press_machine", "Front Shoulder Presses Machine", "Shoulders"
    ),
    ExerciseDefinition(
        "lateral_raises_bench", "Lateral Raises On Bench Shoulder", "Shoulders"
    ),
    ExerciseDefinition("rear_delt_fly_machine", "Rear Delt Fly Machine", "Shoulders"),
    ExerciseDefinition("tricep_rope_pushdown", "Triceps Rope Pushdown", "Arms"),
    ExerciseDefinition(
        "tricep_cable_overhead", "Seated Triceps Cable Overhead Extension", "Arms"
    ),
    ExerciseDefinition(
        "bicep_incline_db_curl", "Biceps Inclined Dumbbell Curls", "Arms"
    ),
    ExerciseDefinition("preacher_curl_machine", "Preacher Curl Machine", "Arms"),
    ExerciseDefinition("cable_curl_pronated", "Cable Curl Pronated Grip", "Arms"),
    ExerciseDefinition("crunches", "Crunches", "Core"),
    ExerciseDefinition("russian_twist", "Russian Twist Exercise", "Core"),
    ExerciseDefinition("plank", "Plank Core", "Core"),
    ExerciseDefinition("treadmill", "Treadmill Run", CARDIO_MUSCLE),
    ExerciseDefinition("bike", "Stationary Bike", CARDIO_MUSCLE),
    ExerciseDefinition("elliptical", "Elliptical (Orbitrak)", CARDIO_MUSCLE),
    ExerciseDefinition("stairmaster", "Stairmaster (Steps)", CARDIO_MUSCLE),
    ExerciseDefinition("rowing", "Rowing Machine", CARDIO_MUSCLE),
    ExerciseDefinition("arc_trainer", "Arc Trainer", CARDIO_MUSCLE),
    ExerciseDefinition("rope_jumps", "Jump Rope", CARDIO_MUSCLE),
)

_CATALOG_BY_ID = {definition.id: definition for definition in EXERCISE_CATALOG}


def new_id() -> str:
    """Return a fresh instance id for exercises, sets and messages."""
    return uuid4().hex


def find_exercise(exercise_id: str) -> ExerciseDefinition | None:
    """Return a catalog entry by id."""
    return _CATALOG_BY_ID.get(exercise_id)


def search_exercises(
    query: str = "", muscle: str | None = None
) -> list[ExerciseDefinition]:
    """Return catalog entries matching a name fragment and muscle group."""
    query_lower = query.strip().lower()
    return [
        definition
        for definition in EXERCISE_CATALOG
        if (muscle is None or definition.muscle == muscle)
        and query_lower in definition.name.lower()
    ]


def new_workout_exercise(definition: ExerciseDefinition) -> WorkoutExercise:
    """Create a workout exercise with one empty set of the matching variant."""
    set_type = set_type_for(definition.muscle)
    return WorkoutExercise(
        id=new_id(),
        exercise_id=definition.id,
        name=definition.name,
        muscle=definition.muscle,
        sets=[set_type(id=new_id())],
    )


def add_set(exercise: WorkoutExercise) -> WorkoutExercise:
    """Append a set that repeats the previous set's values."""
    if exercise.sets:
        next_set = exercise.sets[-1].model_copy(
            update={"id": new_id(), "completed": False}
        )
    else:
        next_set = set_type_for(exercise.muscle)(id=new_id())
    return exercise.model_copy(update={"sets": [*exercise.sets, next_set]})


def toggle_set(exercise: WorkoutExercise, set_id: str) -> WorkoutExercise:
    """Flip the completed flag of one set."""
    return _update_sets(
        exercise,
        set_id,
        lambda item: item.model_copy(update={"completed": not item.completed}),
    )


def update_set(
    exercise: WorkoutExercise, set_id: str, **values: float
) -> WorkoutExercise:
    """Overwrite measured values of one set, validating them for its variant."""
    return _update_sets(
        exercise,
        set_id,
        lambda item: type(item).model_validate({**item.model_dump(), **values}),
    )


def _update_sets(
    exercise: WorkoutExercise,
    set_id: str,
    change: Callable[[ExerciseSet], ExerciseSet],
) -> WorkoutExercise:
    sets: list[ExerciseSet] = [
        change(item) if item.id == set_id else item for item in exercise.sets
    ]
    return exercise.model_copy(update={"sets": sets})


class WorkoutTemplate(BaseModel):
    """A saved workout routine."""

    model_config = MODEL_CONFIG

    id: str
    name: str
    exercises: list[WorkoutExercise] = Field(default_factory=list)


def instantiate_template(template: WorkoutTemplate) -> list[WorkoutExercise]:
    """Copy a template's exercises with fresh ids and uncompleted sets."""
    return [
        exercise.model_copy(
            update={
                "id": new_id(),
                "sets": [
                    item.model_copy(update={"id": new_id(), "completed": False})
                    for item in exercise.sets
                ],
            }
        )
        for exercise in template.exercises
    ]


def template_from_exercises(
    name: str, exercises: list[WorkoutExercise]
) -> WorkoutTemplate:
    """Save the current exercises as a reusable routine."""
    return WorkoutTemplate(
        id=new_id(),
        name=name,
        exercises=[
            exercise.model_copy(
                update={
                    "sets": [
                        item.model_copy(update={"completed": False})
                        for item in exercise.sets
                    ]
                }
            )
            for exercise in exercises
        ],
    )


def _strength_sets(count: int, reps: int) -> list[ExerciseSet]:
    return [StrengthSet(id=new_id(), reps=reps) for _ in range(count)]


def _template_exercise(exercise_id: str, count: int, reps: int) -> WorkoutExercise:
    definition = _CATALOG_BY_ID[exercise_id]
    return WorkoutExercise(
        id=f"{exercise_id}_template",
        exercise_id=definition.id,
        name=definition.name,
        muscle=definition.muscle,
        sets=_strength_sets(count, reps),
    )


DEFAULT_TEMPLATES: tuple[WorkoutTemplate, ...] = (
    WorkoutTemplate(
        id="user_day_1",
        name="Day 1: Push",
        exercises=[
            _template_exercise("chest_press_machine", 3, 10),
            _template_exercise("decline_cable_press", 3, 10),
            _template_exercise("front_shoulder_press_machine", 3, 10),
            _template_exercise("lateral_raises_bench", 3, 12),
            _template_exercise("tricep_rope_pushdown", 3, 10),
            _template_exercise("tricep_cable_overhead", 3, 12),
            _template_exercise("crunches", 3, 20),
        ],
    ),
    WorkoutTemplate(
        id="user_day_2",
        name="Day 2: Pull",
        exercises=[
            _template_exercise("lat_pulldown_wide", 3, 10),
            _template_exercise("seated_row_neutral", 3, 10),
            _template_exercise("rear_delt_fly_machine", 3, 12),
            _template_exercise("bicep_incline_db_curl", 3, 10),
            _template_exercise("preacher_curl_machine", 3, 10),
            _template_exercise("back_extension", 3, 12),
        ],
    ),
    WorkoutTemplate(
        id="user_day_3",
        name="Day 3: Legs",
        exercises=[
            _template_exercise("leg_press", 3, 10),
            _template_exercise("db_rdl", 3, 10),
            _template_exercise("seated_leg_curl", 3, 12),
            _template_exercise("leg_extensions", 3, 12),
            _template_exercise("standing_calf_raise_db", 3, 15),
            _template_exercise("plank", 3, 1),
        ],
    ),
)

