"""Domain models for daily logs, targets and history."""

import logging
from datetime import date
from typing import TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

CARDIO_MUSCLE = "Cardio"

NUTRIENT_FIELDS = (
    "calories",
    "protein",
    "carbs",
    "fat",
    "fiber",
    "sugar",
    "sodium",
)

MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class NutritionTotals(BaseModel):
    """Nutrient amounts for a meal or a whole day."""

    model_config = MODEL_CONFIG

    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)
    fiber: float = Field(default=0.0, ge=0)
    sugar: float = Field(default=0.0, ge=0)
    sodium: float = Field(default=0.0, ge=0)

    @field_validator(*NUTRIENT_FIELDS, mode="before")
    @classmethod
    def default_missing_nutrient(cls, value: object) -> object:
        return 0.0 if value is None else value

    def totals(self) -> "NutritionTotals":
        """Return only the nutrient fields as a plain totals value."""
        return NutritionTotals(
            **{name: getattr(self, name) for name in NUTRIENT_FIELDS}
        )


class Targets(NutritionTotals):
    """Daily nutrient ceilings plus a water target in millilitres."""

    water_target: int = Field(default=0, ge=0)


DEFAULT_TARGETS = Targets(
    calories=2950,
    protein=170,
    carbs=430,
    fat=62,
    fiber=35,
    sugar=50,
    sodium=2300,
    water_target=3000,
)


class MealEntry(BaseModel):
    """A logged meal with its nutrition snapshot."""

    model_config = MODEL_CONFIG

    id: str
    name: str
    timestamp: str
    nutrition: NutritionTotals = Field(default_factory=NutritionTotals)


class Supplements(BaseModel):
    """Daily supplement intake flags."""

    model_config = MODEL_CONFIG

    creatine: bool = False
    multivitamin: bool = False


SUPPLEMENT_KEYS = ("creatine", "multivitamin")


class StrengthSet(BaseModel):
    """A weighted set of repetitions."""

    model_config = MODEL_CONFIG

    id: str
    weight: float = Field(default=0.0, ge=0)
    reps: float = Field(default=0.0, ge=0)
    completed: bool = False

    @field_validator("weight", "reps", mode="before")
    @classmethod
    def default_blank_value(cls, value: object) -> object:
        return 0 if value is None else value


class CardioSet(BaseModel):
    """A timed cardio interval; duration is stored under ``time`` on the wire."""

    model_config = MODEL_CONFIG

    id: str
    duration: float = Field(default=0.0, ge=0, alias="time")
    speed: float = Field(default=0.0, ge=0)
    incline: float = Field(default=0.0, ge=0)
    completed: bool = False

    @field_validator("duration", "speed", "incline", mode="before")
    @classmethod
    def default_blank_value(cls, value: object) -> object:
        return 0 if value is None else value


ExerciseSet = StrengthSet | CardioSet


def set_type_for(muscle: str) -> type[StrengthSet] | type[CardioSet]:
    """Return the set variant used by exercises of a muscle group."""
    return CardioSet if muscle == CARDIO_MUSCLE else StrengthSet


class WorkoutExercise(BaseModel):
    """An exercise performed in a workout with its ordered sets."""

    model_config = MODEL_CONFIG

    id: str
    exercise_id: str
    name: str
    muscle: str
    sets: list[ExerciseSet] = Field(default_factory=list)

    @field_validator("sets", mode="before")
    @classmethod
    def coerce_set_variant(cls, value: object, info: ValidationInfo) -> object:
        if not isinstance(value, list):
            return value
        set_type = set_type_for(str(info.data.get("muscle", "")))
        return [
            set_type.model_validate(item) if isinstance(item, dict) else item
            for item in value
        ]

    @model_validator(mode="after")
    def check_set_variant(self) -> "WorkoutExercise":
        set_type = set_type_for(self.muscle)
        for exercise_set in self.sets:
            if not isinstance(exercise_set, set_type):
                set_name = type(exercise_set).__name__
                raise ValueError(f"{self.muscle} exercise cannot hold a {set_name}")
        return self

    @property
    def is_cardio(self) -> bool:
        return self.muscle == CARDIO_MUSCLE


class WorkoutLog(BaseModel):
    """A day's workout."""

    model_config = MODEL_CONFIG

    exercises: list[WorkoutExercise] = Field(default_factory=list)
    start_time: str | None = None
    end_time: str | None = None
    notes: str | None = None


class DailyLog(NutritionTotals):
    """Everything logged for a single calendar day."""

    meals: list[MealEntry] = Field(default_factory=list)
    water_intake: int = Field(default=0, ge=0)
    supplements: Supplements = Field(default_factory=Supplements)
    weight: float | None = Field(default=None, gt=0)
    workout: WorkoutLog | None = None

    @field_validator("water_intake", "supplements", mode="before")
    @classmethod
    def default_missing_value(cls, value: object, info: ValidationInfo) -> object:
        if value is not None:
            return value
        return 0 if info.field_name == "water_intake" else Supplements()

    @property
    def has_workout(self) -> bool:
        return self.workout is not None and bool(self.workout.exercises)


EMPTY_DAILY_LOG = DailyLog()


class SupplementsPatch(BaseModel):
    """Partial supplement flags."""

    model_config = MODEL_CONFIG

    creatine: bool | None = None
    multivitamin: bool | None = None


class LogPatch(BaseModel):
    """A partial daily log; only the fields that were set are applied."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    calories: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)
    fiber: float | None = Field(default=None, ge=0)
    sugar: float | None = Field(default=None, ge=0)
    sodium: float | None = Field(default=None, ge=0)
    supplements: SupplementsPatch | None = None
    meals: list[MealEntry] | None = None
    weight: float | None = Field(default=None, gt=0)
    workout: WorkoutLog | None = None


History = dict[str, DailyLog]


class AppState(BaseModel):
    """The whole durable application state, as stored locally and remotely."""

    model_config = MODEL_CONFIG

    history: dict[str, DailyLog] = Field(default_factory=dict)
    targets: Targets = DEFAULT_TARGETS

    @classmethod
    def from_document(cls, document: object) -> "AppState":
        """Validate a ``{history, targets}`` JSON document day by day.

        Raises ``ValueError`` only when the document itself is not an object;
        invalid days or fields are repaired by ``parse_history``.
        """
        if not isinstance(document, dict):
            raise ValueError("Sync document must be a JSON object")
        raw_targets = document.get("targets")
        targets = DEFAULT_TARGETS if raw_targets is None else parse_targets(raw_targets)
        return cls(
            history=parse_history(document.get("history") or {}),
            targets=targets,
        )

    def to_document(self) -> dict[str, object]:
        """Return the JSON-ready ``{history, targets}`` document."""
        return {
            "history": dump_history(self.history),
            "targets": dump_targets(self.targets),
        }


def get_log(history: History, day_key: str) -> DailyLog:
    """Return the log for a date, treating a missing entry as an empty log."""
    return history.get(day_key, EMPTY_DAILY_LOG)


def parse_history(raw: object) -> History:
    """Validate a JSON history mapping one day at a time.

    A field that fails validation is dropped from its day, which then falls
    back to that field's default; a day that is not an object is skipped.
    The other days are never affected.
    """
    if not isinstance(raw, dict):
        raise ValueError("History must be a JSON object")
    history: History = {}
    for day_key, raw_log in raw.items():
        log = validate_leniently(DailyLog, raw_log, f"history[{day_key}]")
        if log is not None:
            history[str(day_key)] = log
    return history


def parse_targets(raw: object) -> Targets:
    """Validate targets, replacing invalid fields with their defaults."""
    if not isinstance(raw, dict):
        raise ValueError("Targets must be a JSON object")
    targets = validate_leniently(Targets, raw, "targets")
    return targets if targets is not None else DEFAULT_TARGETS


def validate_leniently(
    model_type: type[ModelT], raw: object, label: str
) -> ModelT | None:
    """Validate a JSON object, dropping top-level fields that fail validation."""
    if not isinstance(raw, dict):
        logger.warning("Skipping %s: expected a JSON object", label)
        return None
    data = dict(raw)
    while True:
        try:
            return model_type.model_validate(data)
        except ValidationError as exc:
            invalid = _invalid_input_keys(model_type, exc) & set(data)
            if not invalid:
                logger.warning("Skipping %s: %s", label, exc)
                return None
            logger.warning(
                "Dropping invalid fields %s of %s", sorted(invalid), label
            )
            for key in invalid:
                del data[key]


def _invalid_input_keys(
    model_type: type[BaseModel], exc: ValidationError
) -> set[str]:
    keys: set[str] = set()
    for error in exc.errors():
        if not error["loc"]:
            continue
        loc_key = str(error["loc"][0])
        keys.add(loc_key)
        for name, info in model_type.model_fields.items():
            if loc_key in (name, info.alias):
                keys.update(key for key in (name, info.alias) if key)
    return keys


def dump_history(history: History) -> dict[str, object]:
    """Serialize a history mapping into its JSON wire form."""
    return {
        day_key: log.model_dump(mode="json", by_alias=True, exclude_none=True)
        for day_key, log in history.items()
    }


def dump_targets(targets: Targets) -> dict[str, object]:
    """Serialize targets into their JSON wire form."""
    return targets.model_dump(mode="json", by_alias=True)


def date_key(day: date) -> str:
    """Return the ``YYYY-MM-DD`` history key for a date."""
    return day.isoformat()


def today_key(today: date | None = None) -> str:
    """Return the history key for today in the device's local time zone."""
    return date_key(today or date.today())
