"""Pure update functions for a single day's log.

Every function takes the current history, a date key and a payload and returns
a new history in which only that date's log has been replaced. Neither the
input mapping nor any log inside it is modified.
"""

from enum import StrEnum

from nutrition_sync.domain.logs import (
    NUTRIENT_FIELDS,
    SUPPLEMENT_KEYS,
    DailyLog,
    History,
    LogPatch,
    WorkoutLog,
    get_log,
)


class Mutation(StrEnum):
    """Kinds of log mutation, used by the date edit policy."""

    WATER = "water"
    WEIGHT = "weight"
    WORKOUT = "workout"
    SUPPLEMENT = "supplement"
    ASSISTANT_PATCH = "assistant_patch"


PAST_DATE_MUTATIONS = frozenset({Mutation.WEIGHT, Mutation.WORKOUT})


def is_edit_allowed(mutation: Mutation, day_key: str, today: str) -> bool:
    """Return True when a mutation may target the given date."""
    return day_key == today or mutation in PAST_DATE_MUTATIONS


def apply_water_delta(history: History, day_key: str, delta_ml: int) -> History:
    """Add (or remove) water, never going below zero."""
    log = get_log(history, day_key)
    water = max(0, log.water_intake + delta_ml)
    return _replace_log(
        history, day_key, log.model_copy(update={"water_intake": water})
    )


def set_weight(history: History, day_key: str, weight_kg: float) -> History:
    """Record the body weight sample for a date."""
    if weight_kg <= 0:
        raise ValueError("Weight must be a positive number of kilograms")
    log = get_log(history, day_key)
    return _replace_log(
        history, day_key, log.model_copy(update={"weight": float(weight_kg)})
    )


def replace_workout(history: History, day_key: str, workout: WorkoutLog) -> History:
    """Replace the whole workout of a date."""
    log = get_log(history, day_key)
    return _replace_log(
        history, day_key, log.model_copy(update={"workout": workout})
    )


def toggle_supplement(history: History, day_key: str, supplement: str) -> History:
    """Flip one supplement flag."""
    if supplement not in SUPPLEMENT_KEYS:
        raise ValueError(f"Unknown supplement: {supplement}")
    log = get_log(history, day_key)
    current = getattr(log.supplements, supplement)
    supplements = log.supplements.model_copy(update={supplement: not current})
    return _replace_log(
        history, day_key, log.model_copy(update={"supplements": supplements})
    )


def apply_log_patch(history: History, day_key: str, patch: LogPatch) -> History:
    """Overwrite only the fields present in the patch.

    Nutrient values are cumulative totals and replace the stored ones rather
    than being added to them. Supplement flags missing from the patch keep
    their stored value.
    """
    log = get_log(history, day_key)
    return _replace_log(history, day_key, merge_patch(log, patch))


def merge_patch(log: DailyLog, patch: LogPatch) -> DailyLog:
    """Return the log with the patch's present fields written over it."""
    update: dict[str, object] = {}
    for name in patch.model_fields_set:
        value = getattr(patch, name)
        if value is None:
            continue
        if name == "supplements":
            flags = value.model_dump(exclude_none=True)
            update[name] = log.supplements.model_copy(update=flags)
        elif name in NUTRIENT_FIELDS:
            update[name] = float(value)
        else:
            update[name] = value
    return log.model_copy(update=update)


def _replace_log(history: History, day_key: str, log: DailyLog) -> History:
    updated = dict(history)
    updated[day_key] = log
    return updated
