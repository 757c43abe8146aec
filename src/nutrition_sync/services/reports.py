"""Progress ratios and rolling history reports."""

from collections import Counter
from dataclasses import dataclass

from nutrition_sync.domain.logs import CardioSet, DailyLog, History, Targets, get_log

REPORT_DAYS = 30


@dataclass(frozen=True)
class DailyProgress:
    """Fraction of each daily target reached, clamped to [0, 1]."""

    calories: float
    protein: float
    carbs: float
    fat: float
    water: float


@dataclass(frozen=True)
class DayReport:
    """Per-day figures used for charts."""

    day: str
    calories: float
    protein: float
    water_ml: int
    weight: float | None
    volume: float
    cardio_minutes: float


@dataclass(frozen=True)
class ReportSummary:
    """Aggregates over the most recent logged days."""

    days_count: int
    avg_calories: float
    avg_protein: float
    total_water_ml: int
    total_volume: float
    total_cardio_minutes: float
    workouts_count: int
    avg_weight: float | None
    weight_change: float | None
    top_muscle: str | None
    days: list[DayReport]


def progress(current: float, target: float) -> float:
    """Return current/target clamped to [0, 1]; zero targets read as 0."""
    if target <= 0:
        return 0.0
    return min(max(current / target, 0.0), 1.0)


def daily_progress(history: History, day_key: str, targets: Targets) -> DailyProgress:
    """Return target progress for a date."""
    log = get_log(history, day_key)
    return DailyProgress(
        calories=progress(log.calories, targets.calories),
        protein=progress(log.protein, targets.protein),
        carbs=progress(log.carbs, targets.carbs),
        fat=progress(log.fat, targets.fat),
        water=progress(log.water_intake, targets.water_target),
    )


def remaining_calories(history: History, day_key: str, targets: Targets) -> float:
    """Return calories left before the daily target, never negative."""
    return max(0.0, targets.calories - get_log(history, day_key).calories)


def build_report(history: History, days: int = REPORT_DAYS) -> ReportSummary | None:
    """Summarise the last ``days`` logged dates; None when nothing is logged."""
    day_keys = sorted(history)[-days:]
    if not day_keys:
        return None

    muscles: Counter[str] = Counter()
    weights: list[float] = []
    reports: list[DayReport] = []
    workouts_count = 0
    for day_key in day_keys:
        log = get_log(history, day_key)
        volume, cardio_minutes = _training_load(log)
        if log.has_workout and log.workout is not None:
            workouts_count += 1
            muscles.update(exercise.muscle for exercise in log.workout.exercises)
        if log.weight is not None:
            weights.append(log.weight)
        reports.append(
            DayReport(
                day=day_key,
                calories=log.calories,
                protein=log.protein,
                water_ml=log.water_intake,
                weight=log.weight,
                volume=volume,
                cardio_minutes=cardio_minutes,
            )
        )

    count = len(reports)
    top_muscle = muscles.most_common(1)[0][0] if muscles else None
    return ReportSummary(
        days_count=count,
        avg_calories=sum(item.calories for item in reports) / count,
        avg_protein=sum(item.protein for item in reports) / count,
        total_water_ml=sum(item.water_ml for item in reports),
        total_volume=sum(item.volume for item in reports),
        total_cardio_minutes=sum(item.cardio_minutes for item in reports),
        workouts_count=workouts_count,
        avg_weight=sum(weights) / len(weights) if weights else None,
        weight_change=weights[-1] - weights[0] if weights else None,
        top_muscle=top_muscle,
        days=list(reversed(reports)),
    )


def _training_load(log: DailyLog) -> tuple[float, float]:
    volume = 0.0
    cardio_minutes = 0.0
    if log.workout is None:
        return volume, cardio_minutes
    for exercise in log.workout.exercises:
        for item in exercise.sets:
            if not item.completed:
                continue
            if isinstance(item, CardioSet):
                cardio_minutes += item.duration
            else:
                volume += item.weight * item.reps
    return volume, cardio_minutes
