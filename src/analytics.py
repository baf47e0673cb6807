"""Personal records and volume trends derived from workout history."""

from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from typedefs import (
    ExerciseStats,
    PersonalRecord,
    SetEntry,
    VolumePoint,
    WorkoutLog,
    utcnow,
)


def _completed_sets(log: WorkoutLog, exercise_name: str) -> Iterable[SetEntry]:
    for exercise in log.exercises:
        if exercise.name == exercise_name:
            for s in exercise.sets:
                if s.completed:
                    yield s


def personal_record(
    history: List[WorkoutLog], exercise_name: str
) -> Optional[PersonalRecord]:
    """Heaviest completed set of an exercise across all logs.

    When several sets share the heaviest weight, the one with the most reps
    wins.
    """
    best: Optional[SetEntry] = None
    for log in history:
        for s in _completed_sets(log, exercise_name):
            if s.weight is None:
                continue
            if best is None or (s.weight, s.reps or 0) > (best.weight, best.reps or 0):
                best = s

    if best is None:
        return None
    return PersonalRecord(max_weight=best.weight, reps=best.reps)


def volume_trend(
    history: List[WorkoutLog],
    exercise_name: str,
    window_days: int = 30,
    now: Optional[datetime] = None,
) -> List[VolumePoint]:
    """Daily volume (weight x reps) of an exercise, oldest day first.

    Only logs completed within the last window_days count. Days are UTC
    calendar days of the completion time.
    """
    cutoff = (now or utcnow()) - timedelta(days=window_days)

    completed_logs = [
        log
        for log in history
        if log.completed_at is not None and log.completed_at >= cutoff
    ]
    completed_logs.sort(key=lambda log: log.completed_at)

    daily = OrderedDict()
    for log in completed_logs:
        sets = list(_completed_sets(log, exercise_name))
        if not sets:
            continue
        day = log.completed_at.date()
        volume = sum(s.weight * s.reps for s in sets if s.weight and s.reps)
        daily[day] = daily.get(day, 0) + volume

    return [VolumePoint(date=day, volume=volume) for day, volume in daily.items()]


def last_performed(
    history: List[WorkoutLog], exercise_name: str
) -> Optional[datetime]:
    """Completion time of the newest log containing the exercise.

    History must be ordered newest first.
    """
    for log in history:
        if any(ex.name == exercise_name for ex in log.exercises):
            return log.completed_at
    return None


def exercise_stats(
    history: List[WorkoutLog],
    exercise_name: str,
    window_days: int = 30,
    now: Optional[datetime] = None,
) -> ExerciseStats:
    return ExerciseStats(
        exercise_name=exercise_name,
        personal_record=personal_record(history, exercise_name),
        last_performed=last_performed(history, exercise_name),
        volume_trend=volume_trend(history, exercise_name, window_days, now),
    )
