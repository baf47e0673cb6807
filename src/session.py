"""Workout session state machine.

A session wraps one WorkoutLog and moves it through
Created -> Active -> Completed | Discarded. While Active, two repeating
tasks run on the event loop: a one-second elapsed-time ticker and a
periodic autosave of the log to the active workout slot. Both are
cancelled as soon as the session leaves the Active state.
"""

import asyncio
import math
import os
from datetime import datetime
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, List, Optional, Protocol

from loguru import logger

from errors import PreconditionViolation
from plan_tables import MINUTES_PER_SET
from typedefs import (
    LoggedExercise,
    SetEntry,
    TemplateExercise,
    WorkoutLog,
    WorkoutStats,
    WorkoutTemplate,
    utcnow,
)

AUTOSAVE_INTERVAL_SECONDS = float(os.environ.get("AUTOSAVE_INTERVAL_SECONDS", "30"))
TICK_INTERVAL_SECONDS = 1.0

EDITABLE_SET_FIELDS = ("weight", "reps", "notes")

# Prescription used when repeating a workout logged without one
DEFAULT_TARGET_REPS = "8-12"
DEFAULT_REST_SECONDS = 90


class SessionState(str, Enum):
    CREATED = "created"
    ACTIVE = "active"
    COMPLETED = "completed"
    DISCARDED = "discarded"


class ActiveWorkoutStore(Protocol):
    def save_active_workout(self, log: WorkoutLog) -> Optional[WorkoutLog]: ...


def create_workout_log(template: WorkoutTemplate) -> WorkoutLog:
    """Build an empty log from a template, one blank set per prescribed set."""
    return WorkoutLog(
        template_id=template.id,
        name=template.name,
        type=template.type,
        exercises=[
            LoggedExercise(
                exercise_id=ex.exercise_id,
                name=ex.name,
                body_part=ex.body_part,
                target=ex.target,
                equipment=ex.equipment,
                gif_url=ex.gif_url,
                target_reps=ex.target_reps,
                rest_seconds=ex.rest_seconds,
                sets=[SetEntry(set_number=i + 1) for i in range(ex.sets)],
            )
            for ex in template.exercises
        ],
    )


def template_from_log(log: WorkoutLog) -> WorkoutTemplate:
    """Build a template that repeats a past workout.

    Each exercise gets as many sets as were logged. The prescription is
    copied from the log, defaulting to 8-12 reps and 90s rest where the log
    has none.
    """
    exercises = [
        TemplateExercise(
            exercise_id=ex.exercise_id,
            name=ex.name,
            body_part=ex.body_part,
            target=ex.target,
            equipment=ex.equipment,
            gif_url=ex.gif_url,
            sets=len(ex.sets),
            target_reps=ex.target_reps or DEFAULT_TARGET_REPS,
            rest_seconds=(
                ex.rest_seconds
                if ex.rest_seconds is not None
                else DEFAULT_REST_SECONDS
            ),
        )
        for ex in log.exercises
    ]
    template = WorkoutTemplate(
        name=log.name,
        type=log.type,
        estimated_duration=sum(ex.sets for ex in exercises) * MINUTES_PER_SET,
        exercises=exercises,
    )
    if log.template_id is not None:
        template.id = log.template_id
    return template


def calculate_workout_stats(log: WorkoutLog) -> WorkoutStats:
    """Totals over completed sets that have both a weight and a rep count."""
    stats = WorkoutStats()
    for exercise in log.exercises:
        for s in exercise.sets:
            if s.completed and s.weight and s.reps:
                stats.total_volume += s.weight * s.reps
                stats.total_sets += 1
                stats.total_reps += s.reps
    return stats


def format_elapsed(seconds: int) -> str:
    """Format elapsed seconds as MM:SS."""
    mins, secs = divmod(seconds, 60)
    return f"{mins:02d}:{secs:02d}"


def _validate_set_value(field: str, value: Any) -> Any:
    if field not in EDITABLE_SET_FIELDS:
        raise PreconditionViolation(
            f"Cannot edit set field {field!r}; editable fields are "
            f"{', '.join(EDITABLE_SET_FIELDS)}"
        )
    if value is None:
        return None

    if field == "weight":
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise PreconditionViolation(f"Invalid weight: {value!r}")
        return float(value)

    if field == "reps":
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise PreconditionViolation(f"Invalid reps: {value!r}")
        return value

    if not isinstance(value, str):
        raise PreconditionViolation(f"Invalid notes: {value!r}")
    return value


class WorkoutSession:
    """One workout being performed."""

    def __init__(
        self,
        log: WorkoutLog,
        storage: Optional[ActiveWorkoutStore] = None,
        clock: Callable[[], datetime] = utcnow,
        autosave_interval: float = AUTOSAVE_INTERVAL_SECONDS,
        tick_interval: float = TICK_INTERVAL_SECONDS,
    ):
        self.log = log
        self.storage = storage
        self.clock = clock
        self.autosave_interval = autosave_interval
        self.tick_interval = tick_interval
        self.state = SessionState.CREATED
        self._last_snapshot: Optional[str] = None
        self._tasks: List[asyncio.Task] = []

    @classmethod
    def begin(cls, template: WorkoutTemplate, **kwargs) -> "WorkoutSession":
        """Start a new session from a template."""
        session = cls(create_workout_log(template), **kwargs)
        session.log.started_at = session.clock()
        session.state = SessionState.ACTIVE
        logger.info(f"Workout started: {session.log.name}")
        return session

    @classmethod
    def resume(cls, log: WorkoutLog, **kwargs) -> "WorkoutSession":
        """Re-enter a session from a saved snapshot, keeping all its edits."""
        if log.completed_at is not None:
            raise PreconditionViolation(f"Workout {log.id} is already completed")
        session = cls(log, **kwargs)
        session.state = SessionState.ACTIVE
        logger.info(
            f"Workout resumed: {log.name} at {format_elapsed(log.elapsed_seconds)}"
        )
        return session

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    @property
    def elapsed_seconds(self) -> int:
        return self.log.elapsed_seconds

    def _require_active(self, action: str) -> None:
        if not self.is_active:
            raise PreconditionViolation(
                f"Cannot {action}: workout is {self.state.value}, not active"
            )

    def _get_set(self, exercise_index: int, set_index: int) -> SetEntry:
        exercises = self.log.exercises
        if not 0 <= exercise_index < len(exercises):
            raise PreconditionViolation(
                f"Exercise index {exercise_index} out of range "
                f"(workout has {len(exercises)} exercises)"
            )
        sets = exercises[exercise_index].sets
        if not 0 <= set_index < len(sets):
            raise PreconditionViolation(
                f"Set index {set_index} out of range "
                f"({exercises[exercise_index].name} has {len(sets)} sets)"
            )
        return sets[set_index]

    def update_set(
        self, exercise_index: int, set_index: int, field: str, value: Any
    ) -> WorkoutLog:
        """Set the weight, reps or notes of one set."""
        self._require_active("update set")
        entry = self._get_set(exercise_index, set_index)
        value = _validate_set_value(field, value)
        setattr(entry, field, value)
        return self.log

    def toggle_set_completion(self, exercise_index: int, set_index: int) -> WorkoutLog:
        self._require_active("toggle set")
        entry = self._get_set(exercise_index, set_index)
        entry.completed = not entry.completed
        return self.log

    def tick(self, seconds: int = 1) -> int:
        """Advance the elapsed-time counter."""
        if self.is_active:
            self.log.elapsed_seconds += seconds
        return self.log.elapsed_seconds

    def snapshot(self) -> bool:
        """Checkpoint the log to the active workout slot.

        Returns True if a write happened. Snapshotting an unchanged log is a
        no-op, so repeated calls leave the stored row as it was.
        """
        self._require_active("snapshot")
        if self.storage is None:
            return False

        serialized = self.log.model_dump_json()
        if serialized == self._last_snapshot:
            return False

        if self.storage.save_active_workout(self.log) is None:
            logger.error(f"Failed to save snapshot of workout {self.log.id}")
            return False

        self._last_snapshot = serialized
        return True

    def finish(self) -> WorkoutLog:
        """Complete the workout and return the finished log.

        The caller is responsible for appending it to history and clearing
        the active workout slot.
        """
        self._require_active("finish workout")
        self.stop_timers()

        stats = calculate_workout_stats(self.log)
        self.log.total_volume = stats.total_volume
        self.log.total_sets = stats.total_sets
        self.log.total_reps = stats.total_reps
        self.log.duration_minutes = math.floor(self.log.elapsed_seconds / 60 + 0.5)
        self.log.completed_at = self.clock()
        self.state = SessionState.COMPLETED

        logger.info(
            f"Workout completed: {self.log.name}, {stats.total_sets} sets, "
            f"{stats.total_volume} volume"
        )
        return self.log

    def discard(self) -> None:
        """Abandon the workout. Nothing is added to history."""
        self._require_active("discard workout")
        self.stop_timers()
        self.state = SessionState.DISCARDED
        logger.info(f"Workout discarded: {self.log.name}")

    async def _repeat(self, interval: float, action: Callable[[], Any]) -> None:
        while True:
            await asyncio.sleep(interval)
            action()

    def _autosave(self) -> None:
        if self.snapshot():
            logger.debug("Auto-saved workout")

    def start_timers(self) -> None:
        """Start the ticker and autosave tasks on the running event loop."""
        self._require_active("start timers")
        if self._tasks:
            return
        loop = asyncio.get_running_loop()
        self._tasks = [
            loop.create_task(self._repeat(self.tick_interval, self.tick)),
            loop.create_task(self._repeat(self.autosave_interval, self._autosave)),
        ]

    def stop_timers(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks = []

    @property
    def timers_running(self) -> bool:
        return any(not task.done() for task in self._tasks)


class SessionRegistry:
    """Owns the single active workout session of this process."""

    def __init__(self, timers_enabled: bool = True):
        self.timers_enabled = timers_enabled
        self.current: Optional[WorkoutSession] = None

    def activate(self, session: WorkoutSession) -> WorkoutSession:
        """Make session the active one.

        A previous session that is still active is discarded.
        """
        previous = self.current
        if previous is not None and previous is not session:
            if previous.is_active:
                logger.warning(f"Superseding active workout {previous.log.id}")
                previous.discard()
            previous.stop_timers()
        self.current = session
        if self.timers_enabled:
            session.start_timers()
        return session

    def get_active(self) -> Optional[WorkoutSession]:
        if self.current is not None and self.current.is_active:
            return self.current
        return None

    def clear(self) -> None:
        if self.current is not None:
            self.current.stop_timers()
        self.current = None


@lru_cache(maxsize=1)
def get_session_registry() -> SessionRegistry:
    """Dependency function that returns the process-wide session registry."""
    return SessionRegistry(
        timers_enabled=os.environ.get("SESSION_TIMERS_ENABLED", "1") == "1"
    )
