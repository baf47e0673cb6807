"""Persistence for the profile, templates, active workout and history.

Every method is safe to call from request handlers and background tasks
alike: database errors are logged and reported as None, [] or False
instead of raising, and a failed write is rolled back completely.
"""

from datetime import UTC, datetime
from typing import List, Optional
from uuid import UUID

from loguru import logger
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from database import SessionLocal
from models import (
    ActiveWorkoutDB,
    LoggedExerciseDB,
    SetDB,
    TemplateExerciseDB,
    UserProfileDB,
    WorkoutLogDB,
    WorkoutTemplateDB,
)
from typedefs import (
    LoggedExercise,
    SetEntry,
    TemplateExercise,
    UserProfile,
    WorkoutLog,
    WorkoutTemplate,
)


def _profile_from_db(row: UserProfileDB) -> UserProfile:
    return UserProfile(
        user_id=row.user_id,
        fitness_goals=row.fitness_goals,
        experience_level=row.experience_level,
        available_equipment=row.available_equipment,
        preferred_split=row.preferred_split,
        workout_frequency=row.workout_frequency,
        rest_timer_default=row.rest_timer_default,
        weight_unit=row.weight_unit,
        created_at=row.created_at,
    )


def _template_from_db(row: WorkoutTemplateDB) -> WorkoutTemplate:
    return WorkoutTemplate(
        id=row.id,
        name=row.name,
        type=row.type,
        estimated_duration=row.estimated_duration,
        created_at=row.created_at,
        exercises=[
            TemplateExercise(
                exercise_id=ex.exercise_id,
                name=ex.name,
                body_part=ex.body_part,
                target=ex.target,
                equipment=ex.equipment,
                gif_url=ex.gif_url,
                sets=ex.sets,
                target_reps=ex.target_reps,
                rest_seconds=ex.rest_seconds,
                notes=ex.notes,
            )
            for ex in row.exercises
        ],
    )


def _log_from_db(row: WorkoutLogDB) -> WorkoutLog:
    return WorkoutLog(
        id=row.id,
        template_id=row.template_id,
        name=row.name,
        type=row.type,
        started_at=row.started_at,
        completed_at=row.completed_at,
        total_volume=row.total_volume,
        total_sets=row.total_sets,
        total_reps=row.total_reps,
        duration_minutes=row.duration_minutes,
        notes=row.notes,
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
                sets=[
                    SetEntry(
                        set_number=s.set_number,
                        weight=s.weight,
                        reps=s.reps,
                        completed=s.completed,
                        rpe=s.rpe,
                        notes=s.notes,
                    )
                    for s in ex.sets
                ],
            )
            for ex in row.exercises
        ],
    )


def _log_to_db(log: WorkoutLog) -> WorkoutLogDB:
    return WorkoutLogDB(
        id=log.id,
        template_id=log.template_id,
        name=log.name,
        type=log.type,
        started_at=log.started_at,
        completed_at=log.completed_at,
        total_volume=log.total_volume,
        total_sets=log.total_sets,
        total_reps=log.total_reps,
        duration_minutes=log.duration_minutes,
        notes=log.notes,
        exercises=[
            LoggedExerciseDB(
                exercise_id=ex.exercise_id,
                name=ex.name,
                body_part=ex.body_part,
                target=ex.target,
                equipment=ex.equipment,
                gif_url=ex.gif_url,
                target_reps=ex.target_reps,
                rest_seconds=ex.rest_seconds,
                exercise_order=order,
                sets=[
                    SetDB(
                        set_number=s.set_number,
                        weight=s.weight,
                        reps=s.reps,
                        completed=s.completed,
                        rpe=s.rpe,
                        notes=s.notes,
                    )
                    for s in ex.sets
                ],
            )
            for order, ex in enumerate(log.exercises)
        ],
    )


class Storage:
    """Single-user store backed by SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    # ========== User Profile ==========

    def get_user_profile(self) -> Optional[UserProfile]:
        try:
            with self.session_factory() as db:
                row = db.query(UserProfileDB).order_by(UserProfileDB.id.desc()).first()
                return _profile_from_db(row) if row else None
        except (SQLAlchemyError, ValidationError) as e:
            logger.error(f"Error getting user profile: {e}")
            return None

    def save_user_profile(self, profile: UserProfile) -> Optional[UserProfile]:
        """Store the profile, replacing any previous one."""
        try:
            with self.session_factory() as db, db.begin():
                db.query(UserProfileDB).delete()
                db.add(
                    UserProfileDB(
                        user_id=profile.user_id,
                        fitness_goals=list(profile.fitness_goals),
                        experience_level=profile.experience_level,
                        available_equipment=list(profile.available_equipment),
                        workout_frequency=profile.workout_frequency,
                        preferred_split=profile.preferred_split,
                        rest_timer_default=profile.rest_timer_default,
                        weight_unit=profile.weight_unit,
                        created_at=profile.created_at,
                    )
                )
        except SQLAlchemyError as e:
            logger.error(f"Error saving user profile: {e}")
            return None

        logger.info("User profile saved")
        return profile

    # ========== Workout Templates ==========

    def get_templates(self) -> List[WorkoutTemplate]:
        try:
            with self.session_factory() as db:
                rows = (
                    db.query(WorkoutTemplateDB)
                    .order_by(WorkoutTemplateDB.position)
                    .all()
                )
                return [_template_from_db(row) for row in rows]
        except (SQLAlchemyError, ValidationError) as e:
            logger.error(f"Error getting workout templates: {e}")
            return []

    def get_template(self, template_id: UUID) -> Optional[WorkoutTemplate]:
        try:
            with self.session_factory() as db:
                row = db.get(WorkoutTemplateDB, template_id)
                return _template_from_db(row) if row else None
        except (SQLAlchemyError, ValidationError) as e:
            logger.error(f"Error getting workout template {template_id}: {e}")
            return None

    def save_templates(
        self, templates: List[WorkoutTemplate]
    ) -> Optional[List[WorkoutTemplate]]:
        """Replace the stored template set with templates."""
        try:
            with self.session_factory() as db, db.begin():
                db.query(TemplateExerciseDB).delete()
                db.query(WorkoutTemplateDB).delete()
                for position, template in enumerate(templates):
                    db.add(
                        WorkoutTemplateDB(
                            id=template.id,
                            name=template.name,
                            type=template.type,
                            estimated_duration=template.estimated_duration,
                            position=position,
                            created_at=template.created_at,
                            exercises=[
                                TemplateExerciseDB(
                                    exercise_order=order,
                                    **ex.model_dump(),
                                )
                                for order, ex in enumerate(template.exercises)
                            ],
                        )
                    )
        except SQLAlchemyError as e:
            logger.error(f"Error saving workout templates: {e}")
            return None

        logger.info(f"Saved {len(templates)} workout templates")
        return templates

    # ========== Active Workout ==========

    def get_active_workout(self) -> Optional[WorkoutLog]:
        try:
            with self.session_factory() as db:
                row = db.query(ActiveWorkoutDB).first()
                if not row:
                    return None
                return WorkoutLog.model_validate(row.workout_data)
        except (SQLAlchemyError, ValidationError) as e:
            logger.error(f"Error getting active workout: {e}")
            return None

    def save_active_workout(self, log: WorkoutLog) -> Optional[WorkoutLog]:
        """Overwrite the active workout slot with a snapshot of log."""
        try:
            with self.session_factory() as db, db.begin():
                db.query(ActiveWorkoutDB).delete()
                db.add(
                    ActiveWorkoutDB(
                        workout_data=log.model_dump(mode="json"),
                        last_updated=datetime.now(UTC),
                    )
                )
        except SQLAlchemyError as e:
            logger.error(f"Error saving active workout: {e}")
            return None

        logger.debug("Active workout saved")
        return log

    def clear_active_workout(self) -> bool:
        try:
            with self.session_factory() as db, db.begin():
                db.query(ActiveWorkoutDB).delete()
        except SQLAlchemyError as e:
            logger.error(f"Error clearing active workout: {e}")
            return False

        logger.info("Active workout cleared")
        return True

    # ========== History ==========

    def append_to_history(self, log: WorkoutLog) -> Optional[WorkoutLog]:
        """Record a finished workout along with all its exercises and sets."""
        try:
            with self.session_factory() as db, db.begin():
                db.add(_log_to_db(log))
        except SQLAlchemyError as e:
            logger.error(f"Error adding workout to history: {e}")
            return None

        logger.info(f"Workout {log.id} added to history")
        return log

    def get_workout_log(self, log_id: UUID) -> Optional[WorkoutLog]:
        try:
            with self.session_factory() as db:
                row = db.get(WorkoutLogDB, log_id)
                return _log_from_db(row) if row else None
        except (SQLAlchemyError, ValidationError) as e:
            logger.error(f"Error getting workout {log_id}: {e}")
            return None

    def get_history(self, limit: Optional[int] = 50) -> List[WorkoutLog]:
        """Finished workouts, newest first. limit=None returns all of them."""
        try:
            with self.session_factory() as db:
                query = db.query(WorkoutLogDB).order_by(
                    WorkoutLogDB.completed_at.desc()
                )
                if limit is not None:
                    query = query.limit(limit)
                return [_log_from_db(row) for row in query.all()]
        except (SQLAlchemyError, ValidationError) as e:
            logger.error(f"Error getting workout history: {e}")
            return []

    # ========== Utilities ==========

    def clear_all_data(self) -> bool:
        try:
            with self.session_factory() as db, db.begin():
                for model in (
                    SetDB,
                    LoggedExerciseDB,
                    WorkoutLogDB,
                    ActiveWorkoutDB,
                    TemplateExerciseDB,
                    WorkoutTemplateDB,
                    UserProfileDB,
                ):
                    db.query(model).delete()
        except SQLAlchemyError as e:
            logger.error(f"Error clearing data: {e}")
            return False

        logger.info("All data cleared")
        return True

    def export_data(self) -> dict:
        """Everything stored, as JSON-ready data."""
        profile = self.get_user_profile()
        active = self.get_active_workout()
        return {
            "user_profile": profile.model_dump(mode="json") if profile else None,
            "templates": [t.model_dump(mode="json") for t in self.get_templates()],
            "history": [
                log.model_dump(mode="json") for log in self.get_history(limit=None)
            ],
            "active_workout": active.model_dump(mode="json") if active else None,
        }


def get_storage() -> Storage:
    """Dependency function that provides the application's storage."""
    return Storage(SessionLocal)
