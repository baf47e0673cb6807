"""SQLAlchemy database models."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Uuid,
)
from sqlalchemy.orm import relationship

from database import Base


def _now():
    return datetime.now(UTC)


class UserProfileDB(Base):
    """Database model for the user profile.

    Only one row is kept; re-onboarding replaces it.
    """

    __tablename__ = "user_profile"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, unique=True, nullable=False)
    fitness_goals = Column(JSON, nullable=False)  # list of goal names
    experience_level = Column(String, nullable=False)
    available_equipment = Column(JSON, nullable=False)  # list of equipment names
    workout_frequency = Column(Integer, nullable=True)
    preferred_split = Column(String, nullable=True)
    rest_timer_default = Column(Integer, nullable=True)
    weight_unit = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    def __repr__(self):
        return f"<UserProfileDB(id={self.id}, user_id={self.user_id})>"


class WorkoutTemplateDB(Base):
    """Database model for generated workout templates.

    The whole set is replaced when the plan is regenerated.
    """

    __tablename__ = "workout_templates"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    estimated_duration = Column(Integer, nullable=True)
    position = Column(Integer, nullable=False, default=0)  # order within the plan
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    exercises = relationship(
        "TemplateExerciseDB",
        order_by="TemplateExerciseDB.exercise_order",
        back_populates="template",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<WorkoutTemplateDB(id={self.id}, name={self.name})>"


class TemplateExerciseDB(Base):
    __tablename__ = "template_exercises"

    id = Column(Integer, primary_key=True, autoincrement=True)
    template_id = Column(Uuid, ForeignKey("workout_templates.id"), nullable=False)
    exercise_id = Column(String, nullable=False)
    name = Column(String, nullable=False)
    body_part = Column(String, nullable=True)
    target = Column(String, nullable=True)
    equipment = Column(String, nullable=True)
    gif_url = Column(String, nullable=True)
    sets = Column(Integer, nullable=False)
    target_reps = Column(String, nullable=False)
    rest_seconds = Column(Integer, nullable=True)
    notes = Column(String, nullable=True)
    exercise_order = Column(Integer, nullable=False)

    template = relationship("WorkoutTemplateDB", back_populates="exercises")

    def __repr__(self):
        return f"<TemplateExerciseDB(id={self.id}, name={self.name})>"


class WorkoutLogDB(Base):
    """Database model for finished workouts.

    Rows are append-only: a log is written once when the workout is
    finished and never updated.
    """

    __tablename__ = "workout_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # No foreign key: templates are replaced on regeneration, history stays
    template_id = Column(Uuid, nullable=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True, index=True)
    total_volume = Column(Float, nullable=False, default=0)
    total_sets = Column(Integer, nullable=False, default=0)
    total_reps = Column(Integer, nullable=False, default=0)
    duration_minutes = Column(Integer, nullable=False, default=0)
    notes = Column(String, nullable=True)

    exercises = relationship(
        "LoggedExerciseDB",
        order_by="LoggedExerciseDB.exercise_order",
        back_populates="log",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<WorkoutLogDB(id={self.id}, name={self.name})>"


class LoggedExerciseDB(Base):
    __tablename__ = "logged_exercises"

    id = Column(Integer, primary_key=True, autoincrement=True)
    log_id = Column(Uuid, ForeignKey("workout_logs.id"), nullable=False)
    exercise_id = Column(String, nullable=False)
    name = Column(String, nullable=False, index=True)
    body_part = Column(String, nullable=True)
    target = Column(String, nullable=True)
    equipment = Column(String, nullable=True)
    gif_url = Column(String, nullable=True)
    target_reps = Column(String, nullable=True)
    rest_seconds = Column(Integer, nullable=True)
    exercise_order = Column(Integer, nullable=False)

    log = relationship("WorkoutLogDB", back_populates="exercises")
    sets = relationship(
        "SetDB",
        order_by="SetDB.set_number",
        back_populates="logged_exercise",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<LoggedExerciseDB(id={self.id}, name={self.name})>"


class SetDB(Base):
    __tablename__ = "sets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    logged_exercise_id = Column(
        Integer, ForeignKey("logged_exercises.id"), nullable=False
    )
    set_number = Column(Integer, nullable=False)
    weight = Column(Float, nullable=True)
    reps = Column(Integer, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    rpe = Column(Float, nullable=True)
    notes = Column(String, nullable=True)

    logged_exercise = relationship("LoggedExerciseDB", back_populates="sets")

    def __repr__(self):
        return f"<SetDB(id={self.id}, set_number={self.set_number})>"


class ActiveWorkoutDB(Base):
    """Snapshot of the workout in progress. At most one row exists."""

    __tablename__ = "active_workout"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workout_data = Column(JSON, nullable=False)  # serialized WorkoutLog
    last_updated = Column(DateTime(timezone=True), nullable=False, default=_now)
