from datetime import UTC, date, datetime
from enum import Enum
from typing import Annotated, List, Literal
from uuid import UUID, uuid4

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(UTC)


def _ensure_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_ensure_utc)]


class FitnessGoal(str, Enum):
    STRENGTH = "strength"
    HYPERTROPHY = "hypertrophy"
    ENDURANCE = "endurance"
    WEIGHT_LOSS = "weight loss"


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class UserProfile(BaseModel):
    """The user's answers from onboarding.

    Immutable once created; re-onboarding replaces it wholesale.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    fitness_goals: List[str] = Field(min_length=1)  # e.g. ["Strength"]
    experience_level: str
    available_equipment: List[str]
    preferred_split: str  # PPL, UpperLower or FullBody
    workout_frequency: int | None = None  # days per week
    rest_timer_default: int = 90
    weight_unit: Literal["lbs", "kg"] = "lbs"
    created_at: UtcDatetime = Field(default_factory=utcnow)


class ExerciseRecord(BaseModel):
    """An exercise as returned by the exercise catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    body_part: str = Field(alias="bodyPart")
    target: str
    equipment: str
    gif_url: str | None = Field(default=None, alias="gifUrl")


class ExerciseFilter(BaseModel):
    """Criteria for client-side catalog filtering. Unset fields are ignored."""

    body_part: str | None = None
    equipment: str | List[str] | None = None
    target: str | None = None
    search: str | None = None


class RepScheme(BaseModel):
    model_config = ConfigDict(frozen=True)

    sets: int
    reps: str  # e.g. "8-12"
    rest_seconds: int


class TemplateExercise(BaseModel):
    """Exercise within a template with its prescribed volume."""

    exercise_id: str
    name: str
    body_part: str | None = None
    target: str | None = None
    equipment: str | None = None
    gif_url: str | None = None
    sets: int
    target_reps: str
    rest_seconds: int
    notes: str | None = None


class WorkoutTemplate(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    type: str
    estimated_duration: int  # minutes
    created_at: UtcDatetime = Field(default_factory=utcnow)
    exercises: List[TemplateExercise]


class SetEntry(BaseModel):
    """A single set within a logged exercise."""

    set_number: int = Field(ge=1)
    weight: float | None = None
    reps: int | None = None
    completed: bool = False
    rpe: float | None = None
    notes: str | None = None


class LoggedExercise(BaseModel):
    """Exercise in a workout log with performance tracking.

    Carries the display fields and prescription copied from the template
    alongside the sets actually performed.
    """

    exercise_id: str
    name: str
    body_part: str | None = None
    target: str | None = None
    equipment: str | None = None
    gif_url: str | None = None
    target_reps: str | None = None
    rest_seconds: int | None = None
    sets: List[SetEntry]


class WorkoutLog(BaseModel):
    """One performed (or in-progress) workout.

    Totals stay at zero until the workout is finished.
    """

    id: UUID = Field(default_factory=uuid4)
    template_id: UUID | None = None
    name: str
    type: str
    started_at: UtcDatetime = Field(default_factory=utcnow)
    completed_at: UtcDatetime | None = None
    total_volume: float = 0
    total_sets: int = 0
    total_reps: int = 0
    duration_minutes: int = 0
    notes: str | None = None
    elapsed_seconds: int = 0
    exercises: List[LoggedExercise]


class WorkoutStats(BaseModel):
    total_volume: float = 0
    total_sets: int = 0
    total_reps: int = 0


class PersonalRecord(BaseModel):
    max_weight: float
    reps: int | None = None


class VolumePoint(BaseModel):
    date: date
    volume: float


class ExerciseStats(BaseModel):
    """Everything the exercise detail view shows for one exercise."""

    exercise_name: str
    personal_record: PersonalRecord | None = None
    last_performed: datetime | None = None
    volume_trend: List[VolumePoint] = []


class CacheStatus(BaseModel):
    has_cached_data: bool
    cache_age_seconds: float | None = None
    is_valid: bool
    exercise_count: int


class OnboardingRequest(BaseModel):
    """The four onboarding answers."""

    fitness_goals: List[str] = Field(min_length=1)
    experience_level: str
    available_equipment: List[str]
    preferred_split: str


class OnboardingResponse(BaseModel):
    profile: UserProfile
    templates: List[WorkoutTemplate]
