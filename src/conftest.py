"""Pytest configuration and shared fixtures."""

import random
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from client import get_exercise_catalog
from database import Base, init_database
from main import app
from session import SessionRegistry, get_session_registry
from storage import Storage, get_storage
from typedefs import (
    CacheStatus,
    ExerciseRecord,
    LoggedExercise,
    SetEntry,
    TemplateExercise,
    UserProfile,
    WorkoutLog,
    WorkoutTemplate,
)

# (body part, equipment, how many) making up the fake catalog
CATALOG_LAYOUT = [
    ("chest", "dumbbell", 4),
    ("chest", "barbell", 3),
    ("shoulders", "dumbbell", 3),
    ("triceps", "cable", 3),
    ("triceps", "dumbbell", 2),
    ("back", "barbell", 3),
    ("back", "dumbbell", 3),
    ("back", "body weight", 1),
    ("biceps", "dumbbell", 3),
    ("legs", "barbell", 4),
    ("legs", "dumbbell", 3),
    ("glutes", "body weight", 2),
    ("calves", "body weight", 1),
]


def make_exercise_records() -> list[ExerciseRecord]:
    records = []
    for body_part, equipment, count in CATALOG_LAYOUT:
        for i in range(count):
            records.append(
                ExerciseRecord(
                    id=f"{body_part}-{equipment}-{i}".replace(" ", "_"),
                    name=f"{equipment} {body_part} exercise {i}",
                    body_part=body_part,
                    target=f"{body_part} target",
                    equipment=equipment,
                    gif_url=f"https://example.com/{body_part}-{i}.gif",
                )
            )
    return records


class FakeCatalog:
    """In-memory stand-in for the exercise catalog API."""

    def __init__(self, records=None):
        self.records = make_exercise_records() if records is None else records
        self.fetch_count = 0

    def fetch_all(self):
        self.fetch_count += 1
        return list(self.records)

    def fetch_body_part_list(self):
        return sorted({r.body_part for r in self.records})

    def fetch_equipment_list(self):
        return sorted({r.equipment for r in self.records})

    def cache_status(self):
        return CacheStatus(
            has_cached_data=True,
            cache_age_seconds=0.0,
            is_valid=True,
            exercise_count=len(self.records),
        )


@pytest.fixture
def test_engine():
    """An in-memory SQLite database with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_database(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def storage(test_engine) -> Storage:
    return Storage(sessionmaker(autocommit=False, autoflush=False, bind=test_engine))


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def registry() -> SessionRegistry:
    # Timers are exercised directly in test_session.py
    return SessionRegistry(timers_enabled=False)


@pytest.fixture
def client(storage, fake_catalog, registry):
    """Create test client with storage, catalog and session overrides."""
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_exercise_catalog] = lambda: fake_catalog
    app.dependency_overrides[get_session_registry] = lambda: registry

    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        user_id="user-test",
        fitness_goals=["Strength"],
        experience_level="Beginner",
        available_equipment=["Dumbbells"],
        preferred_split="FullBody",
        workout_frequency=3,
    )


@pytest.fixture
def sample_template() -> WorkoutTemplate:
    return WorkoutTemplate(
        name="Push Day",
        type="Push",
        estimated_duration=18,
        exercises=[
            TemplateExercise(
                exercise_id="0025",
                name="Bench Press",
                body_part="chest",
                target="pectorals",
                equipment="barbell",
                sets=3,
                target_reps="5-8",
                rest_seconds=180,
            ),
            TemplateExercise(
                exercise_id="0405",
                name="Overhead Press",
                body_part="shoulders",
                target="delts",
                equipment="barbell",
                sets=3,
                target_reps="5-8",
                rest_seconds=180,
            ),
        ],
    )


def make_completed_log(
    completed_at: datetime,
    exercise_name: str = "Bench Press",
    sets: list[tuple[float | None, int | None, bool]] = (),
) -> WorkoutLog:
    """A finished log with one exercise made of (weight, reps, completed) sets."""
    return WorkoutLog(
        name="Push Day",
        type="Push",
        started_at=completed_at - timedelta(hours=1),
        completed_at=completed_at,
        exercises=[
            LoggedExercise(
                exercise_id="0025",
                name=exercise_name,
                sets=[
                    SetEntry(set_number=i + 1, weight=w, reps=r, completed=c)
                    for i, (w, r, c) in enumerate(sets)
                ],
            )
        ],
    )


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 12, 10, 18, 0, tzinfo=UTC)
