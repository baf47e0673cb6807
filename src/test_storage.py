"""Tests for the SQLAlchemy-backed storage."""

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from conftest import make_completed_log
from session import WorkoutSession
from storage import Storage
from typedefs import WorkoutTemplate


@pytest.fixture
def broken_storage():
    """Storage pointed at a database with no tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield Storage(sessionmaker(bind=engine))
    engine.dispose()


def test_profile_round_trip(storage, profile):
    assert storage.get_user_profile() is None

    assert storage.save_user_profile(profile) == profile
    loaded = storage.get_user_profile()

    assert loaded == profile
    assert loaded.created_at.tzinfo is not None


def test_save_profile_replaces_previous(storage, profile):
    storage.save_user_profile(profile)
    replacement = profile.model_copy(
        update={"user_id": "user-other", "preferred_split": "PPL"}
    )
    storage.save_user_profile(replacement)

    loaded = storage.get_user_profile()
    assert loaded.user_id == "user-other"
    assert loaded.preferred_split == "PPL"


def test_templates_keep_plan_order(storage, sample_template):
    pull = WorkoutTemplate(name="Pull Day", type="Pull", estimated_duration=9, exercises=[])
    legs = WorkoutTemplate(name="Leg Day", type="Legs", estimated_duration=9, exercises=[])

    storage.save_templates([sample_template, pull, legs])
    templates = storage.get_templates()

    assert [t.name for t in templates] == ["Push Day", "Pull Day", "Leg Day"]
    assert templates[0] == sample_template


def test_save_templates_replaces_plan(storage, sample_template):
    storage.save_templates([sample_template])
    other = WorkoutTemplate(name="Upper Body", type="Upper", estimated_duration=9, exercises=[])
    storage.save_templates([other])

    assert [t.name for t in storage.get_templates()] == ["Upper Body"]
    assert storage.get_template(sample_template.id) is None
    assert storage.get_template(other.id).name == "Upper Body"


def test_active_workout_slot(storage, sample_template):
    assert storage.get_active_workout() is None

    session = WorkoutSession.begin(sample_template)
    session.update_set(0, 0, "weight", 135)
    session.tick(42)
    storage.save_active_workout(session.log)

    loaded = storage.get_active_workout()
    assert loaded == session.log
    assert loaded.elapsed_seconds == 42

    session.update_set(0, 0, "reps", 8)
    storage.save_active_workout(session.log)
    assert storage.get_active_workout().exercises[0].sets[0].reps == 8

    assert storage.clear_active_workout() is True
    assert storage.get_active_workout() is None


def test_history_newest_first(storage, now):
    older = make_completed_log(now - timedelta(days=2), sets=[(100, 5, True)])
    newest = make_completed_log(now, sets=[(105, 5, True)])
    middle = make_completed_log(now - timedelta(days=1), sets=[(95, 5, False)])

    for log in (older, newest, middle):
        storage.append_to_history(log)

    history = storage.get_history()
    assert [log.id for log in history] == [newest.id, middle.id, older.id]
    assert history[0].completed_at == now
    assert history[1].exercises[0].sets[0].completed is False


def test_history_limit(storage, now):
    for days in range(5):
        storage.append_to_history(
            make_completed_log(now - timedelta(days=days), sets=[(100, 5, True)])
        )

    assert len(storage.get_history(limit=3)) == 3
    assert len(storage.get_history(limit=None)) == 5


def test_history_keeps_sets_in_order(storage, now):
    log = make_completed_log(
        now, sets=[(100, 5, True), (110, 3, True), (None, None, False)]
    )
    storage.append_to_history(log)

    sets = storage.get_history()[0].exercises[0].sets
    assert [(s.set_number, s.weight, s.reps) for s in sets] == [
        (1, 100, 5),
        (2, 110, 3),
        (3, None, None),
    ]


def test_get_workout_log_keeps_prescription(storage, sample_template):
    session = WorkoutSession.begin(sample_template)
    log = session.finish()
    storage.append_to_history(log)

    loaded = storage.get_workout_log(log.id)

    assert loaded.id == log.id
    assert [(ex.target_reps, ex.rest_seconds) for ex in loaded.exercises] == [
        ("5-8", 180),
        ("5-8", 180),
    ]
    assert storage.get_workout_log(uuid4()) is None


def test_clear_all_data(storage, profile, sample_template, now):
    storage.save_user_profile(profile)
    storage.save_templates([sample_template])
    storage.save_active_workout(WorkoutSession.begin(sample_template).log)
    storage.append_to_history(make_completed_log(now, sets=[(100, 5, True)]))

    assert storage.clear_all_data() is True

    assert storage.get_user_profile() is None
    assert storage.get_templates() == []
    assert storage.get_active_workout() is None
    assert storage.get_history() == []


def test_export_data(storage, profile, sample_template, now):
    storage.save_user_profile(profile)
    storage.save_templates([sample_template])
    storage.append_to_history(make_completed_log(now, sets=[(100, 5, True)]))

    data = storage.export_data()

    assert data["user_profile"]["user_id"] == "user-test"
    assert [t["name"] for t in data["templates"]] == ["Push Day"]
    assert len(data["history"]) == 1
    assert data["active_workout"] is None


def test_errors_are_reported_not_raised(broken_storage, profile, sample_template, now):
    assert broken_storage.get_user_profile() is None
    assert broken_storage.save_user_profile(profile) is None
    assert broken_storage.get_templates() == []
    assert broken_storage.save_templates([sample_template]) is None
    assert broken_storage.get_active_workout() is None
    assert broken_storage.clear_active_workout() is False
    assert broken_storage.append_to_history(make_completed_log(now)) is None
    assert broken_storage.get_history() == []
    assert broken_storage.clear_all_data() is False
