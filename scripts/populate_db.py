#!/usr/bin/env python3
"""Script to populate the database with a profile, a plan and test history."""

import os
import random
import sys
from datetime import timedelta

from dotenv import load_dotenv

# Add src to path so we can import our modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from database import init_database
from plan_generator import generate_workout_plan
from session import WorkoutSession
from storage import Storage
from typedefs import ExerciseRecord, UserProfile, utcnow

# Load environment variables
load_dotenv()

# Enough of the catalog to build a Push/Pull/Legs plan offline
SAMPLE_EXERCISES = [
    ("0025", "barbell bench press", "chest", "pectorals", "barbell"),
    ("0289", "dumbbell incline bench press", "chest", "pectorals", "dumbbell"),
    ("0308", "dumbbell fly", "chest", "pectorals", "dumbbell"),
    ("1457", "barbell seated overhead press", "shoulders", "delts", "barbell"),
    ("0334", "dumbbell lateral raise", "shoulders", "delts", "dumbbell"),
    ("0200", "cable pushdown", "triceps", "triceps", "cable"),
    ("0430", "dumbbell kickback", "triceps", "triceps", "dumbbell"),
    ("0032", "barbell deadlift", "back", "glutes", "barbell"),
    ("0027", "barbell bent over row", "back", "upper back", "barbell"),
    ("0293", "dumbbell one arm row", "back", "upper back", "dumbbell"),
    ("0198", "cable pulldown", "back", "lats", "cable"),
    ("0031", "barbell curl", "biceps", "biceps", "barbell"),
    ("0294", "dumbbell hammer curl", "biceps", "biceps", "dumbbell"),
    ("0043", "barbell full squat", "legs", "quads", "barbell"),
    ("0085", "barbell romanian deadlift", "legs", "hamstrings", "barbell"),
    ("0336", "dumbbell lunge", "legs", "quads", "dumbbell"),
    ("0410", "dumbbell goblet squat", "legs", "quads", "dumbbell"),
    ("1060", "barbell hip thrust", "glutes", "glutes", "barbell"),
]


class SampleCatalog:
    def fetch_all(self):
        return [
            ExerciseRecord(
                id=ex_id, name=name, body_part=body_part, target=target, equipment=equipment
            )
            for ex_id, name, body_part, target, equipment in SAMPLE_EXERCISES
        ]


def create_profile_and_plan(storage: Storage, seed: int):
    """Store a PPL hypertrophy profile and generate its templates."""
    profile = UserProfile(
        user_id="user-local",
        fitness_goals=["Hypertrophy"],
        experience_level="Intermediate",
        available_equipment=["Barbell", "Dumbbells", "Cable Machine"],
        preferred_split="PPL",
        workout_frequency=6,
    )
    storage.save_user_profile(profile)
    print(f"Created profile: {profile.user_id} ({profile.preferred_split})")

    templates = generate_workout_plan(profile, SampleCatalog(), random.Random(seed))
    storage.save_templates(templates)
    print(f"Created {len(templates)} templates:")
    for template in templates:
        print(f"  - {template.name}: {len(template.exercises)} exercises")
    return templates


def create_test_history(storage: Storage, weeks: int, seed: int):
    """Log a workout every other day, adding weight week over week."""
    templates = storage.get_templates()
    if not templates:
        print("No templates found. Run with --plan first.")
        return

    rng = random.Random(seed)
    start = utcnow() - timedelta(weeks=weeks)
    days = weeks * 7

    count = 0
    for day in range(0, days, 2):
        template = templates[count % len(templates)]
        finished_at = start + timedelta(days=day, hours=18)
        session = WorkoutSession.begin(template, clock=lambda: finished_at)

        for i, exercise in enumerate(session.log.exercises):
            weight = 45 + 10 * i + 5 * (day // 7)
            for j in range(len(exercise.sets)):
                session.update_set(i, j, "weight", weight)
                session.update_set(i, j, "reps", rng.randint(8, 12))
                # Now and then a set is left unfinished
                if rng.random() > 0.1:
                    session.toggle_set_completion(i, j)

        session.tick(rng.randint(45, 75) * 60)
        log = session.finish()
        log.started_at = finished_at - timedelta(seconds=log.elapsed_seconds)
        storage.append_to_history(log)
        count += 1
        print(
            f"  - {log.completed_at:%Y-%m-%d} {log.name}: {log.total_sets} sets, "
            f"{log.total_volume:.0f} volume, {log.duration_minutes} min"
        )

    print(f"\nCreated {count} workouts over {weeks} weeks")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Populate database with test data")
    parser.add_argument(
        "--plan",
        action="store_true",
        help="Create a user profile and its workout plan",
    )
    parser.add_argument(
        "--history",
        action="store_true",
        help="Create finished workouts from the stored plan",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Run all population functions",
    )
    parser.add_argument("--weeks", type=int, default=4, help="Weeks of history")
    parser.add_argument("--seed", type=int, default=7, help="Random seed")
    parser.add_argument(
        "--clear", action="store_true", help="Delete all existing data first"
    )

    args = parser.parse_args()

    # If no args, default to --all
    if not (args.plan or args.history or args.all):
        args.all = True

    init_database()
    storage = Storage()

    if args.clear:
        storage.clear_all_data()
        print("Cleared existing data")

    if args.all or args.plan:
        create_profile_and_plan(storage, args.seed)

    if args.all or args.history:
        create_test_history(storage, args.weeks, args.seed)

    print("\nDatabase populated successfully!")
