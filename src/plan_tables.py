"""Fixed rule tables used by the plan generator."""

from typing import Dict, List, Tuple

from typedefs import ExperienceLevel, FitnessGoal, RepScheme

# Split identifier -> day labels for one week, in order
WORKOUT_SPLITS: Dict[str, Dict] = {
    "PPL": {
        "name": "Push Pull Legs",
        "frequency": 6,
        "workouts": ["Push", "Pull", "Legs", "Push", "Pull", "Legs"],
    },
    "UpperLower": {
        "name": "Upper/Lower",
        "frequency": 4,
        "workouts": ["Upper", "Lower", "Upper", "Lower"],
    },
    "FullBody": {
        "name": "Full Body",
        "frequency": 3,
        "workouts": ["Full Body", "Full Body", "Full Body"],
    },
}

# Day label -> (body part, exercise count) in selection order
WORKOUT_STRUCTURES: Dict[str, List[Tuple[str, int]]] = {
    "Push": [("chest", 3), ("shoulders", 2), ("triceps", 2)],
    "Pull": [("back", 4), ("biceps", 2)],
    "Legs": [("legs", 5), ("glutes", 1)],
    "Upper": [
        ("chest", 2),
        ("back", 2),
        ("shoulders", 1),
        ("triceps", 1),
        ("biceps", 1),
    ],
    "Lower": [("legs", 4), ("glutes", 2), ("calves", 1)],
    "Full Body": [("chest", 1), ("back", 2), ("legs", 2), ("shoulders", 1)],
}

REP_SCHEMES: Dict[FitnessGoal, Dict[ExperienceLevel, RepScheme]] = {
    FitnessGoal.STRENGTH: {
        ExperienceLevel.BEGINNER: RepScheme(sets=3, reps="5-8", rest_seconds=180),
        ExperienceLevel.INTERMEDIATE: RepScheme(sets=4, reps="4-6", rest_seconds=180),
        ExperienceLevel.ADVANCED: RepScheme(sets=5, reps="3-5", rest_seconds=240),
    },
    FitnessGoal.HYPERTROPHY: {
        ExperienceLevel.BEGINNER: RepScheme(sets=3, reps="8-12", rest_seconds=90),
        ExperienceLevel.INTERMEDIATE: RepScheme(sets=3, reps="8-12", rest_seconds=90),
        ExperienceLevel.ADVANCED: RepScheme(sets=4, reps="8-12", rest_seconds=90),
    },
    FitnessGoal.ENDURANCE: {
        ExperienceLevel.BEGINNER: RepScheme(sets=2, reps="12-15", rest_seconds=60),
        ExperienceLevel.INTERMEDIATE: RepScheme(sets=3, reps="15-20", rest_seconds=60),
        ExperienceLevel.ADVANCED: RepScheme(sets=3, reps="20-25", rest_seconds=45),
    },
    FitnessGoal.WEIGHT_LOSS: {
        ExperienceLevel.BEGINNER: RepScheme(sets=3, reps="12-15", rest_seconds=60),
        ExperienceLevel.INTERMEDIATE: RepScheme(sets=3, reps="12-15", rest_seconds=45),
        ExperienceLevel.ADVANCED: RepScheme(sets=4, reps="15-20", rest_seconds=45),
    },
}

# Onboarding equipment choices -> catalog equipment tags
EQUIPMENT_SYNONYMS: Dict[str, str] = {
    "barbell": "barbell",
    "dumbbells": "dumbbell",
    "cable machine": "cable",
    "resistance bands": "band",
    "bodyweight": "body weight",
    "smith machine": "smith machine",
    "kettlebell": "kettlebell",
}

MINUTES_PER_SET = 3
