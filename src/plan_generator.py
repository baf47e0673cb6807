"""Rule-based workout plan generation.

A plan is one template per distinct day of the user's preferred split.
Sets, reps and rest come from a fixed table keyed by goal and experience;
exercises are drawn at random from the catalog entries matching the user's
equipment.
"""

import random
from typing import List, Optional

from loguru import logger

from errors import CatalogUnavailableError, PlanGenerationError
from exercise_catalog import ExerciseProvider, filter_exercises
from plan_tables import (
    EQUIPMENT_SYNONYMS,
    MINUTES_PER_SET,
    REP_SCHEMES,
    WORKOUT_SPLITS,
    WORKOUT_STRUCTURES,
)
from typedefs import (
    ExerciseFilter,
    ExerciseRecord,
    ExperienceLevel,
    FitnessGoal,
    RepScheme,
    TemplateExercise,
    UserProfile,
    WorkoutTemplate,
)


def resolve_primary_goal(goals: Optional[List[str]]) -> FitnessGoal:
    """Map the first goal the user picked onto a rep scheme key.

    Matching is by substring so free-text goals like "Build Strength" work.
    Anything unrecognised falls back to hypertrophy.
    """
    if not goals:
        return FitnessGoal.HYPERTROPHY

    goal = goals[0].lower()

    if "strength" in goal:
        return FitnessGoal.STRENGTH
    if "hypertrophy" in goal:
        return FitnessGoal.HYPERTROPHY
    if "endurance" in goal:
        return FitnessGoal.ENDURANCE
    if "weight" in goal or "loss" in goal:
        return FitnessGoal.WEIGHT_LOSS

    return FitnessGoal.HYPERTROPHY


def resolve_experience_level(level: Optional[str]) -> ExperienceLevel:
    level = (level or "").lower()

    if "beginner" in level:
        return ExperienceLevel.BEGINNER
    if "intermediate" in level:
        return ExperienceLevel.INTERMEDIATE
    if "advanced" in level:
        return ExperienceLevel.ADVANCED

    return ExperienceLevel.BEGINNER


def get_rep_scheme(goal: FitnessGoal, experience: ExperienceLevel) -> RepScheme:
    return REP_SCHEMES[goal][experience]


def normalize_equipment(equipment: str) -> str:
    """Translate an onboarding equipment choice into the catalog's tag."""
    equipment = equipment.lower()
    return EQUIPMENT_SYNONYMS.get(equipment, equipment)


def workout_frequency_for_split(split: str) -> Optional[int]:
    split_config = WORKOUT_SPLITS.get(split)
    return split_config["frequency"] if split_config else None


def unique_workout_types(split: str) -> List[str]:
    """Distinct day labels of a split in first-seen order ([] if unknown)."""
    split_config = WORKOUT_SPLITS.get(split)
    if not split_config:
        return []
    return list(dict.fromkeys(split_config["workouts"]))


def select_random_exercises(
    exercises: List[ExerciseRecord], count: int, rng: random.Random
) -> List[ExerciseRecord]:
    """Uniform sample without replacement; returns all of them if too few."""
    if not exercises:
        return []
    return rng.sample(exercises, min(count, len(exercises)))


def estimate_duration(exercises: List[TemplateExercise]) -> int:
    total_sets = sum(ex.sets for ex in exercises)
    return round(total_sets * MINUTES_PER_SET)


def build_template(
    workout_type: str,
    available: List[ExerciseRecord],
    rep_scheme: RepScheme,
    rng: random.Random,
) -> Optional[WorkoutTemplate]:
    """Assemble the template for one day label, or None if it can't be built."""
    structure = WORKOUT_STRUCTURES.get(workout_type)
    if not structure:
        logger.warning(f"No structure defined for {workout_type}")
        return None

    workout_exercises = []
    for body_part, count in structure:
        candidates = filter_exercises(available, ExerciseFilter(body_part=body_part))
        for exercise in select_random_exercises(candidates, count, rng):
            workout_exercises.append(
                TemplateExercise(
                    exercise_id=exercise.id,
                    name=exercise.name,
                    body_part=exercise.body_part,
                    target=exercise.target,
                    equipment=exercise.equipment,
                    gif_url=exercise.gif_url,
                    sets=rep_scheme.sets,
                    target_reps=rep_scheme.reps,
                    rest_seconds=rep_scheme.rest_seconds,
                )
            )

    if not workout_exercises:
        logger.warning(f"No exercises available for {workout_type}")
        return None

    return WorkoutTemplate(
        name=f"{workout_type} Day",
        type=workout_type,
        estimated_duration=estimate_duration(workout_exercises),
        exercises=workout_exercises,
    )


def generate_workout_plan(
    profile: UserProfile,
    catalog: ExerciseProvider,
    rng: Optional[random.Random] = None,
) -> List[WorkoutTemplate]:
    """Generate one workout template per distinct day of the profile's split.

    Args:
        profile: The user's onboarding answers
        catalog: Source of exercises
        rng: Random source for exercise selection (seed it for repeatable plans)

    Returns:
        Templates in split order. Days that can't be built are skipped, so
        the list may be shorter than the split or empty.

    Raises:
        CatalogUnavailableError: If the catalog itself raises
    """
    rng = rng or random.Random()
    logger.info("Generating workout plan")

    try:
        all_exercises = catalog.fetch_all()
    except Exception as e:
        raise CatalogUnavailableError(f"Exercise catalog unavailable: {e}") from e

    if not all_exercises:
        logger.warning("No exercises available from catalog")
        return []

    user_equipment = [normalize_equipment(eq) for eq in profile.available_equipment]
    available = filter_exercises(all_exercises, ExerciseFilter(equipment=user_equipment))
    logger.info(f"{len(available)} exercises available with user's equipment")

    if not available:
        logger.warning("No exercises match the user's equipment")
        return []

    workout_types = unique_workout_types(profile.preferred_split)
    if not workout_types:
        logger.error(f"Invalid workout split: {profile.preferred_split}")
        return []

    goal = resolve_primary_goal(profile.fitness_goals)
    experience = resolve_experience_level(profile.experience_level)
    rep_scheme = get_rep_scheme(goal, experience)
    logger.info(
        f"Goal: {goal.value}, experience: {experience.value}, "
        f"{rep_scheme.sets} sets x {rep_scheme.reps} reps, "
        f"{rep_scheme.rest_seconds}s rest"
    )

    templates = []
    for workout_type in workout_types:
        template = build_template(workout_type, available, rep_scheme, rng)
        if template is None:
            continue
        templates.append(template)
        logger.info(
            f"Created {workout_type} workout with {len(template.exercises)} exercises"
        )

    logger.info(f"Generated {len(templates)} workout templates")
    return templates


def create_plan_for_profile(
    profile: UserProfile,
    catalog: ExerciseProvider,
    rng: Optional[random.Random] = None,
) -> List[WorkoutTemplate]:
    """Like generate_workout_plan, but an empty plan is an error.

    Raises:
        PlanGenerationError: If no template could be generated
        CatalogUnavailableError: If the catalog itself raises
    """
    templates = generate_workout_plan(profile, catalog, rng)
    if not templates:
        raise PlanGenerationError(
            "Could not generate any workouts. Check your equipment selection "
            "and internet connection and try again."
        )
    return templates
