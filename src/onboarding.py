"""Onboarding endpoints: store the user's profile and build their plan."""

from typing import List
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from client import get_exercise_catalog
from errors import CatalogUnavailableError, PlanGenerationError
from exercise_catalog import ExerciseProvider
from plan_generator import create_plan_for_profile, workout_frequency_for_split
from storage import Storage, get_storage
from typedefs import (
    OnboardingRequest,
    OnboardingResponse,
    UserProfile,
    WorkoutTemplate,
)

router = APIRouter(prefix="/api/v1/onboarding", tags=["onboarding"])


def build_user_profile(request: OnboardingRequest) -> UserProfile:
    """Create a profile from the onboarding answers with default settings."""
    return UserProfile(
        user_id=f"user-{uuid4().hex}",
        fitness_goals=request.fitness_goals,
        experience_level=request.experience_level,
        available_equipment=request.available_equipment,
        preferred_split=request.preferred_split,
        workout_frequency=workout_frequency_for_split(request.preferred_split),
    )


def generate_and_save_plan(
    profile: UserProfile, catalog: ExerciseProvider, storage: Storage
) -> List[WorkoutTemplate]:
    """Generate templates for profile and replace the stored plan with them.

    Raises:
        HTTPException: 422 if no workouts could be generated, 503 if the
            catalog is unreachable, 500 if the plan can't be saved
    """
    try:
        templates = create_plan_for_profile(profile, catalog)
    except PlanGenerationError as e:
        logger.error("No templates generated")
        raise HTTPException(status_code=422, detail=str(e)) from e
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    if storage.save_templates(templates) is None:
        raise HTTPException(status_code=500, detail="Failed to save workout plan")

    return templates


@router.post("/complete", response_model=OnboardingResponse, status_code=201)
def complete_onboarding(
    request: OnboardingRequest,
    storage: Storage = Depends(get_storage),
    catalog: ExerciseProvider = Depends(get_exercise_catalog),
) -> OnboardingResponse:
    """Finish onboarding.

    This endpoint:
    1. Builds the user profile from the onboarding answers
    2. Saves it, replacing any previous profile
    3. Generates a workout plan for it
    4. Saves the plan, replacing any previous plan
    """
    logger.info("Completing onboarding")
    profile = build_user_profile(request)

    if storage.save_user_profile(profile) is None:
        raise HTTPException(status_code=500, detail="Failed to save user profile")

    templates = generate_and_save_plan(profile, catalog, storage)
    return OnboardingResponse(profile=profile, templates=templates)


@router.get("/profile", response_model=UserProfile)
def get_profile(storage: Storage = Depends(get_storage)) -> UserProfile:
    """Get the current user profile.

    Raises:
        HTTPException: 404 if onboarding hasn't been completed
    """
    profile = storage.get_user_profile()
    if not profile:
        raise HTTPException(status_code=404, detail="No user profile found")
    return profile


@router.post("/regenerate-plan", response_model=List[WorkoutTemplate])
def regenerate_plan(
    storage: Storage = Depends(get_storage),
    catalog: ExerciseProvider = Depends(get_exercise_catalog),
) -> List[WorkoutTemplate]:
    """Build a fresh plan for the current profile, replacing the old one."""
    profile = storage.get_user_profile()
    if not profile:
        raise HTTPException(status_code=404, detail="No user profile found")

    return generate_and_save_plan(profile, catalog, storage)
