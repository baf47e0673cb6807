"""REST API endpoints for the exercise catalog and per-exercise stats."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from analytics import exercise_stats
from client import get_exercise_catalog
from exercise_catalog import ExerciseCatalog, filter_exercises
from storage import Storage, get_storage
from typedefs import CacheStatus, ExerciseFilter, ExerciseRecord, ExerciseStats

router = APIRouter(prefix="/api/v1/exercises", tags=["exercises"])


@router.get("", response_model=List[ExerciseRecord])
def list_exercises(
    body_part: Optional[str] = None,
    equipment: Optional[List[str]] = Query(None),
    target: Optional[str] = None,
    search: Optional[str] = None,
    catalog: ExerciseCatalog = Depends(get_exercise_catalog),
) -> List[ExerciseRecord]:
    """List catalog exercises matching all the given filters.

    equipment may be repeated to match any of several tags.
    """
    criteria = ExerciseFilter(
        body_part=body_part, equipment=equipment, target=target, search=search
    )
    return filter_exercises(catalog.fetch_all(), criteria)


@router.get("/body-parts", response_model=List[str])
def list_body_parts(
    catalog: ExerciseCatalog = Depends(get_exercise_catalog),
) -> List[str]:
    return catalog.fetch_body_part_list()


@router.get("/equipment", response_model=List[str])
def list_equipment(
    catalog: ExerciseCatalog = Depends(get_exercise_catalog),
) -> List[str]:
    return catalog.fetch_equipment_list()


@router.get("/cache-status", response_model=CacheStatus)
def get_cache_status(
    catalog: ExerciseCatalog = Depends(get_exercise_catalog),
) -> CacheStatus:
    return catalog.cache_status()


@router.get("/{exercise_name}/stats", response_model=ExerciseStats)
def get_exercise_stats(
    exercise_name: str,
    window_days: int = Query(30, ge=1),
    storage: Storage = Depends(get_storage),
) -> ExerciseStats:
    """Personal record, last performed date and volume trend of an exercise."""
    history = storage.get_history(limit=None)
    return exercise_stats(history, exercise_name, window_days)
