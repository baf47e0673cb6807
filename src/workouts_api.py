"""REST API endpoints for the workout in progress and workout history."""

from typing import List, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from loguru import logger
from pydantic import BaseModel

from errors import PreconditionViolation
from session import (
    SessionRegistry,
    WorkoutSession,
    format_elapsed,
    get_session_registry,
    template_from_log,
)
from storage import Storage, get_storage
from typedefs import WorkoutLog, WorkoutTemplate

router = APIRouter(prefix="/api/v1/workouts", tags=["workouts"])


class StartWorkoutRequest(BaseModel):
    """Request model for starting a workout from a template."""

    template_id: UUID


class SetUpdateRequest(BaseModel):
    """Request model for editing one field of a set."""

    field: Literal["weight", "reps", "notes"]
    value: int | float | str | None = None


class ActiveWorkoutResponse(BaseModel):
    """Response model for the workout in progress."""

    workout: WorkoutLog
    state: str
    elapsed_seconds: int
    elapsed_display: str  # MM:SS


def to_response(session: WorkoutSession) -> ActiveWorkoutResponse:
    return ActiveWorkoutResponse(
        workout=session.log,
        state=session.state.value,
        elapsed_seconds=session.elapsed_seconds,
        elapsed_display=format_elapsed(session.elapsed_seconds),
    )


def get_active_session(registry: SessionRegistry, storage: Storage) -> WorkoutSession:
    """Return the active session, resuming it from the saved snapshot if needed.

    Raises:
        HTTPException: 404 if no workout is in progress
    """
    session = registry.get_active()
    if session:
        return session

    log = storage.get_active_workout()
    if log is None:
        raise HTTPException(status_code=404, detail="No active workout")

    try:
        session = WorkoutSession.resume(log, storage=storage)
    except PreconditionViolation as e:
        # A finished workout left in the active slot is stale
        storage.clear_active_workout()
        raise HTTPException(status_code=404, detail="No active workout") from e

    return registry.activate(session)


def begin_session(
    template: WorkoutTemplate, registry: SessionRegistry, storage: Storage
) -> WorkoutSession:
    """Start a session from template in place of any workout in progress."""
    storage.clear_active_workout()
    session = registry.activate(WorkoutSession.begin(template, storage=storage))
    session.snapshot()
    return session


# ========== Active Workout ==========


@router.post("/active", response_model=ActiveWorkoutResponse, status_code=201)
async def start_workout(
    request: StartWorkoutRequest,
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_session_registry),
) -> ActiveWorkoutResponse:
    """Start a workout from a template.

    Any workout already in progress is discarded.
    """
    template = storage.get_template(request.template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")

    return to_response(begin_session(template, registry, storage))


@router.get("/active", response_model=ActiveWorkoutResponse)
async def get_active_workout(
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_session_registry),
) -> ActiveWorkoutResponse:
    """Get the workout in progress."""
    return to_response(get_active_session(registry, storage))


@router.patch(
    "/active/exercises/{exercise_index}/sets/{set_index}",
    response_model=ActiveWorkoutResponse,
)
async def update_set(
    exercise_index: int,
    set_index: int,
    request: SetUpdateRequest,
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_session_registry),
) -> ActiveWorkoutResponse:
    """Set the weight, reps or notes of one set.

    Raises:
        HTTPException: 409 if the indices are out of range or the value is
            invalid
    """
    session = get_active_session(registry, storage)
    try:
        session.update_set(exercise_index, set_index, request.field, request.value)
    except PreconditionViolation as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return to_response(session)


@router.post(
    "/active/exercises/{exercise_index}/sets/{set_index}/toggle",
    response_model=ActiveWorkoutResponse,
)
async def toggle_set(
    exercise_index: int,
    set_index: int,
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_session_registry),
) -> ActiveWorkoutResponse:
    """Mark a set complete, or incomplete if it already was."""
    session = get_active_session(registry, storage)
    try:
        session.toggle_set_completion(exercise_index, set_index)
    except PreconditionViolation as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return to_response(session)


@router.post("/active/snapshot", response_model=ActiveWorkoutResponse)
async def snapshot_workout(
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_session_registry),
) -> ActiveWorkoutResponse:
    """Save the workout in progress now instead of waiting for autosave."""
    session = get_active_session(registry, storage)
    session.snapshot()
    return to_response(session)


@router.post("/active/finish", response_model=WorkoutLog)
async def finish_workout(
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_session_registry),
) -> WorkoutLog:
    """Finish the workout in progress and add it to history.

    If the workout can't be saved, the last snapshot stays in the active
    slot so the workout can be resumed and finished again.
    """
    session = get_active_session(registry, storage)
    session.snapshot()
    completed = session.finish()
    registry.clear()

    if storage.append_to_history(completed) is None:
        raise HTTPException(
            status_code=500, detail="Failed to save workout. Please try again."
        )

    storage.clear_active_workout()
    logger.info(f"Workout {completed.id} saved to history")
    return completed


@router.delete("/active", status_code=204)
async def discard_workout(
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Response:
    """Cancel the workout in progress. Nothing is saved to history."""
    session = get_active_session(registry, storage)
    session.discard()
    registry.clear()
    storage.clear_active_workout()
    return Response(status_code=204)


# ========== History ==========


@router.get("/history", response_model=List[WorkoutLog])
def list_history(
    limit: int = Query(50, ge=1, le=500),
    storage: Storage = Depends(get_storage),
) -> List[WorkoutLog]:
    """List finished workouts, newest first."""
    return storage.get_history(limit=limit)


@router.post(
    "/history/{log_id}/repeat",
    response_model=ActiveWorkoutResponse,
    status_code=201,
)
async def repeat_workout(
    log_id: UUID,
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_session_registry),
) -> ActiveWorkoutResponse:
    """Start a new workout with the same exercises and set counts as a past one.

    Works even after the plan the workout came from has been regenerated.
    """
    log = storage.get_workout_log(log_id)
    if not log:
        raise HTTPException(status_code=404, detail="Workout not found")

    logger.info(f"Repeating workout {log_id}")
    return to_response(begin_session(template_from_log(log), registry, storage))
