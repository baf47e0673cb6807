"""REST API endpoints for workout templates."""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from storage import Storage, get_storage
from typedefs import WorkoutTemplate

router = APIRouter(prefix="/api/v1/templates", tags=["templates"])


def todays_template(
    templates: List[WorkoutTemplate], today: Optional[date] = None
) -> Optional[WorkoutTemplate]:
    """Pick today's workout by rotating through the templates by weekday.

    Weekdays count from Sunday = 0, so a three-template plan runs
    template 0 on Sunday and Wednesday, 1 on Monday and Thursday, etc.
    """
    if not templates:
        return None
    today = today or date.today()
    day_of_week = today.isoweekday() % 7
    return templates[day_of_week % len(templates)]


@router.get("", response_model=List[WorkoutTemplate])
def list_templates(storage: Storage = Depends(get_storage)) -> List[WorkoutTemplate]:
    """List the templates of the current plan in plan order."""
    return storage.get_templates()


@router.get("/today", response_model=WorkoutTemplate)
def get_todays_template(storage: Storage = Depends(get_storage)) -> WorkoutTemplate:
    """Get the template scheduled for today.

    Raises:
        HTTPException: 404 if there is no plan
    """
    template = todays_template(storage.get_templates())
    if not template:
        raise HTTPException(status_code=404, detail="No workout templates found")
    return template


@router.get("/{template_id}", response_model=WorkoutTemplate)
def get_template(
    template_id: UUID, storage: Storage = Depends(get_storage)
) -> WorkoutTemplate:
    """Get a specific template by ID.

    Raises:
        HTTPException: 404 if template not found
    """
    template = storage.get_template(template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return template
