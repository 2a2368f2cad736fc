"""
Activity routes for the portfolio API.
"""

from fastapi import APIRouter, Depends, status

from portfolio.auth import get_current_user, get_user_store
from portfolio.exceptions import NotFoundError
from portfolio.schemas import ActivityCreate, ActivityUpdate, ActivityRead, ActivityLinks
from portfolio.services.graph import activity_links
from portfolio.services.portfolio import get_project_details
from portfolio.store import RecordKind, RecordStore

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.post("/", response_model=ActivityRead, status_code=status.HTTP_201_CREATED)
async def create_activity(
    activity_in: ActivityCreate,
    store: RecordStore = Depends(get_user_store),
) -> ActivityRead:
    """Create a new activity in a project."""
    return await store.create(RecordKind.ACTIVITY, activity_in)


@router.get("/", response_model=list[ActivityRead])
async def list_activities(
    project_id: str,
    store: RecordStore = Depends(get_user_store),
) -> list[ActivityRead]:
    """List a project's activities ordered by start date."""
    return await store.list_records(RecordKind.ACTIVITY, {"project_id": project_id})


@router.get("/{activity_id}", response_model=ActivityRead)
async def get_activity(
    activity_id: str,
    store: RecordStore = Depends(get_user_store),
) -> ActivityRead:
    """Get an activity by ID."""
    activity = await store.get(RecordKind.ACTIVITY, activity_id)
    if not activity:
        raise NotFoundError("Activity", activity_id)
    return activity


@router.get("/{activity_id}/links", response_model=ActivityLinks)
async def get_activity_links(
    activity_id: str,
    store: RecordStore = Depends(get_user_store),
) -> ActivityLinks:
    """What an activity depends on and what depends on it."""
    activity = await store.get(RecordKind.ACTIVITY, activity_id)
    if not activity:
        raise NotFoundError("Activity", activity_id)

    details = await get_project_details(store, activity.project_id)
    if details is None:
        raise NotFoundError("Project", activity.project_id)
    return activity_links(details, activity_id)


@router.patch("/{activity_id}", response_model=ActivityRead)
async def update_activity(
    activity_id: str,
    activity_in: ActivityUpdate,
    store: RecordStore = Depends(get_user_store),
) -> ActivityRead:
    """Update an activity. Its project cannot be changed."""
    return await store.update(RecordKind.ACTIVITY, activity_id, activity_in)


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_activity(
    activity_id: str,
    store: RecordStore = Depends(get_user_store),
) -> None:
    """Delete an activity and every dependency involving it."""
    await store.delete(RecordKind.ACTIVITY, activity_id)
