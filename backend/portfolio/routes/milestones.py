"""
Milestone routes for the portfolio API.
"""

from fastapi import APIRouter, Depends, status

from portfolio.auth import get_current_user, get_user_store
from portfolio.exceptions import NotFoundError
from portfolio.schemas import MilestoneCreate, MilestoneUpdate, MilestoneRead
from portfolio.store import RecordKind, RecordStore

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.post("/", response_model=MilestoneRead, status_code=status.HTTP_201_CREATED)
async def create_milestone(
    milestone_in: MilestoneCreate,
    store: RecordStore = Depends(get_user_store),
) -> MilestoneRead:
    return await store.create(RecordKind.MILESTONE, milestone_in)


@router.get("/", response_model=list[MilestoneRead])
async def list_milestones(
    project_id: str,
    store: RecordStore = Depends(get_user_store),
) -> list[MilestoneRead]:
    """List a project's milestones ordered by date."""
    return await store.list_records(RecordKind.MILESTONE, {"project_id": project_id})


@router.get("/{milestone_id}", response_model=MilestoneRead)
async def get_milestone(
    milestone_id: str,
    store: RecordStore = Depends(get_user_store),
) -> MilestoneRead:
    milestone = await store.get(RecordKind.MILESTONE, milestone_id)
    if not milestone:
        raise NotFoundError("Milestone", milestone_id)
    return milestone


@router.patch("/{milestone_id}", response_model=MilestoneRead)
async def update_milestone(
    milestone_id: str,
    milestone_in: MilestoneUpdate,
    store: RecordStore = Depends(get_user_store),
) -> MilestoneRead:
    return await store.update(RecordKind.MILESTONE, milestone_id, milestone_in)


@router.delete("/{milestone_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_milestone(
    milestone_id: str,
    store: RecordStore = Depends(get_user_store),
) -> None:
    await store.delete(RecordKind.MILESTONE, milestone_id)
