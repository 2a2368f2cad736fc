"""
Dependency routes for the portfolio API.
"""

from fastapi import APIRouter, Depends, Query, status

from portfolio.auth import get_current_user, get_user_store
from portfolio.exceptions import NotFoundError
from portfolio.logging_config import get_logger
from portfolio.schemas import DependencyCreate, DependencyRead
from portfolio.services.dependencies import create_dependency
from portfolio.store import RecordKind, RecordStore

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.post("/", response_model=DependencyRead, status_code=status.HTTP_201_CREATED)
async def add_dependency(
    dep_in: DependencyCreate,
    store: RecordStore = Depends(get_user_store),
) -> DependencyRead:
    """
    Create a dependency: from_activity depends on to_activity.

    Both endpoints must be given and must differ. Cycles are not checked.
    """
    return await create_dependency(store, dep_in)


@router.get("/", response_model=list[DependencyRead])
async def list_dependencies(
    activity_id: list[str] = Query(default=[]),
    store: RecordStore = Depends(get_user_store),
) -> list[DependencyRead]:
    """
    List dependencies touching any of the given activities.

    Pass activity_id once per activity; with none, the result is empty.
    """
    dependencies = await store.list_dependencies_for_activities(activity_id)
    logger.debug(f"Listed {len(dependencies)} dependencies for {len(activity_id)} activities")
    return dependencies


@router.get("/{dependency_id}", response_model=DependencyRead)
async def get_dependency(
    dependency_id: str,
    store: RecordStore = Depends(get_user_store),
) -> DependencyRead:
    dependency = await store.get(RecordKind.DEPENDENCY, dependency_id)
    if not dependency:
        raise NotFoundError("Dependency", dependency_id)
    return dependency


@router.delete("/{dependency_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_dependency(
    dependency_id: str,
    store: RecordStore = Depends(get_user_store),
) -> None:
    await store.delete(RecordKind.DEPENDENCY, dependency_id)
