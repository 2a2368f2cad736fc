"""
Project routes for the portfolio API.
"""

from fastapi import APIRouter, Depends, Query, status

from portfolio.auth import get_current_user, get_user_store
from portfolio.exceptions import NotFoundError
from portfolio.logging_config import get_logger
from portfolio.schemas import ProjectCreate, ProjectUpdate, ProjectRead, ProjectDetails
from portfolio.services.portfolio import get_project_details, list_projects
from portfolio.store import RecordKind, RecordStore

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    store: RecordStore = Depends(get_user_store),
) -> ProjectRead:
    """Create a new project."""
    project = await store.create(RecordKind.PROJECT, project_in)
    logger.info(f"Created project: id={project.id} name='{project.name}'")
    return project


@router.get("/", response_model=list[ProjectRead])
async def read_projects(
    status_filter: str | None = Query(default=None, alias="status"),
    store: RecordStore = Depends(get_user_store),
) -> list[ProjectRead]:
    """
    List all projects ordered by start date.

    Optionally filter by exact status (planned, in-progress, completed).
    """
    return await list_projects(store, status_filter)


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(
    project_id: str,
    store: RecordStore = Depends(get_user_store),
) -> ProjectRead:
    """Get a project by ID."""
    project = await store.get(RecordKind.PROJECT, project_id)
    if not project:
        raise NotFoundError("Project", project_id)
    return project


@router.get("/{project_id}/details", response_model=ProjectDetails)
async def read_project_details(
    project_id: str,
    store: RecordStore = Depends(get_user_store),
) -> ProjectDetails:
    """Get a project with its activities, milestones and dependencies."""
    details = await get_project_details(store, project_id)
    if details is None:
        raise NotFoundError("Project", project_id)
    return details


@router.patch("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: str,
    project_in: ProjectUpdate,
    store: RecordStore = Depends(get_user_store),
) -> ProjectRead:
    """Update a project."""
    return await store.update(RecordKind.PROJECT, project_id, project_in)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    store: RecordStore = Depends(get_user_store),
) -> None:
    """Delete a project with its activities, milestones and their dependencies."""
    await store.delete(RecordKind.PROJECT, project_id)
