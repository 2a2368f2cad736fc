"""
Portfolio assembly: the read models the presentation layer consumes.
"""

import asyncio

from portfolio.logging_config import get_logger
from portfolio.schemas import ProjectDetails, ProjectRead
from portfolio.store import RecordKind, RecordStore

logger = get_logger(__name__)


async def list_projects(store: RecordStore, status: str | None = None) -> list[ProjectRead]:
    """Portfolio overview, optionally narrowed to one exact status."""
    filters = {"status": status} if status else None
    return await store.list_records(RecordKind.PROJECT, filters)


async def get_project_details(store: RecordStore, project_id: str) -> ProjectDetails | None:
    """
    Assemble one project with its activities, milestones and dependencies.

    Returns None for an unknown project; a stale selection is an expected
    outcome, not an error.

    Dependencies are those touching any of the project's activities, so an
    edge to an activity in another project still shows up.
    """
    project = await store.get(RecordKind.PROJECT, project_id)
    if project is None:
        logger.debug(f"Project {project_id} not found")
        return None

    activities, milestones = await asyncio.gather(
        store.list_records(RecordKind.ACTIVITY, {"project_id": project_id}),
        store.list_records(RecordKind.MILESTONE, {"project_id": project_id}),
    )
    dependencies = await store.list_dependencies_for_activities(a.id for a in activities)

    logger.debug(
        f"Assembled project {project_id}: {len(activities)} activities, "
        f"{len(milestones)} milestones, {len(dependencies)} dependencies"
    )

    return ProjectDetails(
        project=project,
        activities=activities,
        milestones=milestones,
        dependencies=dependencies,
    )
