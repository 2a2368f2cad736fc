from pydantic import BaseModel

from portfolio.schemas.project import ProjectRead
from portfolio.schemas.activity import ActivityRead
from portfolio.schemas.milestone import MilestoneRead
from portfolio.schemas.dependency import DependencyRead


class ProjectDetails(BaseModel):
    """
    Read-only view of one project with everything hanging off it.

    dependencies holds every dependency touching at least one of the
    project's activities, including edges whose other end lies elsewhere.
    """
    project: ProjectRead
    activities: list[ActivityRead]
    milestones: list[MilestoneRead]
    dependencies: list[DependencyRead]


class ActivityLinks(BaseModel):
    """Direct neighbours of one activity in the dependency graph."""
    activity_id: str
    depends_on: list[ActivityRead]
    required_by: list[ActivityRead]
    # Endpoints referenced by a dependency but not part of the project
    unresolved_ids: list[str] = []
