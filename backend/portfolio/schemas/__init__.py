from portfolio.schemas.project import ProjectStatus, ProjectCreate, ProjectUpdate, ProjectRead
from portfolio.schemas.activity import ActivityCreate, ActivityUpdate, ActivityRead
from portfolio.schemas.milestone import MilestoneCreate, MilestoneUpdate, MilestoneRead
from portfolio.schemas.dependency import DependencyCreate, DependencyUpdate, DependencyRead
from portfolio.schemas.details import ProjectDetails, ActivityLinks
from portfolio.schemas.auth import SignInRequest, Session, SessionUser

__all__ = [
    "ProjectStatus",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectRead",
    "ActivityCreate",
    "ActivityUpdate",
    "ActivityRead",
    "MilestoneCreate",
    "MilestoneUpdate",
    "MilestoneRead",
    "DependencyCreate",
    "DependencyUpdate",
    "DependencyRead",
    "ProjectDetails",
    "ActivityLinks",
    "SignInRequest",
    "Session",
    "SessionUser",
]
