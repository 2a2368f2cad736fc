from portfolio.models.project import Project
from portfolio.models.activity import Activity
from portfolio.models.milestone import Milestone
from portfolio.models.dependency import Dependency

__all__ = ["Project", "Activity", "Milestone", "Dependency"]
