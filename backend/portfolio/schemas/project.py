from datetime import date
from enum import Enum
from pydantic import BaseModel, ConfigDict


class ProjectStatus(str, Enum):
    """
    Known project statuses.

    Status is stored as free text, so records carrying any other value
    are kept and listed; they only fail to match these filters.
    """
    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class ProjectCreate(BaseModel):
    """Schema for creating a new project."""
    name: str
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    project_owner: str | None = None
    project_manager: str | None = None
    impact_owner: str | None = None
    status: str | None = ProjectStatus.PLANNED.value
    priority: int | None = None  # 1-5 by convention, not enforced

    model_config = ConfigDict(extra="forbid")


class ProjectUpdate(BaseModel):
    """Schema for updating a project."""
    name: str | None = None
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    project_owner: str | None = None
    project_manager: str | None = None
    impact_owner: str | None = None
    status: str | None = None
    priority: int | None = None

    model_config = ConfigDict(extra="forbid")


class ProjectRead(BaseModel):
    """Schema for reading a project."""
    id: str
    name: str
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    project_owner: str | None = None
    project_manager: str | None = None
    impact_owner: str | None = None
    status: str | None = None
    priority: int | None = None

    model_config = ConfigDict(from_attributes=True)
