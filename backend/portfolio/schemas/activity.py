from datetime import date
from pydantic import BaseModel, ConfigDict


class ActivityCreate(BaseModel):
    """Schema for creating a new activity inside a project."""
    project_id: str
    name: str
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: str | None = "planned"
    responsible: str | None = None

    model_config = ConfigDict(extra="forbid")


class ActivityUpdate(BaseModel):
    """
    Schema for updating an activity.

    project_id is deliberately absent: an activity never moves between projects.
    """
    name: str | None = None
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: str | None = None
    responsible: str | None = None

    model_config = ConfigDict(extra="forbid")


class ActivityRead(BaseModel):
    """Schema for reading an activity."""
    id: str
    project_id: str
    name: str
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: str | None = None
    responsible: str | None = None

    model_config = ConfigDict(from_attributes=True)
