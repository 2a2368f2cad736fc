import datetime
from pydantic import BaseModel, ConfigDict


class MilestoneCreate(BaseModel):
    """Schema for creating a new milestone."""
    project_id: str
    name: str
    decision_type: str | None = None
    date: datetime.date | None = None
    status: str | None = "planned"

    model_config = ConfigDict(extra="forbid")


class MilestoneUpdate(BaseModel):
    """Schema for updating a milestone."""
    project_id: str | None = None
    name: str | None = None
    decision_type: str | None = None
    date: datetime.date | None = None
    status: str | None = None

    model_config = ConfigDict(extra="forbid")


class MilestoneRead(BaseModel):
    """Schema for reading a milestone."""
    id: str
    project_id: str
    name: str
    decision_type: str | None = None
    date: datetime.date | None = None
    status: str | None = None

    model_config = ConfigDict(from_attributes=True)
