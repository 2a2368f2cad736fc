import uuid
from datetime import date, datetime, timezone
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Project(SQLModel, table=True):
    """Project model - the top-level record of the portfolio."""

    __tablename__ = "projects"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(index=True)
    description: str | None = Field(default=None)
    start_date: date | None = Field(default=None, index=True)
    end_date: date | None = Field(default=None)
    project_owner: str | None = Field(default=None)
    project_manager: str | None = Field(default=None)
    impact_owner: str | None = Field(default=None)
    status: str | None = Field(default="planned", index=True)
    priority: int | None = Field(default=None)

    # Insertion order; breaks ties between equal start dates
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
