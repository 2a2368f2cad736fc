import datetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from portfolio.models.project import new_id, utc_now


class Milestone(SQLModel, table=True):
    """Milestone model - a dated decision point (e.g. go/no-go) of a project."""

    __tablename__ = "milestones"

    id: str = Field(default_factory=new_id, primary_key=True)
    project_id: str = Field(index=True)
    name: str
    decision_type: str | None = Field(default=None)
    # Module-qualified: the column is itself called "date"
    date: datetime.date | None = Field(default=None, index=True)
    status: str | None = Field(default="planned")

    created_at: datetime.datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
