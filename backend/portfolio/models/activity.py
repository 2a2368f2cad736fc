from datetime import date, datetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from portfolio.models.project import new_id, utc_now


class Activity(SQLModel, table=True):
    """
    Activity model - a unit of work inside a project.

    project_id is a plain indexed column, not a database foreign key:
    referential integrity is kept by the store's cascade rules, and
    creating an activity for an unknown project is allowed.
    """

    __tablename__ = "activities"

    id: str = Field(default_factory=new_id, primary_key=True)
    project_id: str = Field(index=True)
    name: str
    description: str | None = Field(default=None)
    start_date: date | None = Field(default=None, index=True)
    end_date: date | None = Field(default=None)
    status: str | None = Field(default="planned")
    responsible: str | None = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
