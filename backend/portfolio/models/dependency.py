from datetime import datetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from portfolio.models.project import new_id, utc_now


class Dependency(SQLModel, table=True):
    """
    Dependency model representing a directed edge between two activities.

    from_activity_id -> to_activity_id means:
    "from_activity depends on to_activity"

    Example: If "Build UI" cannot start before "Set up database" is done:
    - from_activity_id = Build UI (the dependent)
    - to_activity_id = Set up database (the prerequisite)
    """

    __tablename__ = "dependencies"

    id: str = Field(default_factory=new_id, primary_key=True)
    from_activity_id: str = Field(index=True)
    to_activity_id: str = Field(index=True)
    type: str | None = Field(default="finish-to-start")

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
