from pydantic import BaseModel, ConfigDict


class DependencyCreate(BaseModel):
    """
    Schema for creating a new dependency.

    Endpoints default to empty so that an unselected side reaches the
    dependency validation and gets its user-facing message.
    """
    from_activity_id: str = ""  # The dependent activity
    to_activity_id: str = ""    # The activity it depends on
    type: str | None = "finish-to-start"

    model_config = ConfigDict(extra="forbid")


class DependencyUpdate(BaseModel):
    """Schema for updating a dependency."""
    from_activity_id: str | None = None
    to_activity_id: str | None = None
    type: str | None = None

    model_config = ConfigDict(extra="forbid")


class DependencyRead(BaseModel):
    """Schema for reading a dependency."""
    id: str
    from_activity_id: str
    to_activity_id: str
    type: str | None = None

    model_config = ConfigDict(from_attributes=True)
