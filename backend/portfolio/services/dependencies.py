"""
Dependency validation applied before a dependency reaches the store.

Only two rules: both endpoints must be chosen, and they must differ.
Cycles and edges across projects are allowed.
"""

from typing import Any, Mapping

from pydantic import BaseModel

from portfolio.exceptions import MissingDependencyEndpointError, SelfDependencyError
from portfolio.logging_config import get_logger
from portfolio.schemas import DependencyRead
from portfolio.store import RecordKind, RecordStore

logger = get_logger(__name__)


def validate_dependency(from_activity_id: str | None, to_activity_id: str | None) -> None:
    """
    Raises:
        MissingDependencyEndpointError: an endpoint is empty or unselected
        SelfDependencyError: both endpoints are the same activity
    """
    missing = [
        field
        for field, value in (("from_activity_id", from_activity_id), ("to_activity_id", to_activity_id))
        if not value
    ]
    if missing:
        raise MissingDependencyEndpointError(missing)

    if from_activity_id == to_activity_id:
        logger.warning(f"Self-dependency rejected: {from_activity_id}")
        raise SelfDependencyError(from_activity_id)


async def create_dependency(
    store: RecordStore,
    values: Mapping[str, Any] | BaseModel,
) -> DependencyRead:
    """Validate the endpoints, then persist the dependency."""
    data = values.model_dump() if isinstance(values, BaseModel) else dict(values)
    validate_dependency(data.get("from_activity_id"), data.get("to_activity_id"))

    logger.info(f"Creating dependency: {data['from_activity_id']} depends on {data['to_activity_id']}")
    return await store.create(RecordKind.DEPENDENCY, data)
