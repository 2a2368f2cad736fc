"""
Record store contract shared by every backing.

A RecordStore holds four record kinds (projects, activities, milestones,
dependencies) and applies the cascade rules on delete:

- deleting a project removes its activities, its milestones and every
  dependency touching one of those activities
- deleting an activity removes every dependency touching it

Input validation, immutable-field checks and delete dispatch live here so
that the backings only implement storage. Callers cannot tell the backings
apart except by latency and by the errors a remote one may raise.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping

import pydantic
from pydantic import BaseModel
from sqlmodel import SQLModel

from portfolio.exceptions import NotFoundError, ValidationError
from portfolio.logging_config import get_logger
from portfolio.models import Project, Activity, Milestone, Dependency
from portfolio.schemas import (
    ProjectCreate, ProjectUpdate, ProjectRead,
    ActivityCreate, ActivityUpdate, ActivityRead,
    MilestoneCreate, MilestoneUpdate, MilestoneRead,
    DependencyCreate, DependencyUpdate, DependencyRead,
)

logger = get_logger(__name__)


class RecordKind(str, Enum):
    PROJECT = "project"
    ACTIVITY = "activity"
    MILESTONE = "milestone"
    DEPENDENCY = "dependency"


@dataclass(frozen=True)
class KindSpec:
    """Everything a backing needs to know about one record kind."""
    kind: RecordKind
    label: str
    table: str
    model: type[SQLModel]
    create_schema: type[BaseModel]
    update_schema: type[BaseModel]
    read_schema: type[BaseModel]
    order_by: str | None
    immutable: frozenset[str] = frozenset({"id"})

    @property
    def plural(self) -> str:
        return self.table


KIND_SPECS: dict[RecordKind, KindSpec] = {
    RecordKind.PROJECT: KindSpec(
        kind=RecordKind.PROJECT,
        label="Project",
        table="projects",
        model=Project,
        create_schema=ProjectCreate,
        update_schema=ProjectUpdate,
        read_schema=ProjectRead,
        order_by="start_date",
    ),
    RecordKind.ACTIVITY: KindSpec(
        kind=RecordKind.ACTIVITY,
        label="Activity",
        table="activities",
        model=Activity,
        create_schema=ActivityCreate,
        update_schema=ActivityUpdate,
        read_schema=ActivityRead,
        order_by="start_date",
        immutable=frozenset({"id", "project_id"}),
    ),
    RecordKind.MILESTONE: KindSpec(
        kind=RecordKind.MILESTONE,
        label="Milestone",
        table="milestones",
        model=Milestone,
        create_schema=MilestoneCreate,
        update_schema=MilestoneUpdate,
        read_schema=MilestoneRead,
        order_by="date",
    ),
    RecordKind.DEPENDENCY: KindSpec(
        kind=RecordKind.DEPENDENCY,
        label="Dependency",
        table="dependencies",
        model=Dependency,
        create_schema=DependencyCreate,
        update_schema=DependencyUpdate,
        read_schema=DependencyRead,
        order_by=None,
    ),
}


def spec_for(kind: RecordKind | str) -> KindSpec:
    return KIND_SPECS[RecordKind(kind)]


def _validation_details(exc: pydantic.ValidationError) -> list[dict[str, Any]]:
    return [
        {
            "loc": ["body", *(str(part) for part in error["loc"])],
            "msg": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


def _as_mapping(values: Mapping[str, Any] | BaseModel) -> dict[str, Any]:
    if isinstance(values, BaseModel):
        return values.model_dump(exclude_unset=True)
    return dict(values)


class RecordStore(ABC):
    """
    Abstract record store.

    Subclasses implement the underscore methods; the public methods
    validate input and route deletes to the cascade implementations.
    """

    backend_name = "abstract"

    async def open(self) -> None:
        """Prepare the backing (e.g. create tables). No-op by default."""

    async def close(self) -> None:
        """Release connections held by the backing. No-op by default."""

    def for_access_token(self, access_token: str | None) -> "RecordStore":
        """The store as seen by one caller. Backings without per-user access serve everyone alike."""
        return self

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------

    async def list_records(
        self,
        kind: RecordKind | str,
        filters: Mapping[str, Any] | None = None,
    ) -> list[BaseModel]:
        """
        Return all records of a kind matching every equality filter.

        Results are ordered ascending by the kind's date column with
        undated records last; ties keep insertion order.
        """
        spec = spec_for(kind)
        checked = self._check_filters(spec, filters)
        records = await self._list(spec, checked)
        logger.debug(f"Listed {len(records)} {spec.plural}" + (f" where {checked}" if checked else ""))
        return records

    async def get(self, kind: RecordKind | str, record_id: str) -> BaseModel | None:
        spec = spec_for(kind)
        return await self._get(spec, record_id)

    async def create(self, kind: RecordKind | str, values: Mapping[str, Any] | BaseModel) -> BaseModel:
        """
        Persist a new record and return it with its freshly assigned id.

        Foreign keys are not checked: an activity may name an unknown
        project and a dependency an unknown activity.
        """
        spec = spec_for(kind)
        data = _as_mapping(values)
        if "id" in data:
            raise ValidationError(
                f"{spec.label} id is assigned by the store",
                details=[{"loc": ["body", "id"], "msg": "extra field not permitted", "type": "extra_forbidden"}],
            )
        try:
            payload = spec.create_schema.model_validate(data)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid {spec.kind.value} data", details=_validation_details(e)) from e

        record = await self._create(spec, payload)
        logger.info(f"Created {spec.kind.value}: id={record.id}")
        return record

    async def update(
        self,
        kind: RecordKind | str,
        record_id: str,
        values: Mapping[str, Any] | BaseModel,
    ) -> BaseModel:
        """Merge the supplied fields over an existing record."""
        spec = spec_for(kind)
        data = _as_mapping(values)
        frozen = sorted(spec.immutable.intersection(data))
        if frozen:
            raise ValidationError(
                f"{spec.label} field(s) cannot be changed: {', '.join(frozen)}",
                details=[
                    {"loc": ["body", field], "msg": "field is immutable", "type": "immutable"}
                    for field in frozen
                ],
            )
        cleared = sorted(
            field for field, info in spec.read_schema.model_fields.items()
            if info.is_required() and field in data and data[field] is None
        )
        if cleared:
            raise ValidationError(
                f"{spec.label} field(s) cannot be empty: {', '.join(cleared)}",
                details=[
                    {"loc": ["body", field], "msg": "field required", "type": "missing"}
                    for field in cleared
                ],
            )
        try:
            changes = spec.update_schema.model_validate(data)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid {spec.kind.value} data", details=_validation_details(e)) from e

        if not changes.model_fields_set:
            record = await self._get(spec, record_id)
            if record is None:
                raise NotFoundError(spec.label, record_id)
            return record

        record = await self._update(spec, record_id, changes)
        logger.info(f"Updated {spec.kind.value} {record_id}: {sorted(changes.model_fields_set)}")
        return record

    async def delete(self, kind: RecordKind | str, record_id: str) -> None:
        """
        Delete a record and whatever cascades from it.

        Unknown ids are a silent no-op.
        """
        spec = spec_for(kind)
        if spec.kind is RecordKind.PROJECT:
            await self._delete_project(record_id)
        elif spec.kind is RecordKind.ACTIVITY:
            await self._delete_activity(record_id)
        else:
            await self._delete(spec, record_id)
        logger.info(f"Deleted {spec.kind.value} {record_id}")

    async def list_dependencies_for_activities(self, activity_ids: Iterable[str]) -> list[DependencyRead]:
        """Dependencies with at least one endpoint among activity_ids."""
        ids = list(dict.fromkeys(activity_ids))
        if not ids:
            return []
        return await self._list_touching(ids)

    # ------------------------------------------------------------------
    # Backing implementation
    # ------------------------------------------------------------------

    @abstractmethod
    async def _list(self, spec: KindSpec, filters: dict[str, Any]) -> list[BaseModel]: ...

    @abstractmethod
    async def _get(self, spec: KindSpec, record_id: str) -> BaseModel | None: ...

    @abstractmethod
    async def _create(self, spec: KindSpec, payload: BaseModel) -> BaseModel: ...

    @abstractmethod
    async def _update(self, spec: KindSpec, record_id: str, changes: BaseModel) -> BaseModel: ...

    @abstractmethod
    async def _delete(self, spec: KindSpec, record_id: str) -> None: ...

    @abstractmethod
    async def _delete_project(self, project_id: str) -> None: ...

    @abstractmethod
    async def _delete_activity(self, activity_id: str) -> None: ...

    @abstractmethod
    async def _list_touching(self, activity_ids: list[str]) -> list[DependencyRead]: ...

    # ------------------------------------------------------------------

    @staticmethod
    def _check_filters(spec: KindSpec, filters: Mapping[str, Any] | None) -> dict[str, Any]:
        if not filters:
            return {}
        unknown = sorted(set(filters) - set(spec.read_schema.model_fields))
        if unknown:
            raise ValidationError(
                f"Cannot filter {spec.plural} by: {', '.join(unknown)}",
                details=[
                    {"loc": ["query", field], "msg": "unknown column", "type": "unknown_filter"}
                    for field in unknown
                ],
            )
        return {key: (value.value if isinstance(value, Enum) else value) for key, value in filters.items()}
