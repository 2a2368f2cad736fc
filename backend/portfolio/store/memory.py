"""
In-process record store used when no backend is configured.

Rows are kept as plain dicts per kind, in insertion order, and every read
hands out fresh pydantic models so callers can never mutate stored state.
No method awaits anything, so each call runs to completion without
interleaving with other coroutines.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel

from portfolio.exceptions import NotFoundError
from portfolio.logging_config import get_logger
from portfolio.models.project import new_id
from portfolio.schemas import DependencyRead
from portfolio.store.base import KindSpec, RecordKind, RecordStore, KIND_SPECS

logger = get_logger(__name__)


def _date_key(column: str):
    # Undated rows sort last; sorted() is stable so ties keep insertion order
    return lambda row: (row.get(column) is None, row.get(column) or date.min)


class MemoryRecordStore(RecordStore):
    """Dict-backed emulation of the relational store."""

    backend_name = "memory"

    def __init__(self, seed: bool = False):
        self._tables: dict[RecordKind, list[dict[str, Any]]] = {kind: [] for kind in RecordKind}
        if seed:
            self._seed_demo_data()

    def _rows(self, kind: RecordKind) -> list[dict[str, Any]]:
        return self._tables[kind]

    def _find(self, kind: RecordKind, record_id: str) -> dict[str, Any] | None:
        return next((row for row in self._rows(kind) if row["id"] == record_id), None)

    def _remove_where(self, kind: RecordKind, predicate) -> int:
        rows = self._rows(kind)
        kept = [row for row in rows if not predicate(row)]
        removed = len(rows) - len(kept)
        self._tables[kind] = kept
        return removed

    # ------------------------------------------------------------------

    async def _list(self, spec: KindSpec, filters: dict[str, Any]) -> list[BaseModel]:
        rows = [
            row for row in self._rows(spec.kind)
            if all(row.get(column) == value for column, value in filters.items())
        ]
        if spec.order_by:
            rows = sorted(rows, key=_date_key(spec.order_by))
        return [spec.read_schema.model_validate(row) for row in rows]

    async def _get(self, spec: KindSpec, record_id: str) -> BaseModel | None:
        row = self._find(spec.kind, record_id)
        return spec.read_schema.model_validate(row) if row is not None else None

    async def _create(self, spec: KindSpec, payload: BaseModel) -> BaseModel:
        row = {"id": new_id(), **payload.model_dump()}
        self._rows(spec.kind).append(row)
        return spec.read_schema.model_validate(row)

    async def _update(self, spec: KindSpec, record_id: str, changes: BaseModel) -> BaseModel:
        row = self._find(spec.kind, record_id)
        if row is None:
            raise NotFoundError(spec.label, record_id)
        merged = {**row, **changes.model_dump(exclude_unset=True)}
        record = spec.read_schema.model_validate(merged)
        row.update(merged)
        return record

    async def _delete(self, spec: KindSpec, record_id: str) -> None:
        self._remove_where(spec.kind, lambda row: row["id"] == record_id)

    async def _delete_project(self, project_id: str) -> None:
        # Snapshot before anything is removed
        activity_ids = {
            row["id"] for row in self._rows(RecordKind.ACTIVITY)
            if row["project_id"] == project_id
        }

        self._remove_where(RecordKind.PROJECT, lambda row: row["id"] == project_id)
        self._remove_where(RecordKind.ACTIVITY, lambda row: row["id"] in activity_ids)
        milestones = self._remove_where(RecordKind.MILESTONE, lambda row: row["project_id"] == project_id)
        dependencies = self._remove_where(
            RecordKind.DEPENDENCY,
            lambda row: row["from_activity_id"] in activity_ids or row["to_activity_id"] in activity_ids,
        )
        logger.debug(
            f"Project {project_id} cascade: {len(activity_ids)} activities, "
            f"{milestones} milestones, {dependencies} dependencies"
        )

    async def _delete_activity(self, activity_id: str) -> None:
        self._remove_where(RecordKind.ACTIVITY, lambda row: row["id"] == activity_id)
        removed = self._remove_where(
            RecordKind.DEPENDENCY,
            lambda row: activity_id in (row["from_activity_id"], row["to_activity_id"]),
        )
        logger.debug(f"Activity {activity_id} cascade: {removed} dependencies")

    async def _list_touching(self, activity_ids: list[str]) -> list[DependencyRead]:
        wanted = set(activity_ids)
        return [
            DependencyRead.model_validate(row)
            for row in self._rows(RecordKind.DEPENDENCY)
            if row["from_activity_id"] in wanted or row["to_activity_id"] in wanted
        ]

    # ------------------------------------------------------------------

    def _seed_row(self, kind: RecordKind, **values: Any) -> dict[str, Any]:
        payload = KIND_SPECS[kind].create_schema.model_validate(values)
        row = {"id": new_id(), **payload.model_dump()}
        self._rows(kind).append(row)
        return row

    def _seed_demo_data(self) -> None:
        """Sample portfolio so the service has something to show in demo mode."""
        mvp = self._seed_row(
            RecordKind.PROJECT,
            name="Launch portfolio MVP",
            description="Build the service and connect it to the hosted database and auth.",
            start_date=date(2024, 5, 1),
            end_date=date(2024, 7, 1),
            project_owner="Anna Andersson",
            project_manager="Per Lindqvist",
            impact_owner="Ida Holm",
            status="in-progress",
            priority=1,
        )
        self._seed_row(
            RecordKind.PROJECT,
            name="Portfolio view and reports",
            description="Give management a simple portfolio overview with filters.",
            start_date=date(2024, 6, 1),
            end_date=date(2024, 9, 15),
            project_owner="Bo Berg",
            project_manager="Lisa Nyberg",
            impact_owner="Ida Holm",
            status="planned",
            priority=2,
        )

        setup = self._seed_row(
            RecordKind.ACTIVITY,
            project_id=mvp["id"],
            name="Set up database project",
            description="Create tables and auth configuration.",
            start_date=date(2024, 5, 1),
            end_date=date(2024, 5, 5),
            status="completed",
            responsible="Anna Andersson",
        )
        ui = self._seed_row(
            RecordKind.ACTIVITY,
            project_id=mvp["id"],
            name="Build the user interface",
            description="Lists and forms for projects and activities.",
            start_date=date(2024, 5, 6),
            end_date=date(2024, 6, 1),
            status="in-progress",
            responsible="Per Lindqvist",
        )

        self._seed_row(
            RecordKind.MILESTONE,
            project_id=mvp["id"],
            name="Go/No-Go frontend",
            decision_type="go/no-go",
            date=date(2024, 6, 5),
            status="planned",
        )

        self._seed_row(
            RecordKind.DEPENDENCY,
            from_activity_id=ui["id"],
            to_activity_id=setup["id"],
            type="finish-to-start",
        )
        logger.info("Seeded in-memory store with demo portfolio")
