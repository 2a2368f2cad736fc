"""
Record store backed by a relational database through SQLAlchemy.

Every public call runs in its own session, so a cascade either commits
as a whole or is rolled back as a whole.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from pydantic import BaseModel
from sqlalchemy import delete, or_
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from portfolio.database import create_engine, create_session_maker, init_db, session_scope
from portfolio.exceptions import BackendError, BackendUnavailableError, NotFoundError
from portfolio.logging_config import get_logger
from portfolio.models import Activity, Milestone, Dependency, Project
from portfolio.schemas import DependencyRead
from portfolio.store.base import KindSpec, RecordStore

logger = get_logger(__name__)


class SqlRecordStore(RecordStore):
    """SQLModel tables reached through an async SQLAlchemy engine."""

    backend_name = "sql"

    def __init__(self, database_url: str, echo: bool = False):
        self.engine = create_engine(database_url, echo=echo)
        self._session_maker = create_session_maker(self.engine)

    async def open(self) -> None:
        async with self._guard("could not initialize database"):
            await init_db(self.engine)
        logger.info(f"Database ready: {self.engine.url.render_as_string(hide_password=True)}")

    async def close(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def _guard(self, context: str) -> AsyncGenerator[None, None]:
        """Translate driver failures into the store's error taxonomy."""
        try:
            yield
        except DBAPIError as e:
            if e.connection_invalidated:
                raise BackendUnavailableError(context, str(e.orig)) from e
            raise BackendError(context, str(e.orig)) from e
        except SQLAlchemyError as e:
            raise BackendError(context, str(e)) from e
        except OSError as e:
            raise BackendUnavailableError(context, str(e)) from e

    @asynccontextmanager
    async def _session(self, context: str) -> AsyncGenerator[AsyncSession, None]:
        async with self._guard(context):
            async with session_scope(self._session_maker) as session:
                yield session

    # ------------------------------------------------------------------

    async def _list(self, spec: KindSpec, filters: dict[str, Any]) -> list[BaseModel]:
        model = spec.model
        query = select(model)
        for column, value in filters.items():
            query = query.where(getattr(model, column) == value)
        if spec.order_by:
            order_column = getattr(model, spec.order_by)
            # False sorts before True: undated rows last on every dialect
            query = query.order_by(order_column.is_(None), order_column, model.created_at)
        else:
            query = query.order_by(model.created_at)

        async with self._session(f"could not fetch {spec.plural}") as session:
            result = await session.execute(query)
            return [spec.read_schema.model_validate(row) for row in result.scalars().all()]

    async def _get(self, spec: KindSpec, record_id: str) -> BaseModel | None:
        async with self._session(f"could not fetch {spec.kind.value}") as session:
            row = await session.get(spec.model, record_id)
            return spec.read_schema.model_validate(row) if row is not None else None

    async def _create(self, spec: KindSpec, payload: BaseModel) -> BaseModel:
        async with self._session(f"could not create {spec.kind.value}") as session:
            row = spec.model(**payload.model_dump())
            session.add(row)
            await session.flush()
            return spec.read_schema.model_validate(row)

    async def _update(self, spec: KindSpec, record_id: str, changes: BaseModel) -> BaseModel:
        async with self._session(f"could not update {spec.kind.value}") as session:
            row = await session.get(spec.model, record_id)
            if row is None:
                raise NotFoundError(spec.label, record_id)
            for field, value in changes.model_dump(exclude_unset=True).items():
                setattr(row, field, value)
            await session.flush()
            return spec.read_schema.model_validate(row)

    async def _delete(self, spec: KindSpec, record_id: str) -> None:
        async with self._session(f"could not delete {spec.kind.value}") as session:
            await session.execute(delete(spec.model).where(spec.model.id == record_id))

    async def _delete_project(self, project_id: str) -> None:
        async with self._session("could not delete project") as session:
            result = await session.execute(select(Activity.id).where(Activity.project_id == project_id))
            activity_ids = list(result.scalars().all())

            if activity_ids:
                await session.execute(
                    delete(Dependency).where(
                        or_(
                            Dependency.from_activity_id.in_(activity_ids),
                            Dependency.to_activity_id.in_(activity_ids),
                        )
                    )
                )
                await session.execute(delete(Activity).where(Activity.id.in_(activity_ids)))
            await session.execute(delete(Milestone).where(Milestone.project_id == project_id))
            await session.execute(delete(Project).where(Project.id == project_id))

            logger.debug(f"Project {project_id} cascade: {len(activity_ids)} activities")

    async def _delete_activity(self, activity_id: str) -> None:
        async with self._session("could not delete activity") as session:
            await session.execute(
                delete(Dependency).where(
                    or_(
                        Dependency.from_activity_id == activity_id,
                        Dependency.to_activity_id == activity_id,
                    )
                )
            )
            await session.execute(delete(Activity).where(Activity.id == activity_id))

    async def _list_touching(self, activity_ids: list[str]) -> list[DependencyRead]:
        query = (
            select(Dependency)
            .where(
                or_(
                    Dependency.from_activity_id.in_(activity_ids),
                    Dependency.to_activity_id.in_(activity_ids),
                )
            )
            .order_by(Dependency.created_at)
        )
        async with self._session("could not fetch dependencies") as session:
            result = await session.execute(query)
            return [DependencyRead.model_validate(row) for row in result.scalars().all()]
