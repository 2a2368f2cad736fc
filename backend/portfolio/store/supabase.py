"""
Record store backed by a hosted Supabase project.

Talks to the PostgREST table API under ``<SUPABASE_URL>/rest/v1``:

    GET    /<table>?select=*&<col>=eq.<value>&order=<col>.asc.nullslast
    POST   /<table>                 (Prefer: return=representation)
    PATCH  /<table>?id=eq.<id>      (Prefer: return=representation)
    DELETE /<table>?id=eq.<id>

Every table needs a ``created_at timestamptz default now()`` column: lists
order on it to keep rows with equal dates in insertion order.

PostgREST has no multi-statement transactions, so the project cascade
deletes leaves first (dependencies, activities, milestones) and the
project last. An interrupted delete leaves the project in place and can
simply be repeated.
"""

import copy
from datetime import date
from typing import Any, Iterable

import httpx
from pydantic import BaseModel

from portfolio.exceptions import BackendError, BackendUnavailableError, NotFoundError
from portfolio.logging_config import get_logger
from portfolio.schemas import DependencyRead
from portfolio.store.base import KindSpec, RecordStore

logger = get_logger(__name__)

RETURN_REPRESENTATION = "return=representation"


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _eq(value: Any) -> str:
    if value is None:
        return "is.null"
    return f"eq.{_literal(value)}"


def _in_list(values: Iterable[str]) -> str:
    quoted = ",".join('"{}"'.format(str(v).replace('"', '\\"')) for v in values)
    return f"({quoted})"


def _touching(activity_ids: list[str]) -> str:
    ids = _in_list(activity_ids)
    return f"(from_activity_id.in.{ids},to_activity_id.in.{ids})"


def error_message(response: httpx.Response) -> str:
    """Pull a readable message out of a PostgREST or GoTrue error payload."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("message", "error_description", "msg", "error"):
            if payload.get(key):
                return str(payload[key])
    return response.text or f"HTTP {response.status_code}"


class SupabaseRecordStore(RecordStore):
    """PostgREST client for the four portfolio tables."""

    backend_name = "supabase"

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._anon_key = anon_key
        self._access_token: str | None = None
        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={"apikey": anon_key},
            timeout=timeout,
            transport=transport,
        )

    def for_access_token(self, access_token: str | None) -> "SupabaseRecordStore":
        """
        A view of this store acting as the given user, so row level security
        sees the caller. Without a token the anon key is used.

        Views share the HTTP client; only the original store is closed.
        """
        view = copy.copy(self)
        view._access_token = access_token
        return view

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        context: str,
        method: str,
        table: str,
        params: list[tuple[str, str]] | None = None,
        json: dict[str, Any] | None = None,
        prefer: str | None = None,
    ) -> list[dict[str, Any]]:
        headers = {"Authorization": f"Bearer {self._access_token or self._anon_key}"}
        if prefer:
            headers["Prefer"] = prefer
        try:
            response = await self._client.request(method, f"/{table}", params=params, json=json, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"{context}: {e!r}")
            raise BackendUnavailableError(context, str(e) or e.__class__.__name__) from e

        if response.is_error:
            message = error_message(response)
            logger.warning(f"{context}: HTTP {response.status_code} {message}")
            raise BackendError(context, message)

        if not response.content:
            return []
        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"{context}: HTTP {response.status_code} non-JSON body")
            raise BackendError(context, "invalid JSON response") from e
        return data if isinstance(data, list) else [data]

    # ------------------------------------------------------------------

    async def _list(self, spec: KindSpec, filters: dict[str, Any]) -> list[BaseModel]:
        params = [("select", "*")]
        params.extend((column, _eq(value)) for column, value in filters.items())
        if spec.order_by:
            params.append(("order", f"{spec.order_by}.asc.nullslast,created_at.asc"))
        else:
            params.append(("order", "created_at.asc"))

        rows = await self._request(f"could not fetch {spec.plural}", "GET", spec.table, params=params)
        return [spec.read_schema.model_validate(row) for row in rows]

    async def _get(self, spec: KindSpec, record_id: str) -> BaseModel | None:
        rows = await self._request(
            f"could not fetch {spec.kind.value}",
            "GET",
            spec.table,
            params=[("select", "*"), ("id", _eq(record_id))],
        )
        return spec.read_schema.model_validate(rows[0]) if rows else None

    async def _create(self, spec: KindSpec, payload: BaseModel) -> BaseModel:
        rows = await self._request(
            f"could not create {spec.kind.value}",
            "POST",
            spec.table,
            json=payload.model_dump(mode="json"),
            prefer=RETURN_REPRESENTATION,
        )
        if not rows:
            raise BackendError(f"could not create {spec.kind.value}", "no row returned")
        return spec.read_schema.model_validate(rows[0])

    async def _update(self, spec: KindSpec, record_id: str, changes: BaseModel) -> BaseModel:
        rows = await self._request(
            f"could not update {spec.kind.value}",
            "PATCH",
            spec.table,
            params=[("id", _eq(record_id))],
            json=changes.model_dump(mode="json", exclude_unset=True),
            prefer=RETURN_REPRESENTATION,
        )
        if not rows:
            raise NotFoundError(spec.label, record_id)
        return spec.read_schema.model_validate(rows[0])

    async def _delete(self, spec: KindSpec, record_id: str) -> None:
        await self._request(
            f"could not delete {spec.kind.value}",
            "DELETE",
            spec.table,
            params=[("id", _eq(record_id))],
        )

    async def _delete_project(self, project_id: str) -> None:
        context = "could not delete project"
        rows = await self._request(
            context,
            "GET",
            "activities",
            params=[("select", "id"), ("project_id", _eq(project_id))],
        )
        activity_ids = [row["id"] for row in rows]

        if activity_ids:
            await self._request(context, "DELETE", "dependencies", params=[("or", _touching(activity_ids))])
            await self._request(context, "DELETE", "activities", params=[("id", f"in.{_in_list(activity_ids)}")])
        await self._request(context, "DELETE", "milestones", params=[("project_id", _eq(project_id))])
        await self._request(context, "DELETE", "projects", params=[("id", _eq(project_id))])

        logger.debug(f"Project {project_id} cascade: {len(activity_ids)} activities")

    async def _delete_activity(self, activity_id: str) -> None:
        context = "could not delete activity"
        await self._request(context, "DELETE", "dependencies", params=[("or", _touching([activity_id]))])
        await self._request(context, "DELETE", "activities", params=[("id", _eq(activity_id))])

    async def _list_touching(self, activity_ids: list[str]) -> list[DependencyRead]:
        rows = await self._request(
            "could not fetch dependencies",
            "GET",
            "dependencies",
            params=[("select", "*"), ("or", _touching(activity_ids)), ("order", "created_at.asc")],
        )
        return [DependencyRead.model_validate(row) for row in rows]
