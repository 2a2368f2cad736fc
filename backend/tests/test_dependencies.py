"""
Tests for dependency validation and the activity graph.
"""

import pytest

from portfolio.exceptions import (
    MissingDependencyEndpointError,
    NotFoundError,
    SelfDependencyError,
    ValidationError,
)
from portfolio.services.dependencies import create_dependency, validate_dependency
from portfolio.services.graph import activity_links, build_activity_graph
from portfolio.services.portfolio import get_project_details
from portfolio.store import RecordKind


class TestValidateDependency:

    @pytest.mark.parametrize("activity_id", ["a1", "", "x" * 64, "7f0c1f1e-5a3b-4c1a-9d51-0c4c2f0c1e11"])
    def test_self_dependency_rejected(self, activity_id):
        with pytest.raises(ValidationError):
            validate_dependency(activity_id, activity_id)

    def test_self_dependency_error_code(self):
        with pytest.raises(SelfDependencyError) as exc_info:
            validate_dependency("a1", "a1")
        assert exc_info.value.error_code == "self_dependency"
        assert exc_info.value.message == "An activity cannot depend on itself."

    @pytest.mark.parametrize(
        "from_id, to_id, missing",
        [
            ("", "a2", ["from_activity_id"]),
            ("a1", None, ["to_activity_id"]),
            (None, "", ["from_activity_id", "to_activity_id"]),
        ],
    )
    def test_missing_endpoint_rejected(self, from_id, to_id, missing):
        with pytest.raises(MissingDependencyEndpointError) as exc_info:
            validate_dependency(from_id, to_id)
        assert exc_info.value.missing == missing

    def test_distinct_endpoints_accepted(self):
        validate_dependency("a1", "a2")


class TestCreateDependency:

    @pytest.mark.asyncio
    async def test_self_dependency_creates_nothing(self, store):
        project = await store.create(RecordKind.PROJECT, {"name": "X"})
        activity = await store.create(RecordKind.ACTIVITY, {"project_id": project.id, "name": "A"})

        with pytest.raises(SelfDependencyError):
            await create_dependency(
                store,
                {"from_activity_id": activity.id, "to_activity_id": activity.id},
            )
        assert await store.list_records(RecordKind.DEPENDENCY) == []

    @pytest.mark.asyncio
    async def test_cycles_allowed(self, store):
        project = await store.create(RecordKind.PROJECT, {"name": "X"})
        a = await store.create(RecordKind.ACTIVITY, {"project_id": project.id, "name": "A"})
        b = await store.create(RecordKind.ACTIVITY, {"project_id": project.id, "name": "B"})

        await create_dependency(store, {"from_activity_id": a.id, "to_activity_id": b.id})
        await create_dependency(store, {"from_activity_id": b.id, "to_activity_id": a.id})

        assert len(await store.list_records(RecordKind.DEPENDENCY)) == 2

    @pytest.mark.asyncio
    async def test_type_defaults_to_finish_to_start(self, memory_store):
        dependency = await create_dependency(
            memory_store,
            {"from_activity_id": "a1", "to_activity_id": "a2"},
        )
        assert dependency.type == "finish-to-start"


class TestActivityGraph:

    async def build_project(self, store):
        """
        setup <- ui <- release, plus an edge from another project into ui:

            setup -> ui -> release
                     ui -> (external)
        """
        project = await store.create(RecordKind.PROJECT, {"name": "X"})
        setup = await store.create(RecordKind.ACTIVITY, {"project_id": project.id, "name": "setup"})
        ui = await store.create(RecordKind.ACTIVITY, {"project_id": project.id, "name": "ui"})
        release = await store.create(RecordKind.ACTIVITY, {"project_id": project.id, "name": "release"})
        await create_dependency(store, {"from_activity_id": ui.id, "to_activity_id": setup.id})
        await create_dependency(store, {"from_activity_id": release.id, "to_activity_id": ui.id})
        await create_dependency(store, {"from_activity_id": "external", "to_activity_id": ui.id})
        details = await get_project_details(store, project.id)
        return details, setup, ui, release

    @pytest.mark.asyncio
    async def test_edges_point_from_prerequisite_to_dependent(self, memory_store):
        details, setup, ui, release = await self.build_project(memory_store)
        graph = build_activity_graph(details)

        assert graph.has_edge(setup.id, ui.id)
        assert graph.has_edge(ui.id, release.id)
        assert graph.has_edge(ui.id, "external")
        assert "activity" not in graph.nodes["external"]

    @pytest.mark.asyncio
    async def test_activity_links(self, memory_store):
        details, setup, ui, release = await self.build_project(memory_store)
        links = activity_links(details, ui.id)

        assert [a.id for a in links.depends_on] == [setup.id]
        assert [a.id for a in links.required_by] == [release.id]
        assert links.unresolved_ids == ["external"]

    @pytest.mark.asyncio
    async def test_links_on_cyclic_graph(self, memory_store):
        project = await memory_store.create(RecordKind.PROJECT, {"name": "X"})
        a = await memory_store.create(RecordKind.ACTIVITY, {"project_id": project.id, "name": "A"})
        b = await memory_store.create(RecordKind.ACTIVITY, {"project_id": project.id, "name": "B"})
        await create_dependency(memory_store, {"from_activity_id": a.id, "to_activity_id": b.id})
        await create_dependency(memory_store, {"from_activity_id": b.id, "to_activity_id": a.id})

        links = activity_links(await get_project_details(memory_store, project.id), a.id)

        assert [x.id for x in links.depends_on] == [b.id]
        assert [x.id for x in links.required_by] == [b.id]

    @pytest.mark.asyncio
    async def test_links_for_unknown_activity(self, memory_store):
        details, *_ = await self.build_project(memory_store)
        with pytest.raises(NotFoundError):
            activity_links(details, "external")
