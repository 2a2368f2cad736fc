"""
API tests: the portfolio routes over an in-memory store and a demo session,
and over a Supabase project served by a fake transport.
"""

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from portfolio.auth import SupabaseSessionProvider, get_session_provider
from portfolio.main import app
from portfolio.store import SupabaseRecordStore, get_record_store


async def create_project(client, **fields):
    resp = await client.post("/projects/", json={"name": "X", **fields})
    assert resp.status_code == 201
    return resp.json()


async def create_activity(client, project_id, name, **fields):
    resp = await client.post("/activities/", json={"project_id": project_id, "name": name, **fields})
    assert resp.status_code == 201
    return resp.json()


class TestProjectsAPI:

    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_create_and_get(self, client):
        project = await create_project(client, name="Launch", start_date="2024-05-01", priority=2)

        resp = await client.get(f"/projects/{project['id']}")
        assert resp.status_code == 200
        assert resp.json() == project
        assert project["status"] == "planned"
        assert project["start_date"] == "2024-05-01"

    @pytest.mark.asyncio
    async def test_missing_name_rejected(self, client):
        resp = await client.post("/projects/", json={"description": "no name"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_list_filtered_by_status(self, client):
        await create_project(client, name="A", status="planned")
        done = await create_project(client, name="B", status="completed")

        resp = await client.get("/projects/", params={"status": "completed"})
        assert resp.status_code == 200
        assert [p["id"] for p in resp.json()] == [done["id"]]

    @pytest.mark.asyncio
    async def test_update(self, client):
        project = await create_project(client, description="old")

        resp = await client.patch(f"/projects/{project['id']}", json={"description": "new"})
        assert resp.status_code == 200
        assert resp.json()["description"] == "new"
        assert resp.json()["name"] == "X"

    @pytest.mark.asyncio
    async def test_update_unknown_project(self, client):
        resp = await client.patch("/projects/no-such-id", json={"name": "Y"})
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_get_unknown_project(self, client):
        resp = await client.get("/projects/no-such-id")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, client):
        project = await create_project(client)

        assert (await client.delete(f"/projects/{project['id']}")).status_code == 204
        assert (await client.delete(f"/projects/{project['id']}")).status_code == 204
        assert (await client.get(f"/projects/{project['id']}")).status_code == 404


class TestProjectDetailsAPI:

    @pytest.mark.asyncio
    async def test_details(self, client):
        project = await create_project(client)
        b = await create_activity(client, project["id"], "B", start_date="2024-06-01")
        a = await create_activity(client, project["id"], "A", start_date="2024-05-01")
        resp = await client.post("/milestones/", json={"project_id": project["id"], "name": "Gate"})
        assert resp.status_code == 201
        resp = await client.post(
            "/dependencies/",
            json={"from_activity_id": b["id"], "to_activity_id": a["id"]},
        )
        assert resp.status_code == 201
        dependency = resp.json()

        resp = await client.get(f"/projects/{project['id']}/details")
        assert resp.status_code == 200
        details = resp.json()
        assert details["project"] == project
        assert [x["id"] for x in details["activities"]] == [a["id"], b["id"]]
        assert [m["name"] for m in details["milestones"]] == ["Gate"]
        assert details["dependencies"] == [dependency]

    @pytest.mark.asyncio
    async def test_details_unknown_project(self, client):
        resp = await client.get("/projects/no-such-id/details")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_activity_links(self, client):
        project = await create_project(client)
        a = await create_activity(client, project["id"], "A")
        b = await create_activity(client, project["id"], "B")
        await client.post("/dependencies/", json={"from_activity_id": b["id"], "to_activity_id": a["id"]})

        resp = await client.get(f"/activities/{b['id']}/links")
        assert resp.status_code == 200
        links = resp.json()
        assert [x["id"] for x in links["depends_on"]] == [a["id"]]
        assert links["required_by"] == []


class TestActivitiesAPI:

    @pytest.mark.asyncio
    async def test_project_cannot_change(self, client):
        project = await create_project(client)
        activity = await create_activity(client, project["id"], "A")

        resp = await client.patch(f"/activities/{activity['id']}", json={"project_id": "other"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_list_requires_project(self, client):
        resp = await client.get("/activities/")
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_delete_cascades_to_dependencies(self, client):
        project = await create_project(client)
        a = await create_activity(client, project["id"], "A")
        b = await create_activity(client, project["id"], "B")
        resp = await client.post("/dependencies/", json={"from_activity_id": b["id"], "to_activity_id": a["id"]})
        dependency = resp.json()

        assert (await client.delete(f"/activities/{a['id']}")).status_code == 204

        assert (await client.get(f"/dependencies/{dependency['id']}")).status_code == 404
        resp = await client.get("/activities/", params={"project_id": project["id"]})
        assert [x["id"] for x in resp.json()] == [b["id"]]


class TestDependenciesAPI:

    @pytest.mark.asyncio
    async def test_self_dependency_rejected(self, client):
        project = await create_project(client)
        a = await create_activity(client, project["id"], "A")

        resp = await client.post("/dependencies/", json={"from_activity_id": a["id"], "to_activity_id": a["id"]})
        assert resp.status_code == 400
        assert resp.json()["error"] == "self_dependency"
        assert resp.json()["message"] == "An activity cannot depend on itself."

        resp = await client.get("/dependencies/", params={"activity_id": a["id"]})
        assert resp.json() == []

    @pytest.mark.asyncio
    async def test_unselected_endpoint_rejected(self, client):
        resp = await client.post("/dependencies/", json={"from_activity_id": "a1"})
        assert resp.status_code == 400
        assert resp.json() == {
            "error": "missing_dependency_endpoint",
            "message": "Select both an activity and the activity it depends on.",
            "details": [{"loc": ["body", "to_activity_id"], "msg": "field required", "type": "missing"}],
        }

    @pytest.mark.asyncio
    async def test_list_touching_several_activities(self, client):
        project = await create_project(client)
        a = await create_activity(client, project["id"], "A")
        b = await create_activity(client, project["id"], "B")
        c = await create_activity(client, project["id"], "C")
        ba = (await client.post("/dependencies/", json={"from_activity_id": b["id"], "to_activity_id": a["id"]})).json()
        cb = (await client.post("/dependencies/", json={"from_activity_id": c["id"], "to_activity_id": b["id"]})).json()

        resp = await client.get("/dependencies/", params=[("activity_id", a["id"]), ("activity_id", c["id"])])
        assert {d["id"] for d in resp.json()} == {ba["id"], cb["id"]}

    @pytest.mark.asyncio
    async def test_delete(self, client):
        dependency = (await client.post(
            "/dependencies/",
            json={"from_activity_id": "a1", "to_activity_id": "a2", "type": "start-to-start"},
        )).json()
        assert dependency["type"] == "start-to-start"

        assert (await client.delete(f"/dependencies/{dependency['id']}")).status_code == 204
        assert (await client.get(f"/dependencies/{dependency['id']}")).status_code == 404


class TestAuthAPI:

    @pytest.mark.asyncio
    async def test_demo_session(self, client):
        resp = await client.get("/auth/session")
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "demo@portfolio.local"

    @pytest.mark.asyncio
    async def test_signed_out_is_denied(self, client):
        assert (await client.post("/auth/sign-out")).status_code == 204

        resp = await client.get("/projects/")
        assert resp.status_code == 401
        assert resp.json()["error"] == "not_authenticated"
        assert (await client.get("/auth/session")).status_code == 401

        resp = await client.post("/auth/sign-in", json={"email": "demo@portfolio.local", "password": "x"})
        assert resp.status_code == 200
        assert (await client.get("/projects/")).status_code == 200


ANNA = {"id": "user-anna", "email": "anna@example.com"}


class FakeSupabase:
    """Auth and table endpoints of one hosted project; tables are empty."""

    def __init__(self):
        self.table_requests: list[httpx.Request] = []
        self.logouts: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        authorization = request.headers.get("authorization")
        if path == "/auth/v1/token":
            return httpx.Response(200, json={"access_token": "jwt-anna", "expires_in": 3600, "user": ANNA})
        if path == "/auth/v1/user":
            if authorization == "Bearer jwt-anna":
                return httpx.Response(200, json=ANNA)
            return httpx.Response(401, json={"msg": "invalid JWT"})
        if path == "/auth/v1/logout":
            self.logouts.append(authorization)
            return httpx.Response(204)
        self.table_requests.append(request)
        return httpx.Response(200, json=[])


@pytest_asyncio.fixture
async def hosted():
    """API client wired to a Supabase store and session provider on a fake transport."""
    backend = FakeSupabase()
    transport = httpx.MockTransport(backend)
    store = SupabaseRecordStore("https://demo.supabase.co", "anon-key", transport=transport)
    provider = SupabaseSessionProvider("https://demo.supabase.co", "anon-key", transport=transport)
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_session_provider] = lambda: provider

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac, backend

    app.dependency_overrides.clear()
    await store.close()
    await provider.close()


class TestHostedSessionsAPI:

    @pytest.mark.asyncio
    async def test_anonymous_denied_after_another_sign_in(self, hosted):
        client, backend = hosted
        resp = await client.post("/auth/sign-in", json={"email": "anna@example.com", "password": "secret"})
        assert resp.status_code == 200

        resp = await client.get("/projects/")
        assert resp.status_code == 401
        assert resp.json()["error"] == "not_authenticated"
        assert (await client.get("/auth/session")).status_code == 401
        assert backend.table_requests == []

    @pytest.mark.asyncio
    async def test_table_calls_run_as_caller(self, hosted):
        client, backend = hosted

        resp = await client.get("/projects/", headers={"Authorization": "Bearer jwt-anna"})
        assert resp.status_code == 200
        assert resp.json() == []

        [request] = backend.table_requests
        assert request.url.path == "/rest/v1/projects"
        assert request.headers["authorization"] == "Bearer jwt-anna"

    @pytest.mark.asyncio
    async def test_rejected_token(self, hosted):
        client, backend = hosted

        resp = await client.get("/projects/", headers={"Authorization": "Bearer forged"})
        assert resp.status_code == 401
        assert backend.table_requests == []

    @pytest.mark.asyncio
    async def test_session_and_sign_out_use_bearer(self, hosted):
        client, backend = hosted
        headers = {"Authorization": "Bearer jwt-anna"}

        resp = await client.get("/auth/session", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "anna@example.com"

        assert (await client.post("/auth/sign-out")).status_code == 401
        assert (await client.post("/auth/sign-out", headers=headers)).status_code == 204
        assert backend.logouts == ["Bearer jwt-anna"]
