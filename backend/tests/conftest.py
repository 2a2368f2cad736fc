"""
Pytest configuration and fixtures for portfolio tests.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from portfolio.auth import DemoSessionProvider, get_session_provider
from portfolio.main import app
from portfolio.store import MemoryRecordStore, SqlRecordStore, get_record_store


@pytest.fixture
def memory_store():
    """Empty in-memory store."""
    return MemoryRecordStore()


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    """SQL store on a throwaway SQLite file."""
    store = SqlRecordStore(f"sqlite+aiosqlite:///{tmp_path / 'portfolio.db'}")
    await store.open()
    yield store
    await store.close()


@pytest_asyncio.fixture(params=["memory", "sql"])
async def store(request, tmp_path):
    """Every locally testable backing; tests using it must pass on both."""
    if request.param == "memory":
        yield MemoryRecordStore()
        return

    store = SqlRecordStore(f"sqlite+aiosqlite:///{tmp_path / 'portfolio.db'}")
    await store.open()
    yield store
    await store.close()


@pytest.fixture
def session_provider():
    return DemoSessionProvider()


@pytest_asyncio.fixture
async def client(memory_store, session_provider):
    """Async test client wired to an empty in-memory store and a demo session."""
    app.dependency_overrides[get_record_store] = lambda: memory_store
    app.dependency_overrides[get_session_provider] = lambda: session_provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
