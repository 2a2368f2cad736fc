"""
Record store selection.

The backing is chosen once, from configuration, the first time the store
is requested: Supabase when its URL and anon key are set, a SQL database
when DATABASE_URL is set, otherwise the in-memory demo store.
"""

from portfolio.config import Settings, get_settings
from portfolio.logging_config import get_logger
from portfolio.store.base import KIND_SPECS, KindSpec, RecordKind, RecordStore, spec_for
from portfolio.store.memory import MemoryRecordStore
from portfolio.store.sql import SqlRecordStore
from portfolio.store.supabase import SupabaseRecordStore

logger = get_logger(__name__)

__all__ = [
    "KIND_SPECS",
    "KindSpec",
    "RecordKind",
    "RecordStore",
    "MemoryRecordStore",
    "SqlRecordStore",
    "SupabaseRecordStore",
    "spec_for",
    "create_record_store",
    "get_record_store",
    "close_record_store",
]


def create_record_store(settings: Settings) -> RecordStore:
    """Build the store matching the configured backend."""
    backend = settings.backend_kind
    if backend == "supabase":
        logger.info(f"Using Supabase record store at {settings.supabase_url}")
        return SupabaseRecordStore(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout=settings.http_timeout,
        )
    if backend == "sql":
        logger.info("Using SQL record store")
        return SqlRecordStore(settings.database_url, echo=settings.debug)

    logger.warning("No backend configured - running in demo mode with an in-memory store")
    return MemoryRecordStore(seed=settings.demo_seed)


_store: RecordStore | None = None


def get_record_store() -> RecordStore:
    """Get or create the process-wide record store."""
    global _store
    if _store is None:
        _store = create_record_store(get_settings())
    return _store


async def close_record_store() -> None:
    global _store
    if _store is not None:
        await _store.close()
        _store = None
