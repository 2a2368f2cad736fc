"""
Application settings.

Values come from the environment or a local ``.env`` file. The backing
record store is picked from which of them are present.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


BackendKind = Literal["supabase", "sql", "memory"]


class Settings(BaseSettings):
    # Hosted backend (Supabase)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None

    # Self-hosted relational database, e.g. postgresql+asyncpg://...
    database_url: str | None = None

    debug: bool = False
    log_level: str | None = None
    log_json: bool = False

    # Load the sample portfolio into the in-memory store
    demo_seed: bool = True

    # Seconds; None disables the HTTP timeout entirely
    http_timeout: float | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def has_supabase_config(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def backend_kind(self) -> BackendKind:
        if self.has_supabase_config:
            return "supabase"
        if self.database_url:
            return "sql"
        return "memory"

    @property
    def demo_mode(self) -> bool:
        """No hosted backend: sessions are faked and auth is not enforced."""
        return not self.has_supabase_config


@lru_cache
def get_settings() -> Settings:
    return Settings()
