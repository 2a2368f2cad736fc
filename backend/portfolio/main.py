"""
Portfolio - project portfolio tracker with activities, milestones and dependencies.
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager

from portfolio import __version__
from portfolio.auth import close_session_provider
from portfolio.config import get_settings
from portfolio.exceptions import register_exception_handlers
from portfolio.logging_config import setup_logging, get_logger
from portfolio.routes import activities, auth, dependencies, milestones, projects
from portfolio.store import close_record_store, get_record_store

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the record store on startup and release it on shutdown."""
    settings = get_settings()
    logger.info(f"Starting Portfolio API ({settings.backend_kind} backend)...")

    store = get_record_store()
    await store.open()

    yield

    logger.info("Shutting down Portfolio API...")
    await close_record_store()
    await close_session_provider()


app = FastAPI(
    title="Portfolio",
    description="Project portfolio tracker: projects, activities, milestones and dependencies",
    version=__version__,
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(auth.router, prefix="/auth", tags=["Auth"])
app.include_router(projects.router, prefix="/projects", tags=["Projects"])
app.include_router(activities.router, prefix="/activities", tags=["Activities"])
app.include_router(milestones.router, prefix="/milestones", tags=["Milestones"])
app.include_router(dependencies.router, prefix="/dependencies", tags=["Dependencies"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "backend": get_settings().backend_kind}
