"""Bill API application: routers, middleware and startup checks."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from alembic import script
from alembic.config import Config
from alembic.runtime import migration
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from bill import __version__
from bill.api import auth, families
from bill.core.config import settings
from bill.core.database import dispose_engine, get_engine
from bill.core.logging import configure_logging
from bill.core.telemetry import get_tracer_provider, shutdown_tracer_provider

# Before the app exists, so Uvicorn's own startup lines are structured too
configure_logging(log_level=settings.LOG_LEVEL)

logger = structlog.get_logger(__name__)

UPGRADE_HINT = "run `alembic upgrade head` from the backend directory"


def _check_alembic_migrations(sync_conn: Connection) -> str | None:
    """
    Compare the database's Alembic revision with the newest migration script.

    Returns:
        The database's revision. When alembic.ini cannot be found the revision
        is returned unchecked.

    Raises:
        RuntimeError: If the schema was never migrated or is behind the scripts
    """
    db_revision = migration.MigrationContext.configure(sync_conn).get_current_revision()

    ini_path = Path(settings.ALEMBIC_INI_PATH)
    if not ini_path.exists():
        logger.warning("schema_check_skipped", reason="alembic.ini not found", path=str(ini_path))
        return db_revision

    script_head = script.ScriptDirectory.from_config(Config(str(ini_path))).get_current_head()

    if db_revision is None:
        msg = f"Database schema is empty; {UPGRADE_HINT}"
        raise RuntimeError(msg)
    if db_revision != script_head:
        msg = f"Database schema is at {db_revision} but the code expects {script_head}; {UPGRADE_HINT}"
        raise RuntimeError(msg)

    return db_revision


async def _validate_database() -> None:
    async with get_engine().begin() as conn:
        await conn.execute(text("SELECT 1"))
        revision = await conn.run_sync(_check_alembic_migrations)
    logger.info("schema_revision_ok", revision=revision)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Install tracing and, outside DEBUG, refuse to start against a stale schema."""
    if settings.OTEL_ENABLED and (provider := get_tracer_provider()):
        trace.set_tracer_provider(provider)
        logger.info("otel_tracer_provider_installed")

    if settings.DEBUG:
        logger.info("schema_check_skipped", reason="debug mode")
    else:
        try:
            await _validate_database()
        except (RuntimeError, SQLAlchemyError, OSError) as e:
            logger.error("startup_aborted", error=str(e))
            raise

    logger.info("bill_api_started", version=__version__)
    try:
        yield
    finally:
        shutdown_tracer_provider()
        await dispose_engine()
        logger.info("bill_api_stopped")


app = FastAPI(
    title="Bill API",
    description="Onboarding and family management backend",
    version=__version__,
    lifespan=lifespan,
)

if settings.OTEL_ENABLED:
    FastAPIInstrumentor().instrument_app(app, excluded_urls=",".join(settings.OTEL_EXCLUDED_URLS))

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (auth.router, families.router):
    app.include_router(router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": "Bill API", "version": __version__}


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Liveness probe; never touches the database."""
    return {"status": "healthy"}


@app.get("/ready", response_model=None)
async def readiness_check() -> dict[str, str] | JSONResponse:
    """Readiness probe: 503 until the database answers."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("readiness_check_failed", error=str(e))
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ready"}
