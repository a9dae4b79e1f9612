"""Application factory and CLI entry point.

``create_app()`` wires up the survey API:

  - a lifespan handler that builds the response service, optionally seeds
    surveys from YAML, and releases the connection pool on shutdown
  - CORS for browser-based respondent clients
  - global handlers turning SDK ``ValueError`` into 404/403/409/400
  - the runtime and response routers under ``/api/v1``
  - ``/health``, which reports whether the database answers

``cli()`` backs the ``survey-server`` console script.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from survey_db.engine import dispose_engine, ping_database, session_scope
from survey_runtime.responses import ResponseService
from survey_runtime.store import SurveyStore

from survey_server.config import ServerSettings, load_settings
from survey_server.errors import (
    generic_error_handler,
    key_error_handler,
    value_error_handler,
)
from survey_server.routes import register_routes

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Startup seeding
# ------------------------------------------------------------------

async def seed_from_directory(service: ResponseService, survey_dir: str) -> list[str]:
    """Upsert every survey under ``survey_dir`` in one transaction.

    Each survey keeps the status from its YAML file.  Returns the seeded ids.
    """
    store = SurveyStore(survey_dir=survey_dir)
    store.load()
    seeded = sorted(store.surveys)
    async with session_scope() as db:
        for survey_id in seeded:
            await service.save_definition(
                db, store.surveys[survey_id], store.statuses[survey_id],
            )
    logger.info("Seeded %d surveys from %s", len(seeded), survey_dir)
    return seeded


# ------------------------------------------------------------------
# Lifespan
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: ServerSettings = app.state.settings
    service = ResponseService()
    if settings.seed_dir:
        await seed_from_directory(service, settings.seed_dir)
    app.state.service = service
    logger.info("Survey server ready")

    yield

    await dispose_engine()


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build the FastAPI application for ``settings`` (default: from env)."""
    settings = settings or load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Survey Runtime API",
        description="Serves branching surveys to respondents and stores their answers",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    @app.get("/health")
    async def health() -> dict:
        """Readiness probe; ``status`` is ``"error"`` when the database is down."""
        try:
            await ping_database()
        except Exception as exc:
            logger.error("Health check failed: %s", exc)
            return {"status": "error", "detail": str(exc)}
        return {"status": "ok"}

    register_routes(app)
    return app


# For ``uvicorn survey_server.app:app``
app = create_app()


def cli() -> None:
    """Console-script entry point: ``survey-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "survey_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
