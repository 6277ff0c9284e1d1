"""FastAPI application factory with async lifespan for the database and event listeners."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lockbox.api.exception_handlers import register_exception_handlers
from lockbox.api.v1.router import v1_router
from lockbox.config import Settings, get_settings
from lockbox.database import close_db, get_session_factory, init_db
from lockbox.services.action_log_service import record_resource_created
from lockbox.services.events import RESOURCE_CREATED, EventDispatcher

logger = logging.getLogger(__name__)


def build_event_dispatcher(settings: Settings) -> EventDispatcher:
    """Create the dispatcher with the built-in creation listeners enabled by ``settings``."""
    dispatcher = EventDispatcher()
    if settings.action_log_enabled:
        dispatcher.subscribe(RESOURCE_CREATED, record_resource_created)
    return dispatcher


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle.

    On startup: initialize database engine, session factory and the event
    dispatcher. On shutdown: dispose of the database engine.
    """
    settings = get_settings()

    engine = await init_db(settings.database_url)
    app.state.db_engine = engine
    app.state.session_factory = get_session_factory(engine)
    app.state.event_dispatcher = build_event_dispatcher(settings)
    logger.info(
        "Lockbox started with %d creation listener(s)",
        len(app.state.event_dispatcher.listeners(RESOURCE_CREATED)),
    )

    yield

    await close_db(engine)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This is the app factory. Uvicorn calls it with the --factory flag:
        uvicorn lockbox.app:create_app --factory
    """
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(
        title="Lockbox",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    app.include_router(v1_router, prefix=settings.api_prefix)
    register_exception_handlers(app)

    return app
