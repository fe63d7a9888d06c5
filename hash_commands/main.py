"""Hash Commands API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - One CommandDispatch per application, built from the supplied registries
    - CORS configured from settings (not hardcoded)

Design Decisions:
    - create_app() factory: host applications (and tests) pass their own
      CommandRegistry / RouteTable; the module-level `app` starts empty
    - Dispatch built in the factory, not the lifespan, so app.state is ready
      even when the ASGI lifespan is not run
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hash_commands.api.error_handlers import register_error_handlers
from hash_commands.api.routes import hash_commands, health
from hash_commands.config import get_settings
from hash_commands.infrastructure.observability import setup_logging
from hash_commands.services.command_dispatch import CommandDispatch
from hash_commands.services.command_registry import (
    CommandRegistry,
    RouteTable,
    build_default_dispatchers,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    logger.info(
        f"Hash Commands API started with methods {sorted(app.state.dispatch.methods)}",
    )
    yield
    logger.info("Hash Commands API shutting down")


def create_app(
    registry: CommandRegistry | None = None,
    routes: RouteTable | None = None,
) -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Hash Commands API", version="1.0.0", lifespan=lifespan,
    )

    app.state.registry = registry or CommandRegistry()
    app.state.routes = routes or RouteTable()
    app.state.dispatch = CommandDispatch(
        build_default_dispatchers(app.state.registry, app.state.routes),
    )
    app.state.dispatch_lock = asyncio.Lock()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(hash_commands.router)
    register_error_handlers(app)
    return app


app = create_app()
