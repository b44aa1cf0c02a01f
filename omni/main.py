"""FastAPI application entry point.

Wiring only: logging, lifespan, exception handlers, routers.
No business logic here. See omni.core.lifespan and omni.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and
clear the get_settings cache) before calling create_app().
"""

from fastapi import FastAPI

from omni.api.v1 import api_router
from omni.core.config import get_settings
from omni.core.exception_handlers import register_exception_handlers
from omni.core.lifespan import create_lifespan
from omni.shared.telemetry.logging import setup_logging


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    setup_logging(settings)
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api/v1")

    return app
