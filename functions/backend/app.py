"""
FastAPI application entry point for the users/todos API.
"""

from __future__ import annotations

from fastapi import FastAPI

from backend.config import Settings, get_settings
from backend.dependencies import PlatformClients, build_platform_clients
from backend.error_handlers import register_exception_handlers
from backend.middleware import install_middleware
from backend.routes import router


def create_app(
    settings: Settings | None = None, clients: PlatformClients | None = None
) -> FastAPI:
    """
    Build the API. Platform clients are constructed here once unless the
    caller injects its own (tests pass in-memory clients).
    """
    settings = settings or get_settings()
    app = FastAPI(title="Firebase Functions API (FastAPI)", version="0.1.0")
    app.state.settings = settings
    app.state.clients = clients or build_platform_clients(settings)

    install_middleware(app, settings)
    register_exception_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)
    return app


def get_app() -> FastAPI:
    """Factory for `uvicorn --factory backend.app:get_app`."""
    return create_app()
