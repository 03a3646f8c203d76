"""ASGI application factory for typetester.

The font runtime (database engine, cache, store, registry and the operation
table) is built during application startup and stored on ``app.state``;
it is shut down with the application.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from litestar import Litestar
from litestar.config.compression import CompressionConfig

from typetester.app_factory import (
    EXCEPTION_HANDLERS,
    create_font_files_router,
    create_session_config,
    max_request_body_size,
)
from typetester.config import Settings, get_settings
from typetester.controllers import AuthController, FontAdminController, FontController
from typetester.lib import observability
from typetester.runtime import build_runtime

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> Litestar:
    """Create and configure the Litestar application."""
    settings = settings or get_settings()
    observability.configure(settings)

    @asynccontextmanager
    async def font_runtime_lifespan(app: Litestar) -> AsyncGenerator[None, None]:
        runtime = await build_runtime(settings)
        app.state.font_runtime = runtime
        try:
            yield
        finally:
            await runtime.shutdown()

    route_handlers: list = [AuthController, FontController, FontAdminController]
    files_router = create_font_files_router(settings.fonts)
    if files_router is not None:
        route_handlers.append(files_router)

    session_config = create_session_config(settings.secret_key, secure=not settings.debug)

    return Litestar(
        route_handlers=route_handlers,
        lifespan=[font_runtime_lifespan],
        middleware=[session_config.middleware],
        compression_config=CompressionConfig(backend="gzip"),
        exception_handlers=EXCEPTION_HANDLERS,
        request_max_body_size=max_request_body_size(settings.fonts),
        debug=settings.debug,
    )


def create_asgi_app():
    """Entry point used by the server: the app, wrapped for tracing if enabled."""
    return observability.instrument_app(create_app())


def __getattr__(name: str):
    # ``typetester.asgi:app`` is built on first access so importing this
    # module does not require a configured SECRET_KEY.
    if name == "app":
        return create_asgi_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
