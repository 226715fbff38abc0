"""FastAPI application factory for the ThinkTest analysis API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from thinktest import __version__
from thinktest.analysis.engine import PluginAnalyzer
from thinktest.config import ThinkTestConfig
from thinktest.storage.db import get_db


def create_app(config: ThinkTestConfig | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or ThinkTestConfig.load()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.db = await get_db(config.db_path)
        try:
            yield
        finally:
            await app.state.db.close()

    app = FastAPI(
        title="ThinkTest",
        version=__version__,
        docs_url="/api/docs",
        lifespan=lifespan,
    )

    # Store config and analyzer in app state
    app.state.config = config
    app.state.analyzer = PluginAnalyzer(config.rules)

    # Register API routers
    from thinktest.web.api.analyses import router as analyses_router
    from thinktest.web.api.elementor import router as elementor_router

    app.include_router(analyses_router, prefix="/api")
    app.include_router(elementor_router, prefix="/api")

    return app
