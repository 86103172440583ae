"""Main API Server entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request

from .. import __version__
from ..core.runtime import RuntimeContext
from .router import router

logger = logging.getLogger("ApiServer")

API_PREFIX = "/api/v1"


def create_app(runtime: RuntimeContext) -> FastAPI:
    """Build the FastAPI app around an already running playback runtime."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"API Server starting up, assets at {runtime.resolver.root}")
        yield
        # Shutdown
        logger.info("API Server shutting down")

    app = FastAPI(
        title="Audio Server",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.runtime = runtime

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"[{request.method}] {request.url.path} -> {response.status_code}")
        return response

    app.include_router(router, prefix=API_PREFIX)

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    return app
