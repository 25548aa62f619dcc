"""
FastAPI application with assembled routers.

Builds the ingestion API: logging is configured from settings on startup,
every request passes through request-id logging, and all routes live under
/api/v1.

Dependencies: fastapi, chunkstream.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chunkstream import __version__
from chunkstream.configs import get_settings
from chunkstream.observability import configure_logging
from chunkstream.observability.middleware import REQUEST_ID_HEADER, RequestLoggingMiddleware

from . import api_router

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging before the first request and log shutdown."""
    settings = get_settings()
    configure_logging(settings.effective_log_level)
    logger = logging.getLogger("uvicorn")
    logger.info(
        f"Chunkstream {__version__} ({settings.environment}): "
        f"{settings.pipeline.worker_count} workers per run, "
        f"buffer size {settings.pipeline.buffer_size or 'unbounded'}"
    )

    yield

    logger.info("Chunkstream API stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Application with health and ingestion routes under /api/v1
    """
    app = FastAPI(
        title="Chunkstream API",
        description="Stream paragraphs and markdown sections from local directories and S3",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(api_router, prefix=API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "chunkstream.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
