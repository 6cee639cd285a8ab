"""
FastAPI application entrypoint for the Arisu API.

This module sets up the FastAPI app, configures logging, wires the service
context into the application lifespan and registers route handlers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from uuid import uuid4

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from api.routes import ROUTES
from shared import __version__
from shared.analytics import Counter
from shared.config import get_config
from shared.context import ServiceContext
from shared.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)

logger = get_logger(__name__)


def create_app(context: Optional[ServiceContext] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    When no context is given one is built from the environment at startup.
    """
    if context is None:
        load_dotenv()
        config = get_config()
        configure_logging(
            level=logging.getLevelName(config.log_level.upper()),
            log_file=config.log_file,
            log_stdout=config.log_stdout,
        )
        context = ServiceContext(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await run_in_threadpool(context.database.connect)
        if context.analytics.enabled:
            context.analytics.collect()
        logger.info("api_started", environment=context.config.environment)
        try:
            yield
        finally:
            await run_in_threadpool(context.close)
            logger.info("api_stopped")

    app = FastAPI(
        title="Arisu API",
        description="Organisations, projects, users, permissions and sessions",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    # CORS middleware (permissive; tighten per deployment)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def track_requests(request: Request, call_next):
        clear_request_context()
        bind_request_context(
            request_id=request.headers.get("x-request-id") or uuid4().hex,
            method=request.method,
            path=request.url.path,
        )
        context.analytics.inc(Counter.REQUEST)
        return await call_next(request)

    for name, router in ROUTES.items():
        app.include_router(router)
        logger.debug("route_registered", route=name, prefix=router.prefix or "/")

    return app


# Create the app instance
app = create_app()
