"""FastAPI application entry point."""

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from chatrecall.api.context import router as context_router
from chatrecall.api.exceptions import register_exception_handlers
from chatrecall.configs.config import get_app_config
from chatrecall.core.metrics import setup_metrics
from chatrecall.infra.concurrency import build_semaphore
from chatrecall.infra.db import build_db
from chatrecall.infra.logging import setup_logging
from chatrecall.infra.telemetry import init_telemetry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the chat database and the model semaphore; close them on shutdown."""
    config = get_app_config()
    async with AsyncExitStack() as stack:
        await stack.enter_async_context(
            asynccontextmanager(build_db)(app, config.third_party)
        )
        await stack.enter_async_context(
            asynccontextmanager(build_semaphore)(app, config.concurrency)
        )
        logger.info("Chatrecall started (model=%s)", config.llm.model_name)
        yield
        logger.info("Shutting down chatrecall")


def get_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = get_app_config()
    setup_logging(config.logging)

    app = FastAPI(
        title="Chatrecall",
        description="Finds the chat messages a user is trying to remember",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Middleware has to be in place before the app starts serving
    init_telemetry(app, config.tracing)
    setup_metrics(app, config)
    register_exception_handlers(app)

    app.include_router(context_router)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = get_app()
