"""ModelSemaphore: concurrency limiter for LLM calls."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request

from chatrecall.configs.system import ConcurrencyConfig
from chatrecall.core.metrics import SEMAPHORE_ACQUIRES_TOTAL, SEMAPHORE_WAIT_SECONDS
from chatrecall.infra.telemetry import (
    ATTR_SEMAPHORE_TIMEOUT,
    SPAN_SEMAPHORE_SLOT,
    tracer,
)

from .base import AcquireTimeout, SemaphoreBackend
from .local_backend import LocalSemaphoreBackend

logger = logging.getLogger(__name__)


class ModelSemaphore:
    """Async semaphore with an acquire timeout.

    Usage::

        async with semaphore.slot():
            text = await gateway.complete(prompt)
    """

    def __init__(
        self, backend: SemaphoreBackend, acquire_timeout: timedelta
    ) -> None:
        self._backend = backend
        self._acquire_timeout = acquire_timeout.total_seconds()

    async def acquire(self) -> None:
        """Wait for a concurrency slot (with timeout), then claim it.

        Raises:
            AcquireTimeout: if no slot frees up within the timeout.
        """
        start = time.monotonic()
        try:
            async with asyncio.timeout(self._acquire_timeout):
                await self._backend.acquire()
        except TimeoutError:
            elapsed = time.monotonic() - start
            SEMAPHORE_WAIT_SECONDS.observe(elapsed)
            SEMAPHORE_ACQUIRES_TOTAL.labels(result="timeout").inc()
            logger.debug("Semaphore acquire timed out after %.3fs", elapsed)
            raise AcquireTimeout(
                "Timed out waiting for a model concurrency slot."
            ) from None
        elapsed = time.monotonic() - start
        SEMAPHORE_WAIT_SECONDS.observe(elapsed)
        SEMAPHORE_ACQUIRES_TOTAL.labels(result="ok").inc()
        logger.debug("Semaphore acquired in %.3fs", elapsed)

    async def release(self) -> None:
        """Free the concurrency slot."""
        await self._backend.release()

    @asynccontextmanager
    async def slot(self) -> AsyncGenerator[None, None]:
        """Acquire a slot, yield, release."""
        with tracer.start_as_current_span(SPAN_SEMAPHORE_SLOT) as span:
            span.set_attribute(ATTR_SEMAPHORE_TIMEOUT, self._acquire_timeout)
            await self.acquire()
            try:
                yield
            finally:
                await self.release()

    async def aclose(self) -> None:
        """Shut down the underlying backend."""
        await self._backend.aclose()


# ---------------------------------------------------------------------------
# Lifespan dependency
# ---------------------------------------------------------------------------


async def build_semaphore(
    app: FastAPI, config: ConcurrencyConfig
) -> AsyncGenerator[None, None]:
    """Create a ``ModelSemaphore``, attach to ``app.state``; close on shutdown."""
    semaphore = ModelSemaphore(
        LocalSemaphoreBackend(max_concurrency=config.max_concurrency),
        acquire_timeout=config.acquire_timeout,
    )
    logger.info(
        "ModelSemaphore: local backend (max_concurrency=%d)",
        config.max_concurrency,
    )
    app.state.semaphore = semaphore
    yield
    await semaphore.aclose()


# ---------------------------------------------------------------------------
# Per-request dependency, reads from app.state
# ---------------------------------------------------------------------------


def get_model_semaphore(request: Request) -> ModelSemaphore:
    """Return the ``ModelSemaphore`` from ``app.state``."""
    return request.app.state.semaphore
