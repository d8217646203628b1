"""Single-process semaphore backend using ``asyncio`` primitives."""

from __future__ import annotations

import asyncio

from .base import SemaphoreBackend


class LocalSemaphoreBackend(SemaphoreBackend):
    """In-process semaphore backed by ``asyncio.Semaphore``.

    Each worker process gets its own budget; with N workers the upstream
    sees at most ``N * max_concurrency`` concurrent completion calls.
    """

    def __init__(self, max_concurrency: int) -> None:
        self._max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency)

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    async def acquire(self) -> None:
        await self._semaphore.acquire()

    async def release(self) -> None:
        self._semaphore.release()

    async def aclose(self) -> None:
        pass
