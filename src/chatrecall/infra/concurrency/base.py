"""Concurrency primitives: abstract backend and exceptions."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AcquireTimeout(Exception):
    """Raised when a model slot cannot be acquired within the timeout."""


class SemaphoreBackend(ABC):
    """Interface for concurrency-semaphore backends."""

    @abstractmethod
    async def acquire(self) -> None:
        """Wait until a concurrency slot is available, then claim it."""

    @abstractmethod
    async def release(self) -> None:
        """Free a concurrency slot so the next waiter can proceed."""

    @abstractmethod
    async def aclose(self) -> None:
        """Release any resources held by the backend."""
