"""Concurrency gate for LLM calls.

``ModelSemaphore`` bounds how many completion calls run at once in this
process.  A request that cannot get a slot within ``acquire_timeout``
fails with ``AcquireTimeout`` instead of queueing forever.
"""

from .base import AcquireTimeout, SemaphoreBackend
from .local_backend import LocalSemaphoreBackend
from .semaphore import ModelSemaphore, build_semaphore, get_model_semaphore

__all__ = [
    "AcquireTimeout",
    "LocalSemaphoreBackend",
    "ModelSemaphore",
    "SemaphoreBackend",
    "build_semaphore",
    "get_model_semaphore",
]
