"""GatedLlmGateway: per-call concurrency gating around a gateway.

Every ``complete`` call holds a ``ModelSemaphore`` slot for the
duration of the upstream request.  When no slot frees up within the
semaphore's acquire timeout the call fails with
``GatewayUnavailableError`` (retryable), the same as a transport
failure from the caller's point of view.
"""

from __future__ import annotations

import logging

from chatrecall.core.context.errors import GatewayUnavailableError
from chatrecall.infra.concurrency import AcquireTimeout, ModelSemaphore

from .gateway import CompletionGateway

logger = logging.getLogger(__name__)


class GatedLlmGateway(CompletionGateway):
    """Gateway wrapper that gates every call behind a semaphore."""

    def __init__(self, inner: CompletionGateway, semaphore: ModelSemaphore) -> None:
        self._inner = inner
        self._semaphore = semaphore

    async def complete(self, instruction: str) -> str:
        try:
            async with self._semaphore.slot():
                return await self._inner.complete(instruction)
        except AcquireTimeout as e:
            logger.warning("No model slot available; rejecting LLM call.")
            raise GatewayUnavailableError("model is busy") from e
