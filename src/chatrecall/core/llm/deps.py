"""FastAPI dependency factories for the LLM gateway."""

from typing import Annotated

from fastapi import Depends

from chatrecall.configs.config import get_llm_config
from chatrecall.configs.system import LLMConfig
from chatrecall.infra.concurrency import ModelSemaphore, get_model_semaphore

from .gated import GatedLlmGateway
from .gateway import CompletionGateway, HttpLlmGateway


def get_llm_gateway(
    config: Annotated[LLMConfig, Depends(get_llm_config)],
) -> HttpLlmGateway:
    """Create the HTTP gateway from the current LLM configuration."""
    return HttpLlmGateway(config)


def get_gated_llm_gateway(
    gateway: Annotated[HttpLlmGateway, Depends(get_llm_gateway)],
    semaphore: Annotated[ModelSemaphore, Depends(get_model_semaphore)],
) -> CompletionGateway:
    """Wrap the HTTP gateway with the process-wide model semaphore."""
    return GatedLlmGateway(gateway, semaphore)
