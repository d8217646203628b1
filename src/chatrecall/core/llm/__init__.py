"""LLM gateway: raw text in, raw model text out."""

from .deps import get_gated_llm_gateway, get_llm_gateway  # noqa: F401
from .gated import GatedLlmGateway  # noqa: F401
from .gateway import (  # noqa: F401
    CompletionGateway,
    HttpLlmGateway,
    build_completion_payload,
    extract_completion_text,
)
