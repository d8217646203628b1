"""FastAPI dependency factory for the context retrieval service.

``get_context_service`` is a per-request ``Depends`` factory with an
explicit parameter chain; tests override it (or any link of it) via
``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from chatrecall.configs.config import get_context_config
from chatrecall.configs.system import ContextConfig
from chatrecall.core.llm import CompletionGateway, get_gated_llm_gateway
from chatrecall.infra.db import get_membership_store, get_message_store

from .service import ContextRetrievalService
from .stores import MembershipStore, MessageStore


def get_context_service(
    message_store: Annotated[MessageStore, Depends(get_message_store)],
    membership_store: Annotated[MembershipStore, Depends(get_membership_store)],
    gateway: Annotated[CompletionGateway, Depends(get_gated_llm_gateway)],
    config: Annotated[ContextConfig, Depends(get_context_config)],
) -> ContextRetrievalService:
    """Create a context retrieval service for this request."""
    return ContextRetrievalService(message_store, membership_store, gateway, config)
