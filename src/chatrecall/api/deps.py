"""Centralized FastAPI dependency type aliases.

Import these ``*Dep`` aliases in route modules instead of manually
writing ``Annotated[T, Depends(get_xxx)]`` everywhere.  Each alias
corresponds to a single ``get_*`` factory and can be overridden in
tests via ``app.dependency_overrides[get_xxx] = ...``.
"""

from typing import Annotated

from fastapi import Depends

from chatrecall.configs.config import get_api_config
from chatrecall.configs.system import APIConfig
from chatrecall.core.context.deps import get_context_service
from chatrecall.core.context.service import ContextRetrievalService
from chatrecall.infra.identity import get_requester_id

APIConfigDep = Annotated[APIConfig, Depends(get_api_config)]
ContextServiceDep = Annotated[ContextRetrievalService, Depends(get_context_service)]
RequesterIdDep = Annotated[int | None, Depends(get_requester_id)]
