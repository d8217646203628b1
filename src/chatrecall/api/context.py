"""Context retrieval endpoints.

Both endpoints require an authenticated requester (see
``chatrecall.infra.identity``) and a non-blank query.  Each request runs
under ``APIConfig.request_timeout``; running out of time is reported
like any other retrieval failure.
"""

import asyncio
import logging
from collections.abc import Awaitable

from fastapi import APIRouter

from chatrecall.configs.system import APIConfig
from chatrecall.core.context.errors import (
    ContextRetrievalFailedError,
    GatewayUnavailableError,
)
from chatrecall.core.context.models import ContextResponse

from .deps import APIConfigDep, ContextServiceDep, RequesterIdDep
from .models import (
    ContextResponseModel,
    ErrorResponse,
    FindContextGlobalRequest,
    FindContextRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/ai", tags=["context"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


async def _within_timeout(
    call: Awaitable[ContextResponse], api_config: APIConfig
) -> ContextResponseModel:
    timeout = api_config.request_timeout
    try:
        async with asyncio.timeout(timeout.total_seconds()):
            response = await call
    except TimeoutError as e:
        logger.warning("Context retrieval timed out after %s", timeout)
        unavailable = GatewayUnavailableError(f"request timed out after {timeout}")
        unavailable.__cause__ = e
        raise ContextRetrievalFailedError() from unavailable
    return ContextResponseModel.from_domain(response)


@router.post(
    "/find-context",
    response_model=ContextResponseModel,
    responses=_ERROR_RESPONSES,
)
async def find_context(
    body: FindContextRequest,
    requester_id: RequesterIdDep,
    service: ContextServiceDep,
    api_config: APIConfigDep,
) -> ContextResponseModel:
    """Find the messages in one room that the query refers to."""
    return await _within_timeout(
        service.find_context(requester_id, body.room_id, body.query), api_config
    )


@router.post(
    "/find-context-global",
    response_model=ContextResponseModel,
    responses=_ERROR_RESPONSES,
)
async def find_context_global(
    body: FindContextGlobalRequest,
    requester_id: RequesterIdDep,
    service: ContextServiceDep,
    api_config: APIConfigDep,
) -> ContextResponseModel:
    """Find the messages across all of the requester's rooms that the query refers to."""
    return await _within_timeout(
        service.find_context_global(requester_id, body.query), api_config
    )
