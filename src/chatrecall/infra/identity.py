"""Requester identity, as asserted by the upstream auth gateway.

Authentication itself happens before a request reaches this service:
the gateway validates the session and forwards the user id in a trusted
header (``IdentityConfig.user_id_header``).  This module only reads it.

A missing, non-numeric, or non-positive header value resolves to
``None``; the context service turns that into ``UnauthorizedError``.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Annotated

from fastapi import Depends, Request

from chatrecall.configs.config import get_identity_config
from chatrecall.configs.system import IdentityConfig

logger = logging.getLogger(__name__)

current_requester_id: ContextVar[int | None] = ContextVar(
    "current_requester_id", default=None
)


def parse_requester_id(raw: str | None) -> int | None:
    """Parse a header value into a positive user id, or ``None``."""
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if value > 0 else None


async def get_requester_id(
    request: Request,
    config: Annotated[IdentityConfig, Depends(get_identity_config)],
) -> int | None:
    """FastAPI dependency: the current requester id, or ``None``."""
    raw = request.headers.get(config.user_id_header)
    requester_id = parse_requester_id(raw)
    if raw is not None and requester_id is None:
        logger.debug("Ignoring invalid %s header value", config.user_id_header)
    current_requester_id.set(requester_id)
    return requester_id
