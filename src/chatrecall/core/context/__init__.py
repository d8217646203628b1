"""LLM-grounded context retrieval over recent chat messages.

The service and its FastAPI dependency live in ``.service`` and
``.deps``; they are not re-exported here so that the leaf modules
(models, errors, parser, prompt) import without pulling in the gateway.
"""

from .errors import (  # noqa: F401
    ContextError,
    ContextRetrievalFailedError,
    ForbiddenError,
    GatewayError,
    GatewayRejectedError,
    GatewayUnavailableError,
    InvalidInputError,
    MalformedUpstreamResponseError,
    UnauthorizedError,
    UnparsableResponseError,
)
from .models import (  # noqa: F401
    ContextMessage,
    ContextMode,
    ContextQuery,
    ContextResponse,
    LlmResult,
    Message,
)
