"""Error taxonomy for context retrieval.

Client errors (``InvalidInputError``, ``UnauthorizedError``,
``ForbiddenError``) are reported to the caller as-is.  Everything that
goes wrong between building the prompt and parsing the model's answer
is collapsed into ``ContextRetrievalFailedError`` at the orchestrator
boundary, with the original exception chained as ``__cause__``.
"""

from __future__ import annotations


class ContextError(Exception):
    """Base class for every error raised by the context engine."""


# ---------------------------------------------------------------------------
# Client errors
# ---------------------------------------------------------------------------


class InvalidInputError(ContextError):
    """Blank query, empty message window, or a missing / extra room scope."""


class UnauthorizedError(ContextError):
    """No authenticated requester."""


class ForbiddenError(ContextError):
    """Requester is not a member of the requested room."""


# ---------------------------------------------------------------------------
# Upstream (gateway) errors
# ---------------------------------------------------------------------------


class GatewayError(ContextError):
    """Base class for LLM gateway failures."""

    retryable: bool = False


class GatewayUnavailableError(GatewayError):
    """Transport failure: connection refused, timeout, no model slot."""

    retryable = True


class GatewayRejectedError(GatewayError):
    """Upstream answered with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"LLM upstream rejected the request: HTTP {status_code}")
        self.status_code = status_code
        self.body = body


class MalformedUpstreamResponseError(GatewayError):
    """Success envelope without ``choices[0].message.content``."""


# ---------------------------------------------------------------------------
# Parser errors
# ---------------------------------------------------------------------------


class UnparsableResponseError(ContextError):
    """Model text holds no parseable JSON object."""


# ---------------------------------------------------------------------------
# Orchestrator boundary
# ---------------------------------------------------------------------------


class ContextRetrievalFailedError(ContextError):
    """Opaque failure surfaced to the caller; the cause is chained."""

    def __init__(self, message: str = "AI context failed") -> None:
        super().__init__(message)
