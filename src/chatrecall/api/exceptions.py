"""Global exception handlers.

Maps the context error taxonomy onto HTTP responses.  Retrieval
failures return a fixed message; the chained cause (which may hold an
upstream error body) is logged, never sent to the client.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chatrecall.core.context.errors import (
    ContextRetrievalFailedError,
    ForbiddenError,
    InvalidInputError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

CODE_INVALID_INPUT = "INVALID_INPUT"
CODE_UNAUTHORIZED = "UNAUTHORIZED"
CODE_FORBIDDEN = "FORBIDDEN"
CODE_CONTEXT_RETRIEVAL_FAILED = "CONTEXT_RETRIEVAL_FAILED"

RETRIEVAL_FAILED_DETAIL = "AI context failed"


def _error(status_code: int, detail: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"detail": detail, "code": code}
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers on ``app``."""

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        if not errors:
            return _error(400, "invalid request", CODE_INVALID_INPUT)

        first = errors[0]
        message = first.get("msg", "invalid")
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        detail = f"{field}: {message}" if field else message
        return _error(400, detail, CODE_INVALID_INPUT)

    @app.exception_handler(InvalidInputError)
    async def handle_invalid_input(
        request: Request, exc: InvalidInputError
    ) -> JSONResponse:
        return _error(400, str(exc), CODE_INVALID_INPUT)

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(
        request: Request, exc: UnauthorizedError
    ) -> JSONResponse:
        return _error(401, "Authentication required", CODE_UNAUTHORIZED)

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError) -> JSONResponse:
        return _error(403, "Not a member of this room", CODE_FORBIDDEN)

    @app.exception_handler(ContextRetrievalFailedError)
    async def handle_retrieval_failed(
        request: Request, exc: ContextRetrievalFailedError
    ) -> JSONResponse:
        logger.error(
            "Context retrieval failed on %s",
            request.url.path,
            exc_info=exc,
        )
        return _error(500, RETRIEVAL_FAILED_DETAIL, CODE_CONTEXT_RETRIEVAL_FAILED)
