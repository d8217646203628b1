"""Context retrieval orchestrator.

Pipeline for one request::

    authorize -> fetch window -(empty)-> fixed "no messages" answer
                              -(else)--> build prompt -> gateway -> parse
                                         -> ground ids against the window

Anything that fails between building the prompt and parsing the answer
is raised as ``ContextRetrievalFailedError`` with the original error
chained.  Grounding never fails: ids the model made up are dropped.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence

from chatrecall.configs.system import ContextConfig
from chatrecall.core.llm.gateway import CompletionGateway
from chatrecall.core.metrics import (
    CONTEXT_DURATION_SECONDS,
    CONTEXT_REQUESTS_TOTAL,
    CONTEXT_WINDOW_SIZE,
    GROUNDED_IDS_TOTAL,
    PARSE_FAILURES_TOTAL,
)
from chatrecall.infra.telemetry import (
    ATTR_CONTEXT_GROUNDED_IDS,
    ATTR_CONTEXT_MODE,
    ATTR_CONTEXT_PROPOSED_IDS,
    ATTR_CONTEXT_QUERY_LEN,
    ATTR_CONTEXT_WINDOW_SIZE,
    SPAN_CONTEXT_FETCH,
    SPAN_CONTEXT_PARSE,
    SPAN_CONTEXT_RETRIEVE,
    tracer,
)

from .errors import (
    ContextError,
    ContextRetrievalFailedError,
    ForbiddenError,
    UnauthorizedError,
    UnparsableResponseError,
)
from .models import (
    ContextMessage,
    ContextMode,
    ContextQuery,
    ContextResponse,
    LlmResult,
    Message,
)
from .parser import parse_llm_result
from .prompt import PromptBuilder
from .stores import MembershipStore, MessageStore

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_FAILED = "failed"
STATUS_UNAUTHORIZED = "unauthorized"
STATUS_FORBIDDEN = "forbidden"
STATUS_INVALID = "invalid"


def require_requester(requester_id: int | None) -> int:
    """Return *requester_id* if it names a user, else raise ``UnauthorizedError``."""
    # bool is an int subclass; ``True`` is not a user.
    if (
        requester_id is None
        or isinstance(requester_id, bool)
        or not isinstance(requester_id, int)
        or requester_id <= 0
    ):
        raise UnauthorizedError("UNAUTHORIZED")
    return requester_id


def ground_messages(
    window: Sequence[Message], proposed_ids: Iterable[int]
) -> list[ContextMessage]:
    """Keep the window messages whose id the model proposed, in window order.

    Ids outside the window are ignored; the model's ordering is not used.
    """
    picked = set(proposed_ids)
    return [ContextMessage.from_message(m) for m in window if m.id in picked]


class ContextRetrievalService:
    """Answers "which recent messages is this query about?" for one requester.

    Stateless between calls; the collaborators are injected per request.
    """

    def __init__(
        self,
        message_store: MessageStore,
        membership_store: MembershipStore,
        gateway: CompletionGateway,
        config: ContextConfig,
    ) -> None:
        self._messages = message_store
        self._memberships = membership_store
        self._gateway = gateway
        self._config = config
        self._prompt_builder = PromptBuilder(config)

    # ------------------------------------------------------------------
    # Caller-facing operations
    # ------------------------------------------------------------------

    async def find_context(
        self, requester_id: int | None, room_id: int | None, query: str
    ) -> ContextResponse:
        """Search the recent history of one room the requester belongs to."""
        # Identity is checked before the query itself is validated.
        require_requester(requester_id)
        return await self.retrieve(ContextQuery.for_room(requester_id, room_id, query))

    async def find_context_global(
        self, requester_id: int | None, query: str
    ) -> ContextResponse:
        """Search the recent history of every room the requester belongs to."""
        require_requester(requester_id)
        return await self.retrieve(ContextQuery.for_requester(requester_id, query))

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def retrieve(self, query: ContextQuery) -> ContextResponse:
        mode = query.mode.value
        start = time.monotonic()
        status = STATUS_FAILED
        with tracer.start_as_current_span(SPAN_CONTEXT_RETRIEVE) as span:
            span.set_attribute(ATTR_CONTEXT_MODE, mode)
            span.set_attribute(ATTR_CONTEXT_QUERY_LEN, len(query.query))
            try:
                requester_id = await self._authorize(query)

                window = await self._fetch_window(query, requester_id)
                span.set_attribute(ATTR_CONTEXT_WINDOW_SIZE, len(window))
                CONTEXT_WINDOW_SIZE.labels(mode=mode).observe(len(window))
                if not window:
                    status = STATUS_EMPTY
                    logger.info("No candidate messages for %s query", mode)
                    return ContextResponse(summary=self._empty_summary(query.mode))

                result = await self._ask_model(window, query)

                messages = ground_messages(window, result.message_ids)
                dropped = len(result.message_ids) - len(messages)
                GROUNDED_IDS_TOTAL.labels(result="kept").inc(len(messages))
                GROUNDED_IDS_TOTAL.labels(result="dropped").inc(dropped)
                span.set_attribute(ATTR_CONTEXT_PROPOSED_IDS, len(result.message_ids))
                span.set_attribute(ATTR_CONTEXT_GROUNDED_IDS, len(messages))
                if dropped:
                    logger.debug(
                        "Dropped %d model-proposed id(s) outside the window", dropped
                    )

                status = STATUS_OK
                return ContextResponse(summary=result.summary, messages=messages)
            except UnauthorizedError:
                status = STATUS_UNAUTHORIZED
                raise
            except ForbiddenError:
                status = STATUS_FORBIDDEN
                raise
            except ContextRetrievalFailedError as e:
                span.record_exception(e)
                raise
            except ContextError:
                status = STATUS_INVALID
                raise
            finally:
                CONTEXT_REQUESTS_TOTAL.labels(mode=mode, status=status).inc()
                CONTEXT_DURATION_SECONDS.labels(mode=mode).observe(
                    time.monotonic() - start
                )

    async def _authorize(self, query: ContextQuery) -> int:
        requester_id = require_requester(query.requester_id)

        # room_id is set exactly for room-scoped queries.
        if query.room_id is not None:
            if not await self._memberships.is_member(query.room_id, requester_id):
                logger.info(
                    "Requester %d is not a member of room %d",
                    requester_id,
                    query.room_id,
                )
                raise ForbiddenError("FORBIDDEN")
        return requester_id

    async def _fetch_window(
        self, query: ContextQuery, requester_id: int
    ) -> list[Message]:
        with tracer.start_as_current_span(SPAN_CONTEXT_FETCH):
            if query.room_id is not None:
                return await self._messages.fetch_recent_by_room(
                    query.room_id, self._config.room_window_size
                )
            return await self._messages.fetch_recent_for_requester(
                requester_id, self._config.global_window_size
            )

    async def _ask_model(
        self, window: Sequence[Message], query: ContextQuery
    ) -> LlmResult:
        try:
            prompt = self._prompt_builder.build(window, query.query, query.mode)
            raw = await self._gateway.complete(prompt)
            with tracer.start_as_current_span(SPAN_CONTEXT_PARSE):
                return parse_llm_result(raw, max_ids=self._config.max_message_ids)
        except UnparsableResponseError as e:
            PARSE_FAILURES_TOTAL.inc()
            logger.warning("Model response could not be parsed: %s", e)
            raise ContextRetrievalFailedError() from e
        except Exception as e:
            logger.warning(
                "Context retrieval failed: %s (retryable=%s)",
                type(e).__name__,
                getattr(e, "retryable", False),
            )
            raise ContextRetrievalFailedError() from e

    def _empty_summary(self, mode: ContextMode) -> str:
        if mode is ContextMode.ROOM_SCOPED:
            return self._config.empty_room_summary
        return self._config.empty_global_summary
