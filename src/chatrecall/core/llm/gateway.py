"""LLM gateway: one chat-completion request per call.

Speaks the OpenAI-compatible ``POST /chat/completions`` wire format over
``httpx``.  Every call opens a fresh client; there is no caching and no
automatic retry.  Failures are mapped onto the gateway error taxonomy:

* transport problems (connect, timeout) -> ``GatewayUnavailableError``
* non-2xx status                        -> ``GatewayRejectedError``
* 2xx without ``choices[0].message.content`` -> ``MalformedUpstreamResponseError``
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from chatrecall.configs.system import LLMConfig
from chatrecall.core.context.errors import (
    GatewayRejectedError,
    GatewayUnavailableError,
    MalformedUpstreamResponseError,
)
from chatrecall.core.metrics import (
    LLM_CALLS_IN_FLIGHT,
    LLM_CALLS_TOTAL,
    LLM_LATENCY_SECONDS,
)
from chatrecall.infra.telemetry import (
    ATTR_LLM_MODEL,
    ATTR_LLM_PROMPT_LEN,
    ATTR_LLM_STATUS_CODE,
    SPAN_LLM_COMPLETE,
    tracer,
)

logger = logging.getLogger(__name__)

COMPLETIONS_PATH = "/chat/completions"

ROLE_SYSTEM = "system"
ROLE_USER = "user"

# -- OpenAI Chat Completions response keys ---------------------------------
_KEY_CHOICES = "choices"
_KEY_MESSAGE = "message"
_KEY_CONTENT = "content"

# Upstream bodies can be large HTML error pages; keep log lines short.
_LOG_BODY_LIMIT = 500


class CompletionGateway(ABC):
    """Anything that turns an instruction into raw model text."""

    @abstractmethod
    async def complete(self, instruction: str) -> str:
        """Return the model's raw text for *instruction*."""


def build_completion_payload(
    instruction: str, *, model: str, temperature: float, system_instruction: str
) -> dict[str, Any]:
    """The JSON body sent to ``/chat/completions``."""
    return {
        "model": model,
        "temperature": temperature,
        "messages": [
            {"role": ROLE_SYSTEM, "content": system_instruction},
            {"role": ROLE_USER, "content": instruction},
        ],
    }


def extract_completion_text(body: Any) -> str:
    """Pull ``choices[0].message.content`` out of a decoded success body.

    Raises:
        MalformedUpstreamResponseError: if any step of the path is missing
            or the content is not a string.
    """
    if not isinstance(body, dict):
        raise MalformedUpstreamResponseError("completion body is not a JSON object")

    choices = body.get(_KEY_CHOICES)
    if not isinstance(choices, list) or not choices:
        raise MalformedUpstreamResponseError("completion body has no choices")

    first = choices[0]
    message = first.get(_KEY_MESSAGE) if isinstance(first, dict) else None
    content = message.get(_KEY_CONTENT) if isinstance(message, dict) else None
    if not isinstance(content, str):
        raise MalformedUpstreamResponseError(
            "completion body has no choices[0].message.content"
        )
    return content


class HttpLlmGateway(CompletionGateway):
    """OpenAI-compatible chat-completion client.

    ``transport`` is only for tests (``httpx.MockTransport``); production
    uses httpx's default transport.
    """

    def __init__(
        self,
        config: LLMConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._url = config.endpoint.rstrip("/") + COMPLETIONS_PATH
        if not config.api_key:
            logger.warning("LLM api_key is empty; requests are sent unauthenticated.")

    @property
    def model_name(self) -> str:
        return self._config.model_name

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    async def complete(self, instruction: str) -> str:
        model = self._config.model_name
        payload = build_completion_payload(
            instruction,
            model=model,
            temperature=self._config.temperature,
            system_instruction=self._config.system_instruction,
        )

        with tracer.start_as_current_span(SPAN_LLM_COMPLETE) as span:
            span.set_attribute(ATTR_LLM_MODEL, model)
            span.set_attribute(ATTR_LLM_PROMPT_LEN, len(instruction))

            LLM_CALLS_IN_FLIGHT.labels(model_name=model).inc()
            start = time.monotonic()
            try:
                async with httpx.AsyncClient(
                    timeout=self._config.model_timeout.total_seconds(),
                    transport=self._transport,
                ) as client:
                    response = await client.post(
                        self._url, json=payload, headers=self._headers()
                    )
            except httpx.TransportError as e:
                LLM_CALLS_TOTAL.labels(model_name=model, status="unavailable").inc()
                logger.warning("LLM upstream unreachable: %s", type(e).__name__)
                raise GatewayUnavailableError(
                    f"LLM upstream unreachable: {type(e).__name__}"
                ) from e
            finally:
                LLM_CALLS_IN_FLIGHT.labels(model_name=model).dec()
                LLM_LATENCY_SECONDS.labels(model_name=model).observe(
                    time.monotonic() - start
                )

            span.set_attribute(ATTR_LLM_STATUS_CODE, response.status_code)

            if not response.is_success:
                LLM_CALLS_TOTAL.labels(model_name=model, status="rejected").inc()
                logger.warning(
                    "LLM upstream returned HTTP %d: %s",
                    response.status_code,
                    response.text[:_LOG_BODY_LIMIT],
                )
                raise GatewayRejectedError(response.status_code, response.text)

            try:
                text = extract_completion_text(response.json())
            except ValueError as e:
                LLM_CALLS_TOTAL.labels(model_name=model, status="malformed").inc()
                raise MalformedUpstreamResponseError(
                    "completion body is not valid JSON"
                ) from e
            except MalformedUpstreamResponseError:
                LLM_CALLS_TOTAL.labels(model_name=model, status="malformed").inc()
                raise

            LLM_CALLS_TOTAL.labels(model_name=model, status="ok").inc()
            return text
