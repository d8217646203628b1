"""Tests for the HTTP LLM gateway and its concurrency gate."""

from __future__ import annotations

import asyncio
import json
from datetime import timedelta

import httpx
import pytest

from chatrecall.configs.system import LLMConfig
from chatrecall.core.context.errors import (
    GatewayRejectedError,
    GatewayUnavailableError,
    MalformedUpstreamResponseError,
)
from chatrecall.core.llm.gated import GatedLlmGateway
from chatrecall.core.llm.gateway import (
    HttpLlmGateway,
    build_completion_payload,
    extract_completion_text,
)
from chatrecall.infra.concurrency import LocalSemaphoreBackend, ModelSemaphore

from conftest import FakeGateway


def _config(**overrides) -> LLMConfig:
    values = {
        "endpoint": "https://llm.test/v1/",
        "api_key": "sk-test",
        "model_name": "test-model",
    }
    values.update(overrides)
    return LLMConfig(**values)


def _completion(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _gateway(handler, **overrides) -> HttpLlmGateway:
    return HttpLlmGateway(_config(**overrides), transport=httpx.MockTransport(handler))


# =========================================================================
# Wire format
# =========================================================================


class TestWireFormat:
    def test_payload_shape(self):
        payload = build_completion_payload(
            "find it", model="m", temperature=0.2, system_instruction="JSON only"
        )
        assert payload == {
            "model": "m",
            "temperature": 0.2,
            "messages": [
                {"role": "system", "content": "JSON only"},
                {"role": "user", "content": "find it"},
            ],
        }

    @pytest.mark.asyncio
    async def test_request_sent(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_completion('{"summary": "s"}'))

        text = await _gateway(handler).complete("the prompt")

        assert text == '{"summary": "s"}'
        [request] = seen
        assert request.method == "POST"
        assert str(request.url) == "https://llm.test/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["Content-Type"] == "application/json"
        body = json.loads(request.content)
        assert body["model"] == "test-model"
        assert body["temperature"] == 0.2
        assert body["messages"][0]["role"] == "system"
        assert body["messages"][0]["content"] == (
            "You are a helpful assistant that returns ONLY valid JSON."
        )
        assert body["messages"][1] == {"role": "user", "content": "the prompt"}

    @pytest.mark.asyncio
    async def test_no_auth_header_without_key(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_completion("{}"))

        await _gateway(handler, api_key="").complete("p")
        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_content_returned_verbatim(self):
        raw = "```json\n{\"summary\": \"s\"}\n```"
        gateway = _gateway(lambda r: httpx.Response(200, json=_completion(raw)))
        assert await gateway.complete("p") == raw


# =========================================================================
# Failure mapping
# =========================================================================


class TestFailureMapping:
    @pytest.mark.asyncio
    async def test_connect_error_is_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(GatewayUnavailableError) as exc_info:
            await _gateway(handler).complete("p")
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(GatewayUnavailableError):
            await _gateway(handler).complete("p")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 429, 500, 503])
    async def test_error_status_is_rejected(self, status):
        gateway = _gateway(lambda r: httpx.Response(status, text="upstream says no"))

        with pytest.raises(GatewayRejectedError) as exc_info:
            await gateway.complete("p")

        assert exc_info.value.status_code == status
        assert exc_info.value.body == "upstream says no"
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_non_json_body_is_malformed(self):
        gateway = _gateway(lambda r: httpx.Response(200, text="<html>ok</html>"))
        with pytest.raises(MalformedUpstreamResponseError):
            await gateway.complete("p")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"choices": []},
            {"choices": [{}]},
            {"choices": [{"message": {}}]},
            _completion(None),
            _completion(42),
            ["not", "an", "object"],
        ],
    )
    async def test_missing_content_is_malformed(self, body):
        gateway = _gateway(lambda r: httpx.Response(200, json=body))
        with pytest.raises(MalformedUpstreamResponseError):
            await gateway.complete("p")


class TestExtractCompletionText:
    def test_empty_string_is_content(self):
        assert extract_completion_text(_completion("")) == ""


# =========================================================================
# Concurrency gate
# =========================================================================


def _semaphore(max_concurrency: int, timeout: float) -> ModelSemaphore:
    return ModelSemaphore(
        LocalSemaphoreBackend(max_concurrency=max_concurrency),
        acquire_timeout=timedelta(seconds=timeout),
    )


class _BlockingGateway(FakeGateway):
    def __init__(self) -> None:
        super().__init__(reply="done")
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def complete(self, instruction: str) -> str:
        self.entered.set()
        await self.release.wait()
        return await super().complete(instruction)


class TestGatedLlmGateway:
    @pytest.mark.asyncio
    async def test_passes_through(self):
        gated = GatedLlmGateway(FakeGateway(reply="text"), _semaphore(1, 1.0))
        assert await gated.complete("p") == "text"

    @pytest.mark.asyncio
    async def test_busy_model_is_unavailable(self):
        inner = _BlockingGateway()
        gated = GatedLlmGateway(inner, _semaphore(1, 0.05))

        holder = asyncio.create_task(gated.complete("first"))
        await inner.entered.wait()

        with pytest.raises(GatewayUnavailableError, match="busy"):
            await gated.complete("second")

        inner.release.set()
        assert await holder == "done"

    @pytest.mark.asyncio
    async def test_slot_released_after_error(self):
        semaphore = _semaphore(1, 0.05)
        failing = GatedLlmGateway(
            FakeGateway(error=GatewayUnavailableError("down")), semaphore
        )
        with pytest.raises(GatewayUnavailableError):
            await failing.complete("p")

        ok = GatedLlmGateway(FakeGateway(reply="ok"), semaphore)
        assert await ok.complete("p") == "ok"
