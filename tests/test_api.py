"""HTTP-level tests for the context endpoints.

The lifespan (database, semaphore) is never entered: the client is used
without a ``with`` block and the service dependency is overridden.
"""

from __future__ import annotations

import asyncio
import json
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from chatrecall.app import app
from chatrecall.configs.config import get_api_config
from chatrecall.configs.system import APIConfig, ContextConfig
from chatrecall.core.context.deps import get_context_service
from chatrecall.core.context.service import ContextRetrievalService

from conftest import FakeGateway, FakeMembershipStore, FakeMessageStore, make_message

ROOM = 1
USER = 42
HEADERS = {"X-User-Id": str(USER)}


class _SlowGateway(FakeGateway):
    async def complete(self, instruction: str) -> str:
        await asyncio.sleep(5)
        return await super().complete(instruction)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(
        reply=json.dumps({"summary": "release plan", "messageIds": [11, 999, 13]})
    )


@pytest.fixture
def message_store() -> FakeMessageStore:
    window = [make_message(i, room_id=ROOM) for i in (13, 12, 11, 10)]
    return FakeMessageStore(by_room={ROOM: window}, by_requester={USER: window})


@pytest.fixture
def client(message_store, gateway):
    def _service() -> ContextRetrievalService:
        return ContextRetrievalService(
            message_store,
            FakeMembershipStore({(ROOM, USER)}),
            gateway,
            ContextConfig(),
        )

    app.dependency_overrides[get_context_service] = _service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestFindContext:
    def test_success(self, client):
        response = client.post(
            "/api/v1/ai/find-context",
            json={"roomId": ROOM, "query": "when is the release?"},
            headers=HEADERS,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["summary"] == "release plan"
        assert [m["id"] for m in body["messages"]] == [13, 11]
        first = body["messages"][0]
        assert set(first) == {"id", "content", "createdAt", "roomId"}
        assert first["roomId"] == ROOM
        assert first["content"] == "message 13"

    def test_missing_identity(self, client):
        response = client.post(
            "/api/v1/ai/find-context", json={"roomId": ROOM, "query": "q"}
        )
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    @pytest.mark.parametrize("value", ["abc", "0", "-5", ""])
    def test_invalid_identity(self, client, value):
        response = client.post(
            "/api/v1/ai/find-context",
            json={"roomId": ROOM, "query": "q"},
            headers={"X-User-Id": value},
        )
        assert response.status_code == 401

    def test_not_a_member(self, client):
        response = client.post(
            "/api/v1/ai/find-context",
            json={"roomId": 2, "query": "q"},
            headers=HEADERS,
        )
        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_blank_query(self, client):
        response = client.post(
            "/api/v1/ai/find-context",
            json={"roomId": ROOM, "query": "   "},
            headers=HEADERS,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"

    def test_missing_room(self, client):
        response = client.post(
            "/api/v1/ai/find-context", json={"query": "q"}, headers=HEADERS
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"

    def test_missing_query(self, client):
        response = client.post(
            "/api/v1/ai/find-context", json={"roomId": ROOM}, headers=HEADERS
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"

    def test_query_too_long(self, client):
        response = client.post(
            "/api/v1/ai/find-context",
            json={"roomId": ROOM, "query": "x" * 5000},
            headers=HEADERS,
        )
        assert response.status_code == 400

    def test_gateway_failure_is_opaque(self, client, gateway):
        gateway.reply = "no json here"
        response = client.post(
            "/api/v1/ai/find-context",
            json={"roomId": ROOM, "query": "q"},
            headers=HEADERS,
        )
        assert response.status_code == 500
        assert response.json() == {
            "detail": "AI context failed",
            "code": "CONTEXT_RETRIEVAL_FAILED",
        }

    def test_request_timeout(self, message_store):
        app.dependency_overrides[get_context_service] = lambda: ContextRetrievalService(
            message_store,
            FakeMembershipStore({(ROOM, USER)}),
            _SlowGateway(),
            ContextConfig(),
        )
        app.dependency_overrides[get_api_config] = lambda: APIConfig(
            request_timeout=timedelta(milliseconds=50)
        )
        try:
            response = TestClient(app).post(
                "/api/v1/ai/find-context",
                json={"roomId": ROOM, "query": "q"},
                headers=HEADERS,
            )
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 500
        assert response.json()["code"] == "CONTEXT_RETRIEVAL_FAILED"


class TestFindContextGlobal:
    def test_success(self, client):
        response = client.post(
            "/api/v1/ai/find-context-global",
            json={"query": "when is the release?"},
            headers=HEADERS,
        )
        assert response.status_code == 200
        assert [m["id"] for m in response.json()["messages"]] == [13, 11]

    def test_empty_history(self, client, message_store, gateway):
        message_store.by_requester.clear()
        response = client.post(
            "/api/v1/ai/find-context-global", json={"query": "q"}, headers=HEADERS
        )
        assert response.status_code == 200
        assert response.json() == {
            "summary": ContextConfig().empty_global_summary,
            "messages": [],
        }
        assert gateway.instructions == []

    def test_missing_identity(self, client):
        response = client.post("/api/v1/ai/find-context-global", json={"query": "q"})
        assert response.status_code == 401


class TestHealth:
    def test_health(self):
        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
