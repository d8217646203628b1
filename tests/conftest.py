"""Shared fixtures: in-memory stores and a scripted LLM gateway."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from chatrecall.configs.system import ContextConfig
from chatrecall.core.context.models import Message
from chatrecall.core.context.service import ContextRetrievalService
from chatrecall.core.context.stores import MembershipStore, MessageStore
from chatrecall.core.llm.gateway import CompletionGateway

BASE_TIME = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)


def make_message(
    message_id: int,
    *,
    room_id: int = 1,
    sender_id: int = 7,
    content: str | None = None,
    minutes: int | None = None,
) -> Message:
    return Message(
        id=message_id,
        room_id=room_id,
        sender_id=sender_id,
        content=content if content is not None else f"message {message_id}",
        created_at=BASE_TIME + timedelta(minutes=minutes if minutes is not None else message_id),
    )


class FakeMessageStore(MessageStore):
    """Returns the configured messages most-recent-first, like the SQL store."""

    def __init__(
        self,
        by_room: dict[int, list[Message]] | None = None,
        by_requester: dict[int, list[Message]] | None = None,
    ) -> None:
        self.by_room = by_room or {}
        self.by_requester = by_requester or {}
        self.calls: list[tuple[str, int, int]] = []

    async def fetch_recent_by_room(self, room_id: int, limit: int) -> list[Message]:
        self.calls.append(("room", room_id, limit))
        return list(self.by_room.get(room_id, []))[:limit]

    async def fetch_recent_for_requester(
        self, requester_id: int, limit: int
    ) -> list[Message]:
        self.calls.append(("requester", requester_id, limit))
        return list(self.by_requester.get(requester_id, []))[:limit]


class FakeMembershipStore(MembershipStore):
    def __init__(self, members: set[tuple[int, int]] | None = None) -> None:
        self.members = members or set()

    async def is_member(self, room_id: int, user_id: int) -> bool:
        return (room_id, user_id) in self.members


class FakeGateway(CompletionGateway):
    """Returns ``reply`` (or raises ``error``) and records every instruction."""

    def __init__(self, reply: str = "", error: BaseException | None = None) -> None:
        self.reply = reply
        self.error = error
        self.instructions: list[str] = []

    async def complete(self, instruction: str) -> str:
        self.instructions.append(instruction)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def context_config() -> ContextConfig:
    return ContextConfig()


@pytest.fixture
def message_store() -> FakeMessageStore:
    return FakeMessageStore()


@pytest.fixture
def membership_store() -> FakeMembershipStore:
    return FakeMembershipStore()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def service(
    message_store: FakeMessageStore,
    membership_store: FakeMembershipStore,
    gateway: FakeGateway,
    context_config: ContextConfig,
) -> ContextRetrievalService:
    return ContextRetrievalService(
        message_store, membership_store, gateway, context_config
    )
