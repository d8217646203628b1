"""Domain models for context retrieval.

All of these are request-scoped value objects; nothing here is cached
or shared between requests.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime

from .errors import InvalidInputError


class ContextMode(str, enum.Enum):
    """Which candidate window a query is answered from."""

    ROOM_SCOPED = "room_scoped"
    GLOBAL = "global"


@dataclass(frozen=True)
class Message:
    """A stored chat message, as read from the message store."""

    id: int
    room_id: int
    sender_id: int
    content: str
    created_at: datetime


@dataclass(frozen=True)
class ContextQuery:
    """Per-request query.  Validated on construction."""

    query: str
    mode: ContextMode
    requester_id: int | None
    room_id: int | None = None

    def __post_init__(self) -> None:
        if self.query is None or not self.query.strip():
            raise InvalidInputError("query is required")
        # Stored trimmed so the prompt never carries stray whitespace.
        object.__setattr__(self, "query", self.query.strip())

        if self.mode is ContextMode.ROOM_SCOPED:
            if self.room_id is None or self.room_id <= 0:
                raise InvalidInputError("roomId is required")
        elif self.room_id is not None:
            raise InvalidInputError("roomId is not allowed for a global query")

    @classmethod
    def for_room(
        cls, requester_id: int | None, room_id: int | None, query: str
    ) -> ContextQuery:
        return cls(
            query=query,
            mode=ContextMode.ROOM_SCOPED,
            requester_id=requester_id,
            room_id=room_id,
        )

    @classmethod
    def for_requester(cls, requester_id: int | None, query: str) -> ContextQuery:
        return cls(query=query, mode=ContextMode.GLOBAL, requester_id=requester_id)


@dataclass(frozen=True)
class LlmResult:
    """What the model claims: a summary and the ids it picked.

    ``message_ids`` is advisory until grounded against the window.
    """

    summary: str = ""
    message_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class ContextMessage:
    """A grounded message returned to the caller."""

    id: int
    content: str
    created_at: datetime
    room_id: int

    @classmethod
    def from_message(cls, message: Message) -> ContextMessage:
        return cls(
            id=message.id,
            content=message.content,
            created_at=message.created_at,
            room_id=message.room_id,
        )


@dataclass(frozen=True)
class ContextResponse:
    """Final result: the model's summary plus the grounded messages."""

    summary: str
    messages: list[ContextMessage] = field(default_factory=list)
